"""Renders lox syntax trees as parenthesised prefix text, e.g. `1 - 2 - 3` -> `(- (- 1 2) 3)`. Used by verbose mode."""

from lox.grammar import expr as ex
from lox.grammar import stmt as st
from lox.lang.error import InternalError


class AstPrinter:
    """Displays expressions and statements. Same format for both, so whole programs can be dumped."""

    def print(self, node):
        if isinstance(node, ex.Expr):
            return self.print_expr(node)
        return self.print_stmt(node)

    def print_expr(self, expression):
        if isinstance(expression, ex.Literal):
            return self.literal(expression.value)
        elif isinstance(expression, ex.Grouping):
            return self.parenthesize("group", expression.expression)
        elif isinstance(expression, ex.Unary):
            return self.parenthesize(expression.operator.lexeme, expression.right)
        elif isinstance(expression, (ex.Binary, ex.Logical)):
            return self.parenthesize(expression.operator.lexeme, expression.left, expression.right)
        elif isinstance(expression, ex.Variable):
            return expression.name.lexeme
        elif isinstance(expression, ex.Assign):
            return self.parenthesize(f"= {expression.name.lexeme}", expression.value)
        elif isinstance(expression, ex.Call):
            return self.parenthesize("call", expression.callee, *expression.arguments)
        elif isinstance(expression, ex.Get):
            return self.parenthesize(f". {expression.name.lexeme}", expression.object)
        elif isinstance(expression, ex.Set):
            return self.parenthesize(f".= {expression.name.lexeme}", expression.object, expression.value)
        elif isinstance(expression, ex.This):
            return "this"

        raise InternalError(f"cannot print expression of type {type(expression).__name__}")

    def print_stmt(self, statement):
        if isinstance(statement, st.Expression):
            return self.parenthesize(";", statement.expression)
        elif isinstance(statement, st.Print):
            return self.parenthesize("print", statement.expression)
        elif isinstance(statement, st.Var):
            if statement.initializer is None:
                return f"(var {statement.name.lexeme})"
            return self.parenthesize(f"var {statement.name.lexeme}", statement.initializer)
        elif isinstance(statement, st.Block):
            return self.parenthesize("block", *statement.statements)
        elif isinstance(statement, st.If):
            if statement.else_branch is None:
                return self.parenthesize("if", statement.condition, statement.then_branch)
            return self.parenthesize("if-else", statement.condition, statement.then_branch, statement.else_branch)
        elif isinstance(statement, st.While):
            return self.parenthesize("while", statement.condition, statement.body)
        elif isinstance(statement, st.Function):
            params = " ".join(param.lexeme for param in statement.params)
            return self.parenthesize(f"fun {statement.name.lexeme}({params})", *statement.body)
        elif isinstance(statement, st.Return):
            if statement.value is None:
                return "(return)"
            return self.parenthesize("return", statement.value)
        elif isinstance(statement, st.Class):
            return self.parenthesize(f"class {statement.name.lexeme}", *statement.methods)

        raise InternalError(f"cannot print statement of type {type(statement).__name__}")

    def parenthesize(self, name, *nodes):
        return "(" + " ".join([name] + [self.print(node) for node in nodes]) + ")"

    @staticmethod
    def literal(value):
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return f"\"{value}\""
        text = str(value)
        return text[:-2] if text.endswith(".0") else text
