"""Static resolution pass for the lox language. Walks the whole tree once, before anything is evaluated, and works out
for every local variable reference how many frames out its declaration lives (the "hop count").

The result is the side-table Resolver.locals: node_id -> hop count. References with no entry are globals and are
looked up by name in the global frame at run time.

Along the way the resolver reports misuse that the parser cannot see (reading a variable in its own initializer,
redeclaring a local, `return` outside a function, ...), and warns about locals that are never used.
"""

from dataclasses import dataclass
from enum import Enum, auto

from lox.grammar import expr as ex
from lox.grammar import stmt as st
from lox.lang.error import InternalError


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()


class VariableState(Enum):
    DECLARED = auto()  # visible, but its initializer is still being resolved
    DEFINED = auto()
    USED = auto()


@dataclass
class Binding:
    """State of one name in one scope. token is the declaring token (None for the implicit `this`)."""
    token: object
    state: VariableState


class Resolver:
    """Resolves a list of statements, reporting problems on context."""

    def __init__(self, context):
        self.context = context
        self.locals = {}
        self.scopes = []  # innermost last; each maps name -> Binding
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements):
        for statement in statements:
            self.resolve_stmt(statement)
        return self.locals

    # ---- scopes -----------------------------------------------------------------------------------------------------

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        """Pops the innermost scope, warning about every name in it that was never used."""
        scope = self.scopes.pop()
        for name, binding in scope.items():
            if binding.state is not VariableState.USED:
                self.context.warn(binding.token, f"Local variable '{name}' is never used.")

    def declare(self, name):
        if not self.scopes:
            return  # globals are not tracked

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.context.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = Binding(name, VariableState.DECLARED)

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme].state = VariableState.DEFINED

    def resolve_local(self, expression, name):
        """Records the hop count of the innermost scope declaring name. No scope declaring it means global."""
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                scope[name.lexeme].state = VariableState.USED
                self.locals[expression.node_id] = depth
                return

    def resolve_function(self, function, function_type):
        """Parameters and the body's top-level statements share one scope."""
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for statement in function.body:
            self.resolve_stmt(statement)
        self.end_scope()

        self.current_function = enclosing_function

    # ---- statements -------------------------------------------------------------------------------------------------

    def resolve_stmt(self, statement):
        if isinstance(statement, st.Block):
            self.begin_scope()
            for inner in statement.statements:
                self.resolve_stmt(inner)
            self.end_scope()

        elif isinstance(statement, st.Var):
            self.declare(statement.name)
            if statement.initializer is not None:
                self.resolve_expr(statement.initializer)
            self.define(statement.name)

        elif isinstance(statement, st.Function):
            self.declare(statement.name)
            self.define(statement.name)  # defined before the body so the function can recurse
            self.resolve_function(statement, FunctionType.FUNCTION)

        elif isinstance(statement, st.Class):
            self.resolve_class(statement)

        elif isinstance(statement, (st.Expression, st.Print)):
            self.resolve_expr(statement.expression)

        elif isinstance(statement, st.If):
            self.resolve_expr(statement.condition)
            self.resolve_stmt(statement.then_branch)
            if statement.else_branch is not None:
                self.resolve_stmt(statement.else_branch)

        elif isinstance(statement, st.While):
            self.resolve_expr(statement.condition)
            self.resolve_stmt(statement.body)

        elif isinstance(statement, st.Return):
            if self.current_function is FunctionType.NONE:
                self.context.error(statement.keyword, "Can't return from top-level code.")
            if statement.value is not None:
                if self.current_function is FunctionType.INITIALIZER:
                    self.context.error(statement.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(statement.value)

        else:
            raise InternalError(f"cannot resolve statement of type {type(statement).__name__}")

    def resolve_class(self, statement):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(statement.name)
        self.define(statement.name)

        self.begin_scope()
        self.scopes[-1]["this"] = Binding(None, VariableState.USED)  # methods may use `this` or not

        for method in statement.methods:
            function_type = FunctionType.METHOD
            if method.name.lexeme == "init":
                function_type = FunctionType.INITIALIZER
            self.resolve_function(method, function_type)

        self.end_scope()
        self.current_class = enclosing_class

    # ---- expressions ------------------------------------------------------------------------------------------------

    def resolve_expr(self, expression):
        if isinstance(expression, ex.Variable):
            scope = self.scopes[-1] if self.scopes else {}
            binding = scope.get(expression.name.lexeme)
            if binding is not None and binding.state is VariableState.DECLARED:
                self.context.error(expression.name, "Can't read local variable in its own initializer.")
            self.resolve_local(expression, expression.name)

        elif isinstance(expression, ex.Assign):
            self.resolve_expr(expression.value)
            self.resolve_local(expression, expression.name)

        elif isinstance(expression, ex.This):
            if self.current_class is ClassType.NONE:
                self.context.error(expression.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(expression, expression.keyword)

        elif isinstance(expression, (ex.Binary, ex.Logical)):
            self.resolve_expr(expression.left)
            self.resolve_expr(expression.right)

        elif isinstance(expression, ex.Unary):
            self.resolve_expr(expression.right)

        elif isinstance(expression, ex.Grouping):
            self.resolve_expr(expression.expression)

        elif isinstance(expression, ex.Call):
            self.resolve_expr(expression.callee)
            for argument in expression.arguments:
                self.resolve_expr(argument)

        elif isinstance(expression, ex.Get):
            self.resolve_expr(expression.object)  # the property name is looked up dynamically

        elif isinstance(expression, ex.Set):
            self.resolve_expr(expression.value)
            self.resolve_expr(expression.object)

        elif isinstance(expression, ex.Literal):
            pass

        else:
            raise InternalError(f"cannot resolve expression of type {type(expression).__name__}")
