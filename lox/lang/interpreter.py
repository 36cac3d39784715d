"""Tree-walking evaluator for the lox language. Executes statements directly, against a chain of Environment frames
starting at the global frame. Local variables are addressed through the resolver's side-table (see resolver.py);
everything else is looked up by name in the global frame.
"""

import math
from decimal import Decimal

from lox.grammar import expr as ex
from lox.grammar import stmt as st
from lox.lang.environment import Environment
from lox.lang.error import InternalError, LoxRuntimeError
from lox.lang.natives import define_natives
from lox.lang.objects import LoxClass, LoxFunction, LoxInstance, NativeFunction
from lox.lang.tokens import TokenType


class Return(Exception):
    """Unwinds a `return` statement to the nearest enclosing call. Not an error: never a LoxError."""

    def __init__(self, value):
        super().__init__("return")
        self.value = value


def is_truthy(value):
    """nil and false are falsy; everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Equality without coercion: values of different types are never equal."""
    if left is None:
        return right is None
    if type(left) is not type(right):
        return False
    return left == right


def divide(left, right):
    """IEEE-754 division: dividing by zero gives inf, -inf or nan rather than a fault."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def format_number(value):
    """Number spelling shared with the reference lox interpreters: plain decimals for magnitudes in [1e-3, 1e7),
    otherwise one leading digit and an `E` exponent (`1.0E22`, `1.5E-5`). Non-finite values are `Infinity`,
    `-Infinity` and `NaN`.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    magnitude = abs(value)
    if magnitude == 0 or 1e-3 <= magnitude < 1e7:
        return repr(value)  # always fixed-point with at least one fractional digit in this range

    __, digits, exponent = Decimal(repr(magnitude)).normalize().as_tuple()
    mantissa = str(digits[0]) + "." + ("".join(str(digit) for digit in digits[1:]) or "0")
    sign = "-" if value < 0 else ""
    return f"{sign}{mantissa}E{len(digits) - 1 + exponent}"


def stringify(value):
    """Display text used by `print`."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = format_number(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


class Interpreter:
    """Evaluates resolved statements. Lives as long as its Session, so globals persist between interactive lines."""

    def __init__(self, out=None):
        self.out = out  # None means sys.stdout at the time of printing
        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # resolver side-table: node_id -> hop count

        define_natives(self.globals)

    def resolve(self, locals_):
        """Merges a resolver side-table into this interpreter's."""
        self.locals.update(locals_)

    def interpret(self, statements, context):
        """Executes statements in order. A runtime fault aborts the rest and is reported on context."""
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            context.runtime_fault(error)

    # ---- statements -------------------------------------------------------------------------------------------------

    def execute(self, statement):
        if isinstance(statement, st.Expression):
            self.evaluate(statement.expression)

        elif isinstance(statement, st.Print):
            print(stringify(self.evaluate(statement.expression)), file=self.out)

        elif isinstance(statement, st.Var):
            value = None
            if statement.initializer is not None:
                value = self.evaluate(statement.initializer)
            self.environment.define(statement.name.lexeme, value)

        elif isinstance(statement, st.Block):
            self.execute_block(statement.statements, Environment(self.environment))

        elif isinstance(statement, st.If):
            if is_truthy(self.evaluate(statement.condition)):
                self.execute(statement.then_branch)
            elif statement.else_branch is not None:
                self.execute(statement.else_branch)

        elif isinstance(statement, st.While):
            while is_truthy(self.evaluate(statement.condition)):
                self.execute(statement.body)

        elif isinstance(statement, st.Function):
            function = LoxFunction(statement, self.environment)
            self.environment.define(statement.name.lexeme, function)

        elif isinstance(statement, st.Return):
            value = None
            if statement.value is not None:
                value = self.evaluate(statement.value)
            raise Return(value)

        elif isinstance(statement, st.Class):
            self.environment.define(statement.name.lexeme, None)
            methods = {}
            for method in statement.methods:
                is_initializer = method.name.lexeme == "init"
                methods[method.name.lexeme] = LoxFunction(method, self.environment, is_initializer)
            self.environment.assign(statement.name, LoxClass(statement.name.lexeme, methods))

        else:
            raise InternalError(f"cannot execute statement of type {type(statement).__name__}")

    def execute_block(self, statements, environment):
        """Runs statements in environment, restoring the current environment however the block is left."""
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    # ---- expressions ------------------------------------------------------------------------------------------------

    def evaluate(self, expression):
        if isinstance(expression, ex.Literal):
            return expression.value

        elif isinstance(expression, ex.Grouping):
            return self.evaluate(expression.expression)

        elif isinstance(expression, ex.Unary):
            return self.evaluate_unary(expression)

        elif isinstance(expression, ex.Binary):
            return self.evaluate_binary(expression)

        elif isinstance(expression, ex.Logical):
            left = self.evaluate(expression.left)
            if expression.operator.type is TokenType.OR:
                if is_truthy(left):
                    return left
            elif expression.operator.type is TokenType.AND:
                if not is_truthy(left):
                    return left
            else:
                raise InternalError(f"unsupported logical operator '{expression.operator.lexeme}'")
            return self.evaluate(expression.right)

        elif isinstance(expression, ex.Variable):
            return self.look_up_variable(expression.name, expression)

        elif isinstance(expression, ex.Assign):
            value = self.evaluate(expression.value)
            distance = self.locals.get(expression.node_id)
            if distance is not None:
                self.environment.assign_at(distance, expression.name, value)
            else:
                self.globals.assign(expression.name, value)
            return value

        elif isinstance(expression, ex.Call):
            callee = self.evaluate(expression.callee)
            arguments = [self.evaluate(argument) for argument in expression.arguments]
            return self.call(callee, arguments, expression.paren)

        elif isinstance(expression, ex.Get):
            obj = self.evaluate(expression.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expression.name)
            raise LoxRuntimeError(
                expression.name,
                f"Can't read property '{expression.name.lexeme}' of {stringify(obj)}: only instances have properties.")

        elif isinstance(expression, ex.Set):
            obj = self.evaluate(expression.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(
                    expression.name,
                    f"Can't set property '{expression.name.lexeme}' of {stringify(obj)}: only instances have fields.")
            value = self.evaluate(expression.value)
            obj.set(expression.name, value)
            return value

        elif isinstance(expression, ex.This):
            return self.look_up_variable(expression.keyword, expression)

        raise InternalError(f"cannot evaluate expression of type {type(expression).__name__}")

    def look_up_variable(self, name, expression):
        distance = self.locals.get(expression.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def evaluate_unary(self, expression):
        right = self.evaluate(expression.right)
        operator = expression.operator

        if operator.type is TokenType.BANG:
            return not is_truthy(right)
        if operator.type is TokenType.MINUS:
            check_number_operand(operator, right)
            return -right

        raise InternalError(f"unsupported operator for unary expression: '{operator.lexeme}'")

    def evaluate_binary(self, expression):
        left = self.evaluate(expression.left)
        right = self.evaluate(expression.right)
        operator = expression.operator

        if operator.type is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        if operator.type is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if operator.type is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if operator.type not in ARITHMETIC:
            raise InternalError(f"unsupported operator for binary expression: '{operator.lexeme}'")

        check_number_operands(operator, left, right)
        return ARITHMETIC[operator.type](left, right)

    # ---- calls ------------------------------------------------------------------------------------------------------

    def call(self, callee, arguments, paren):
        """Calls callee with already-evaluated arguments. paren locates any fault."""
        if not isinstance(callee, (NativeFunction, LoxFunction, LoxClass)):
            raise LoxRuntimeError(paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity:
            raise LoxRuntimeError(paren, f"Expected {callee.arity} arguments but got {len(arguments)}.")

        try:
            if isinstance(callee, NativeFunction):
                return callee.function(*arguments)
            if isinstance(callee, LoxFunction):
                return self.call_function(callee, arguments)
            return self.instantiate(callee, arguments)
        except RecursionError:
            raise LoxRuntimeError(paren, "Stack overflow.") from None

    def call_function(self, function, arguments):
        environment = Environment(function.closure)
        for param, argument in zip(function.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        try:
            self.execute_block(function.declaration.body, environment)
        except Return as returned:
            if function.is_initializer:
                return function.closure.get_at(0, "this")
            return returned.value

        if function.is_initializer:
            return function.closure.get_at(0, "this")
        return None

    def instantiate(self, klass, arguments):
        instance = LoxInstance(klass)
        initializer = klass.find_method("init")
        if initializer is not None:
            self.call_function(initializer.bind(instance), arguments)
        return instance


ARITHMETIC = {
    TokenType.MINUS: lambda left, right: left - right,
    TokenType.STAR: lambda left, right: left * right,
    TokenType.SLASH: divide,
    TokenType.GREATER: lambda left, right: left > right,
    TokenType.GREATER_EQUAL: lambda left, right: left >= right,
    TokenType.LESS: lambda left, right: left < right,
    TokenType.LESS_EQUAL: lambda left, right: left <= right,
}


def check_number_operand(operator, operand):
    if isinstance(operand, float):
        return
    raise LoxRuntimeError(operator, "Operand must be a number.")


def check_number_operands(operator, left, right):
    if isinstance(left, float) and isinstance(right, float):
        return
    raise LoxRuntimeError(operator, "Operands must be numbers.")
