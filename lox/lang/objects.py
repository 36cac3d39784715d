"""Runtime values of the lox language that have no direct Python counterpart.

nil, booleans, numbers and strings are plain None, bool, float and str. Callables are one of the three classes below
(NativeFunction, LoxFunction, LoxClass); the Interpreter handles each of them with its own branch when calling.
"""

from lox.lang.environment import Environment
from lox.lang.error import LoxRuntimeError


class NativeFunction:
    """Callable implemented in Python."""

    def __init__(self, name, arity, function):
        self.name = name
        self.arity = arity
        self.function = function

    def __str__(self):
        return "<native fn>"


class LoxFunction:
    """Declared function or method: its declaration plus the frame that was active where it was declared."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def arity(self):
        return len(self.declaration.params)

    def bind(self, instance):
        """Returns a fresh copy of this function whose closure is extended by one frame defining `this`."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass:
    """Class value: a name and its method table (name -> LoxFunction)."""

    def __init__(self, name, methods):
        self.name = name
        self.methods = methods

    def find_method(self, name):
        return self.methods.get(name)

    @property
    def arity(self):
        initializer = self.find_method("init")
        return initializer.arity if initializer is not None else 0

    def __str__(self):
        return f"<class {self.name}>"


class LoxInstance:
    """Instance of a LoxClass. Fields are created on first write; methods stay on the class."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Returns field name (a Token), or else the method of that name bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}' on {self}.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"<{self.klass.name} instance>"
