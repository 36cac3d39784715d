"""Scope frames for the lox evaluator. Frames form a singly-linked chain from the innermost scope out to the globals.

A frame is shared by every closure created while it was active, so it lives on after the block that created it for as
long as any of those closures is reachable.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """One lexical scope: name -> value bindings plus the enclosing frame (None only for the global frame)."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this frame. Redefinition silently overwrites (only possible for globals)."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up in this frame, then outward."""
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Rebinds name (a Token) in the nearest frame that declares it."""
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        """Returns the frame distance hops out from this one."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name (a str) directly from the frame distance hops out. The resolver guarantees it is there."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        """Writes name (a Token) directly into the frame distance hops out."""
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({self.values!r}, enclosing={'None' if self.enclosing is None else '...'})"
