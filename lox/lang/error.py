"""Error handling for the lox language. Static diagnostics (lexical, syntactic, resolution) are recorded on a Context
and do not interrupt their phase; runtime faults are raised as LoxRuntimeErrors and abort the current unit. If any other
type of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys
from dataclasses import dataclass, field

from termcolor import colored

from lox.lang.tokens import TokenType


EX_USAGE = 64     # wrong number of command-line arguments
EX_DATAERR = 65   # static error in a script
EX_NOINPUT = 66   # script could not be read
EX_SOFTWARE = 70  # runtime fault or internal error


class LoxError(Exception):
    """Superclass of every user-facing lox error."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class LoxRuntimeError(LoxError):
    """Fault raised during evaluation. token is the offending token, used for line/lexeme context."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


class InternalError(LoxError):
    """Invariant violation that the grammar should make unreachable (e.g. unsupported operator for a node kind)."""


@dataclass(frozen=True)
class Diagnostic:
    """Static diagnostic or warning: source line, location in source (may be empty) and message."""
    line: int
    where: str
    message: str
    warning: bool = False


@dataclass
class Context:
    """Record of one top-level execution unit (one file run or one interactive line). A fresh Context is created for
    every unit, so the error flags never leak from one unit into the next.
    """
    handler: "ErrorHandler"
    had_error: bool = False
    had_runtime_error: bool = False
    diagnostics: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    fault: LoxRuntimeError = None

    def report(self, line, where, message):
        """Records and prints a static diagnostic."""
        diagnostic = Diagnostic(line, where, message)
        self.diagnostics.append(diagnostic)
        self.had_error = True
        self.handler.report(diagnostic)

    def error(self, token, message):
        """Reports a static diagnostic located at token."""
        if token.type is TokenType.EOF:
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def warn(self, token, message):
        """Records and prints a non-fatal warning. Does not touch had_error."""
        diagnostic = Diagnostic(token.line, f" at '{token.lexeme}'", message, warning=True)
        self.warnings.append(diagnostic)
        self.handler.report(diagnostic)

    def runtime_fault(self, error):
        """Records and prints a LoxRuntimeError that aborted this unit."""
        self.had_runtime_error = True
        self.fault = error
        self.handler.runtime_fault(error)


class ErrorHandler:
    """Diagnostic sink and context manager that will silently suppress Python errors and print lox errors instead."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream  # None means sys.stderr at the time of writing

    def _write(self, text):
        print(text, file=self.stream if self.stream is not None else sys.stderr)

    def report(self, diagnostic):
        """Prints a static diagnostic or warning."""
        if diagnostic.warning:
            kind = colored("warning: ", ErrorHandler.WARNING, attrs=["bold"])
        else:
            kind = colored(f"error{diagnostic.where}: ", ErrorHandler.ERROR, attrs=["bold"])

        self._write(colored(f"[line {diagnostic.line}] ", attrs=["bold"]) + kind + diagnostic.message)

    def runtime_fault(self, error):
        """Prints a runtime fault."""
        prefix = colored(f"[line {error.token.line}] ", attrs=["bold"]) if error.token else ""
        self._write(prefix + colored("runtime error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.message)

    def throw(self, message, internal=False):
        """Prints an error that did not come from a lox program. Exits if the handler is fatal."""
        error_msg = ""
        if internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + message
        self._write(error_msg)

        if self.fatal:
            sys.exit(EX_SOFTWARE)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw("keyboard interrupt")
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is InternalError:
            self.throw(exc_val.message, internal=True)
        elif exc_type is not None:
            self.throw(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True)

        return not do_exit
