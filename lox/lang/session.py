"""Session control for the lox language. Runs source through the whole pipeline (Scanner -> Parser -> Resolver ->
Interpreter), either one file at a time or one command-line entry at a time.
"""

import os
import sys
import threading

from lox.grammar.printer import AstPrinter
from lox.lang.error import Context, LoxError
from lox.lang.interpreter import Interpreter, stringify
from lox.lang.lexical import Scanner
from lox.lang.parser import Parser
from lox.lang.resolver import Resolver


VERBOSE_ENV = "LOX_DEBUG"  # set to "1" to dump the resolved AST (and, in command-line mode, the globals)

RECURSION_LIMIT = 30000          # one lox call costs about 8 python frames
STACK_SIZE = 256 * 1024 * 1024   # room for RECURSION_LIMIT frames on the worker thread


def run_on_deep_stack(function, *args):
    """Calls function(*args) on a worker thread with a large stack and a raised recursion limit, so that lox programs
    can recurse and nest thousands of levels deep. Returns its result; anything it raises is re-raised here.
    """
    result, raised = [], []

    def target():
        try:
            result.append(function(*args))
        except BaseException as error:  # re-raised in the calling thread below
            raised.append(error)

    # the limit is process-wide, so it only stays raised while the calling thread waits on the worker
    previous_limit = sys.getrecursionlimit()
    previous_size = threading.stack_size(STACK_SIZE)
    sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
    try:
        worker = threading.Thread(target=target, daemon=True)
        worker.start()
        worker.join()
    finally:
        threading.stack_size(previous_size)
        sys.setrecursionlimit(previous_limit)

    if raised:
        raise raised[0]
    return result[0]


class Session:
    """Governs a lox session. The Interpreter, and with it the global frame, lives as long as the session does; every
    unit of source run through it gets a fresh Context.
    """
    SH_FILE = "<stdin>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, cmd_line=False, verbose=None, out=None):
        self.error_handler = error_handler
        self.path = path          # used for messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.verbose = verbose if verbose is not None else os.environ.get(VERBOSE_ENV) == "1"
        self.out = out

        self.interpreter = Interpreter(out)
        self.printer = AstPrinter()

        if self.cmd_line:
            self.error_handler.fatal = False

    def run(self, source):
        """Runs source as one top-level unit. Returns the unit's Context, which records what went wrong (if anything).
        Nothing is evaluated if scanning, parsing or resolution reported an error.
        """
        context = Context(self.error_handler)

        tokens = Scanner(source, context).scan_tokens()
        statements = Parser(tokens, context).parse()
        if context.had_error:
            return context

        resolver = Resolver(context)
        resolver.resolve(statements)
        if context.had_error:
            return context

        self.interpreter.resolve(resolver.locals)

        if self.verbose:
            for statement in statements:
                self._show("ast: " + self.printer.print(statement))

        self.interpreter.interpret(statements, context)

        if self.verbose and self.cmd_line:
            self._show("globals: " + self.dump_globals())

        return context

    def run_file(self):
        """Reads and runs self.path."""
        try:
            with open(self.path, "r") as file:
                source = file.read()
        except OSError:
            raise LoxError(f"'{self.path}' could not be opened")

        return self.run(source)

    def dump_globals(self):
        """Returns the global frame's bindings as `name = value` pairs (natives included)."""
        return ", ".join(f"{name} = {stringify(value)}" for name, value in self.interpreter.globals.values.items())

    def _show(self, text):
        print(text, file=self.out)
