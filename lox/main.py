"""Runs the lox interpreter on a .lox file, or in command-line mode when no file is given. Also uses the error handling
context manager. Installed as the `lox` executable.
"""

import argparse
import sys

from lox.lang.error import EX_DATAERR, EX_NOINPUT, EX_SOFTWARE, EX_USAGE, ErrorHandler, LoxError
from lox.lang.session import Session, run_on_deep_stack
from lox.lang.shell import Shell


def run(script):
    """Runs script, or the shell if script is None. Returns the process exit status."""
    with ErrorHandler() as error_handler:
        if script is not None:
            sess = Session(error_handler, script, cmd_line=False)
            try:
                context = sess.run_file()
            except LoxError as error:
                error_handler.fatal = False
                error_handler.throw(error.message)
                return EX_NOINPUT

            if context.had_error:
                return EX_DATAERR
            if context.had_runtime_error:
                return EX_SOFTWARE

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()

    return 0


def main(argv=None):
    """Runs lox interpreter. Returns the process exit status."""
    parser = argparse.ArgumentParser(prog="lox")
    parser.add_argument("script", help="file to interpret and run (if empty, goes to command-line mode)", nargs="*")
    args = parser.parse_args(argv)

    if len(args.script) > 1:
        print("Usage: lox [script]")
        return EX_USAGE

    with ErrorHandler():  # interrupts are delivered to this thread, not to the one running lox
        return run_on_deep_stack(run, args.script[0] if args.script else None)


if __name__ == "__main__":
    sys.exit(main())
