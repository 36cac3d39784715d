"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd
import io

from lox.lang.error import Context, ErrorHandler
from lox.lang.lexical import Scanner
from lox.lang.tokens import TokenType


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def needs_continuation(source):
        """Whether source has unclosed braces, i.e. the entry goes on over the next line. Braces inside strings and
        comments do not count.
        """
        context = Context(ErrorHandler(fatal=False, stream=io.StringIO()))  # reported for real once the entry runs
        types = [token.type for token in Scanner(source, context).scan_tokens()]
        return types.count(TokenType.LEFT_BRACE) > types.count(TokenType.RIGHT_BRACE)

    def default(self, line):
        """Executes arbitrary lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source = self._tmp_line + line + "\n"

            if self.needs_continuation(source):
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            self.sess.run(source)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lox interpreter!\n\n"
              "Lox is a small dynamically-typed scripting language with closures and classes.\n"
              "Each line you type is run as soon as it is complete; a line that opens more\n"
              "braces than it closes continues on the next one.\n\n"
              "Try it out by typing 'var greeting = \"hi\";' and then 'print greeting;'.\n"
              "Type 'exit' (or end-of-file) to leave.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
