import io
import os
import tempfile
import unittest

from lox.lang.error import ErrorHandler, LoxError
from lox.lang.session import Session, run_on_deep_stack
from lox.lang.shell import Shell


def new_session(**kwargs):
    out, err = io.StringIO(), io.StringIO()
    kwargs.setdefault("verbose", False)
    sess = Session(ErrorHandler(fatal=False, stream=err), out=out, **kwargs)
    return sess, out, err


class SessionTestCase(unittest.TestCase):

    def test_static_error_blocks_evaluation(self):
        cases = [
            "print 1; print ;",          # syntax
            "print 1; @",                # lexical
            "print 1; return 2;",        # resolution
            "print 1; { var a = a; }",
        ]
        for case in cases:
            sess, out, __ = new_session()
            context = sess.run(case)
            self.assertTrue(context.had_error, case)
            self.assertFalse(context.had_runtime_error, case)
            self.assertEqual("", out.getvalue(), case)

    def test_two_syntax_errors_one_run(self):
        sess, out, err = new_session()
        context = sess.run("print (1;\nvar 2 = x;\nprint 3;")
        self.assertEqual(2, len(context.diagnostics))
        self.assertEqual("", out.getvalue())
        self.assertEqual(2, len(err.getvalue().splitlines()))

    def test_warnings_do_not_block_evaluation(self):
        sess, out, err = new_session()
        context = sess.run("{ var a = 1; } print 2;")
        self.assertFalse(context.had_error)
        self.assertEqual(1, len(context.warnings))
        self.assertEqual("2\n", out.getvalue())
        self.assertIn("Local variable 'a' is never used.", err.getvalue())

    def test_globals_persist_between_units(self):
        sess, out, __ = new_session(cmd_line=True)
        sess.run("var a = 1;")
        sess.run("fun show() { print a; }")
        sess.run("a = a + 1;")
        sess.run("show();")
        self.assertEqual("2\n", out.getvalue())

    def test_closures_persist_between_units(self):
        sess, out, __ = new_session(cmd_line=True)
        sess.run("fun make() { var n = 0; fun inc() { n = n + 1; print n; } return inc; }")
        sess.run("var inc = make();")
        sess.run("inc();")
        sess.run("inc();")
        self.assertEqual("1\n2\n", out.getvalue())

    def test_fresh_context_per_unit(self):
        sess, out, __ = new_session(cmd_line=True)
        first = sess.run("print ;")
        second = sess.run("print -nil;")
        third = sess.run("print 1;")

        self.assertTrue(first.had_error)
        self.assertFalse(second.had_error)
        self.assertTrue(second.had_runtime_error)
        self.assertFalse(third.had_error)
        self.assertFalse(third.had_runtime_error)
        self.assertEqual("1\n", out.getvalue())

    def test_deep_nesting(self):
        source = "print " + "(" * 400 + "1" + ")" * 400 + ";\nprint 2;"

        sess, out, err = new_session()
        context = sess.run(source)
        self.assertTrue(context.had_error)
        self.assertEqual(["Expression nesting too deep."], [d.message for d in context.diagnostics])
        self.assertEqual("", out.getvalue())
        self.assertIn("[line 1] ", err.getvalue())

        sess, out, __ = new_session()
        context = run_on_deep_stack(sess.run, source)
        self.assertFalse(context.had_error)
        self.assertEqual("1\n2\n", out.getvalue())

    def test_deep_blocks(self):
        source = "{" * 300 + "print 1;" + "}" * 300
        sess, out, __ = new_session()
        context = run_on_deep_stack(sess.run, source)
        self.assertFalse(context.had_error)
        self.assertEqual("1\n", out.getvalue())

    def test_verbose(self):
        sess, out, __ = new_session(verbose=True)
        sess.run("var a = 1 + 2; print a;")
        self.assertEqual(["ast: (var a (+ 1 2))", "ast: (print a)", "3"], out.getvalue().splitlines())

    def test_verbose_command_line_dumps_globals(self):
        sess, out, __ = new_session(verbose=True, cmd_line=True)
        sess.run("var a = 1;")
        self.assertEqual(["ast: (var a 1)", "globals: clock = <native fn>, a = 1"], out.getvalue().splitlines())

    def test_verbose_from_environment(self):
        previous = os.environ.get("LOX_DEBUG")
        try:
            os.environ["LOX_DEBUG"] = "1"
            self.assertTrue(Session(ErrorHandler(fatal=False)).verbose)
            os.environ["LOX_DEBUG"] = "0"
            self.assertFalse(Session(ErrorHandler(fatal=False)).verbose)
        finally:
            if previous is None:
                os.environ.pop("LOX_DEBUG", None)
            else:
                os.environ["LOX_DEBUG"] = previous

    def test_run_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "script.lox")
            with open(path, "w") as file:
                file.write('var greeting = "hello";\nprint greeting;\n')

            sess, out, __ = new_session(path=path)
            context = sess.run_file()

        self.assertFalse(context.had_error)
        self.assertEqual("hello\n", out.getvalue())

    def test_run_missing_file(self):
        sess, __, __ = new_session(path=os.path.join(tempfile.gettempdir(), "does", "not", "exist.lox"))
        self.assertRaises(LoxError, sess.run_file)


class ShellTestCase(unittest.TestCase):

    def test_lines_run_as_units(self):
        sess, out, __ = new_session(cmd_line=True)
        shell = Shell(sess)
        shell.onecmd("var a = 2;")
        shell.onecmd("print a * 3;")
        shell.onecmd("print ;")      # error, but the session goes on
        shell.onecmd("print -nil;")  # runtime fault, likewise
        shell.onecmd("print a;")
        self.assertEqual("6\n2\n", out.getvalue())

    def test_continuation(self):
        sess, out, __ = new_session(cmd_line=True)
        shell = Shell(sess)
        shell.onecmd("fun f() {")
        self.assertEqual(Shell.secondary_prompt, shell.prompt)
        shell.onecmd("print 1;")
        shell.onecmd("}")
        self.assertEqual(Shell._tmp_prompt, shell.prompt)
        shell.onecmd("f();")
        self.assertEqual("1\n", out.getvalue())

    def test_needs_continuation(self):
        should_continue = ["fun f() {", "class A { m() {", "{ print \"}\";"]
        for case in should_continue:
            self.assertTrue(Shell.needs_continuation(case), case)

        should_not_continue = ["print \"{\";", "print 1; // {", "{ }", "print \"unterminated {", "}"]
        for case in should_not_continue:
            self.assertFalse(Shell.needs_continuation(case), case)

    def test_braces_in_strings_and_comments(self):
        sess, out, __ = new_session(cmd_line=True)
        shell = Shell(sess)
        shell.onecmd("print \"{\"; // {")
        self.assertEqual(Shell._tmp_prompt, shell.prompt)
        shell.onecmd("print 1;")
        self.assertEqual("{\n1\n", out.getvalue())

    def test_exit(self):
        sess, __, __ = new_session(cmd_line=True)
        self.assertTrue(Shell(sess).onecmd("exit"))

    def test_command_line_session_is_not_fatal(self):
        sess, __, __ = new_session(cmd_line=True)
        self.assertFalse(sess.error_handler.fatal)


if __name__ == '__main__':
    unittest.main()
