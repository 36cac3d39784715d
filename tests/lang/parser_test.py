import io
import unittest

from lox.grammar import expr as ex
from lox.grammar import stmt as st
from lox.grammar.printer import AstPrinter
from lox.lang.error import Context, ErrorHandler
from lox.lang.lexical import Scanner
from lox.lang.parser import Parser


def parse(source):
    context = Context(ErrorHandler(fatal=False, stream=io.StringIO()))
    tokens = Scanner(source, context).scan_tokens()
    return Parser(tokens, context).parse(), context


def show(source):
    statements, context = parse(source)
    assert not context.had_error, context.diagnostics
    return " ".join(AstPrinter().print(statement) for statement in statements)


class ExpressionTestCase(unittest.TestCase):

    def test_precedence_and_associativity(self):
        cases = {
            "1 - 2 - 3;": "(; (- (- 1 2) 3))",
            "1 + 2 * 3;": "(; (+ 1 (* 2 3)))",
            "(1 + 2) * 3;": "(; (* (group (+ 1 2)) 3))",
            "8 / 4 / 2;": "(; (/ (/ 8 4) 2))",
            "1 < 2 == 3 >= 4;": "(; (== (< 1 2) (>= 3 4)))",
            "!-x;": "(; (! (- x)))",
            "!!true;": "(; (! (! true)))",
            "a or b and c;": "(; (or a (and b c)))",
            "a and b or c and d;": "(; (or (and a b) (and c d)))",
            "a == b != c;": "(; (!= (== a b) c))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_assignment(self):
        cases = {
            "a = 1;": "(; (= a 1))",
            "a = b = 1;": "(; (= a (= b 1)))",
            "a.b = 1;": "(; (.= b a 1))",
            "a.b.c = 1;": "(; (.= c (. b a) 1))",
            "a = b or c;": "(; (= a (or b c)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_calls_and_properties(self):
        cases = {
            "f();": "(; (call f))",
            "f(1, 2);": "(; (call f 1 2))",
            "f(1)(2);": "(; (call (call f 1) 2))",
            "f(1)(2).x;": "(; (. x (call (call f 1) 2)))",
            "a.b.c();": "(; (call (. c (. b a))))",
            "this.x;": "(; (. x this))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_literals(self):
        cases = {
            "nil;": "(; nil)",
            "true;": "(; true)",
            "false;": "(; false)",
            "2.5;": "(; 2.5)",
            '"s";': '(; "s")',
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_nodes_are_distinct(self):
        statements, __ = parse("a; a;")
        first, second = statements[0].expression, statements[1].expression
        self.assertIsInstance(first, ex.Variable)
        self.assertNotEqual(first.node_id, second.node_id)
        self.assertNotEqual(first, second)


class StatementTestCase(unittest.TestCase):

    def test_statements(self):
        cases = {
            "print 1;": "(print 1)",
            "var a;": "(var a)",
            "var a = 1;": "(var a 1)",
            "{ var a = 1; print a; }": "(block (var a 1) (print a))",
            "if (a) print 1;": "(if a (print 1))",
            "if (a) print 1; else print 2;": "(if-else a (print 1) (print 2))",
            "while (a) print 1;": "(while a (print 1))",
            "fun add(a, b) { return a + b; }": "(fun add(a b) (return (+ a b)))",
            "fun f() { return; }": "(fun f() (return))",
            "class A { m() { return this; } }": "(class A (fun m() (return this)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_dangling_else_binds_to_nearest_if(self):
        self.assertEqual("(if a (if-else b (print 1) (print 2)))", show("if (a) if (b) print 1; else print 2;"))

    def test_for_is_desugared(self):
        cases = {
            "for (var i = 0; i < 3; i = i + 1) print i;":
                "(block (var i 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))",
            "for (;;) x;": "(while true (; x))",
            "for (i = 0; i < 1;) x;": "(block (; (= i 0)) (while (< i 1) (; x)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

        statements, __ = parse("for (;;) x;")
        self.assertIsInstance(statements[0], st.While)

    def test_class_methods(self):
        statements, context = parse("class A { init(x) { this.x = x; } get() { return this.x; } }")
        self.assertFalse(context.had_error)
        self.assertIsInstance(statements[0], st.Class)
        self.assertEqual(["init", "get"], [method.name.lexeme for method in statements[0].methods])
        self.assertEqual(["x"], [param.lexeme for param in statements[0].methods[0].params])


class ErrorTestCase(unittest.TestCase):

    def test_errors_are_batched(self):
        statements, context = parse("var = 1;\nprint ;\nprint 2;")
        self.assertTrue(context.had_error)
        self.assertEqual(2, len(context.diagnostics))
        self.assertEqual([1, 2], [d.line for d in context.diagnostics])
        self.assertEqual(["Expect variable name.", "Expect expression."], [d.message for d in context.diagnostics])
        self.assertEqual(1, len(statements))  # only `print 2;` survives

    def test_error_locations(self):
        __, context = parse("print 1")
        self.assertEqual(" at end", context.diagnostics[0].where)
        self.assertEqual("Expect ';' after value.", context.diagnostics[0].message)

        __, context = parse("print );")
        self.assertEqual(" at ')'", context.diagnostics[0].where)

    def test_invalid_assignment_target(self):
        statements, context = parse("1 = 2;\na + b = c;")
        self.assertEqual(["Invalid assignment target."] * 2, [d.message for d in context.diagnostics])
        self.assertEqual([" at '='"] * 2, [d.where for d in context.diagnostics])
        self.assertEqual(2, len(statements))  # best-effort nodes are still returned

    def test_too_many_parameters(self):
        params = ", ".join(f"p{idx}" for idx in range(256))
        statements, context = parse(f"fun f({params}) {{}}")
        self.assertEqual(["Can't have more than 255 parameters."], [d.message for d in context.diagnostics])
        self.assertEqual(256, len(statements[0].params))

    def test_too_many_arguments(self):
        args = ", ".join("1" for __ in range(256))
        statements, context = parse(f"f({args});")
        self.assertEqual(["Can't have more than 255 arguments."], [d.message for d in context.diagnostics])
        self.assertEqual(256, len(statements[0].expression.arguments))

    def test_255_is_allowed(self):
        params = ", ".join(f"p{idx}" for idx in range(255))
        __, context = parse(f"fun f({params}) {{}}")
        self.assertFalse(context.had_error)

    def test_super_is_reserved(self):
        __, context = parse("super.x;")
        self.assertEqual(["Expect expression."], [d.message for d in context.diagnostics])

    def test_recovers_inside_blocks(self):
        statements, context = parse("{ print ; print 1; }\nfun f( { }\nprint 3;")
        self.assertEqual(2, len(context.diagnostics))
        self.assertIsInstance(statements[-1], st.Print)


if __name__ == '__main__':
    unittest.main()
