import unittest

from wae.lang.error import (ArityError, DelimiterError, DepthError, EmptyInputError, IdentifierError,
                            MalformedNumberError, ParseError, UnknownFormError)
from wae.pure.lexical import (Binary, Binding, Identifier, Number, Operator, WaeTerm, With, parse, split_tokens,
                              strip_ends)


class TokenizerTestCase(unittest.TestCase):

    def test_split_tokens(self):
        should_fail = ["+ 1 2)", "+ (1 2", ") (", "(()", "", "   "]
        for case in should_fail:
            self.assertEqual([], split_tokens(case), case)

        cases = {
            "+ 1 2": ["+", "1", "2"],
            "  +   1     2  ": ["+", "1", "2"],
            "with ([x 1]) x": ["with", "([x 1])", "x"],
            "+   (  /    x 2)    ( * 3     4) ": ["+", "(  /    x 2)", "( * 3     4)"],
            "(a)(b)": ["(a)", "(b)"],
            "a(b c)": ["a(b c)"],
            "x\t(+ 1\n2)": ["x", "(+ 1\n2)"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, split_tokens(case), case)

    def test_strip_ends(self):
        should_fail = [("(", "(", ")"), ("x)", "(", ")"), ("(x", "(", ")"), ("", "[", "]")]
        for case in should_fail:
            self.assertIsNone(strip_ends(*case), case)

        cases = {("(x)", "(", ")"): "x", ("()", "(", ")"): "", ("[x 1]", "[", "]"): "x 1", ("((x))", "(", ")"): "(x)"}
        for case, expected in cases.items():
            self.assertEqual(expected, strip_ends(*case), case)


class WaeTermTestCase(unittest.TestCase):

    def test_generate_tree(self):
        cases = {
            "253354": Number(253354.0),
            "1.5": Number(1.5),
            "2e3": Number(2000.0),
            "7.": Number(7.0),
            "x": Identifier("x"),
            "With": Identifier("With"),
            "λ": Identifier("λ"),
            "(+ 1 2)": Binary(Operator.ADD, Number(1.0), Number(2.0)),
            "(- x 2)": Binary(Operator.SUB, Identifier("x"), Number(2.0)),
            "(* (/ 1 2) y)": Binary(Operator.MUL, Binary(Operator.DIV, Number(1.0), Number(2.0)), Identifier("y")),
            "(with ([x 1]) x)": With(Binding(Identifier("x"), Number(1.0)), Identifier("x")),
            "(with ([x (+ 1 2)]) (with ([y x]) y))": With(
                Binding(Identifier("x"), Binary(Operator.ADD, Number(1.0), Number(2.0))),
                With(Binding(Identifier("y"), Identifier("x")), Identifier("y"))
            ),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, WaeTerm.generate_tree(case), case)

    def test_whitespace(self):
        cases = {
            "  (+ 1 2)  ": "(+ 1 2)",
            "    (   +  1     2    ) ": "(+ 1 2)",
            " (     with    (  [  x    (       -     23   7  ) ])    ( +   (  /    x 2)    ( * 3     4) ))":
                "(with ([x (- 23 7)]) (+ (/ x 2) (* 3 4)))",
            "(with ([x 1])(+ x x))": "(with ([x 1]) (+ x x))",
            "\n(+\t1\n2)\n": "(+ 1 2)",
        }
        for case, expected in cases.items():
            self.assertEqual(parse(expected), parse(case), case)

    def test_parse_errors(self):
        should_raise = {
            "": EmptyInputError,
            "   ": EmptyInputError,
            "()": EmptyInputError,
            "(   )": EmptyInputError,
            "(with ([]) 1)": EmptyInputError,
            "1vtct": MalformedNumberError,
            "1.2.3": MalformedNumberError,
            "1e": MalformedNumberError,
            "(+ 1x 2)": MalformedNumberError,
            "(+ 1 2": DelimiterError,
            "(+ 1 2))": DelimiterError,
            "(+ (1 2)": DelimiterError,
            "(with (x 1) x)": DelimiterError,
            "(with [x 1] x)": ArityError,
            "(with ( x 1 ) x)": DelimiterError,
            "(with ([x 1) x)": DelimiterError,
            "(+ 1 2 3)": ArityError,
            "(+ 1)": ArityError,
            "(+)": ArityError,
            "(with ([x 1]))": ArityError,
            "(with ([x 1]) x y)": ArityError,
            "(with ([x 1 2]) x)": ArityError,
            "(with ([x]) x)": ArityError,
            "(% 1 2)": UnknownFormError,
            "((+ 1 2))": UnknownFormError,
            "(x 1 2)": UnknownFormError,
            "#": UnknownFormError,
            "-1": UnknownFormError,
            ".5": UnknownFormError,
            "with": IdentifierError,
            "x1": IdentifierError,
            "(+ x_y 1)": IdentifierError,
            "(with ([with 1]) 2)": IdentifierError,
            "(with ([1 1]) 2)": IdentifierError,
            "(with ([x 1]) with)": IdentifierError,
        }
        for case, error in should_raise.items():
            self.assertRaises(error, parse, case)
            self.assertRaises(ParseError, parse, case)

    def test_error_span(self):
        with self.assertRaises(ArityError) as context:
            parse("(+ 1 2 3)")
        self.assertEqual("(+ 1 2 3)", context.exception.expr)
        self.assertEqual((7, 8), (context.exception.start, context.exception.end))

        with self.assertRaises(MalformedNumberError) as context:
            parse("(* 2 3x)")
        self.assertEqual((5, 7), (context.exception.start, context.exception.end))

        cases = {
            "(with ([x 1]) (+ x 1 1))": (ArityError, 21, 22),
            "(* 1e5 (+ 2 1e))": (MalformedNumberError, 12, 14),
            "(with ([x 1]) (+ x x1))": (IdentifierError, 19, 21),
            "(with ([x 1]) (with ([x with]) x))": (IdentifierError, 24, 28),
            " (with ([x 1])\t(x 1 1))": (UnknownFormError, 16, 17),
        }
        for case, (error, start, end) in cases.items():
            with self.assertRaises(error) as context:
                parse(case)
            self.assertEqual((start, end), (context.exception.start, context.exception.end), case)

    def test_max_depth(self):
        nested = "(+ 1 " * (WaeTerm.MAX_DEPTH + 1) + "1" + ")" * (WaeTerm.MAX_DEPTH + 1)
        self.assertRaises(DepthError, parse, nested)

        nested = "(+ 1 " * WaeTerm.MAX_DEPTH + "1" + ")" * WaeTerm.MAX_DEPTH
        self.assertIsInstance(parse(nested), Binary)

    def test_expr(self):
        cases = [
            "253354",
            "1.5",
            "(+ 1 2)",
            "(with ([x (- 23 7)]) (+ (/ x 2) (* 3 4)))",
            "(with ([x 1]) (+ (with ([x (* x 2)]) x) x))",
        ]
        for case in cases:
            tree = parse(case)
            self.assertEqual(case, tree.expr, case)
            self.assertEqual(case, str(tree), case)
            self.assertEqual(tree, parse(tree.expr), case)

    def test_display(self):
        cases = {
            "1": "Number: 1",
            "(/ 1 x)": "Divide\n├── Number: 1\n└── Id: x",
            "(with ([x 1]) x)": "With\n├── Binding\n│   ├── Id: x\n│   └── Number: 1\n└── Id: x",
            "(- (* 2 3) 4)": "Subtract\n├── Multiply\n│   ├── Number: 2\n│   └── Number: 3\n└── Number: 4",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse(case).display(), case)

    def test_immutable(self):
        tree = parse("(+ 1 2)")
        with self.assertRaises(AttributeError):
            tree.left = Number(3.0)


class IdentifierTestCase(unittest.TestCase):

    def test_check_grammar(self):
        should_fail = ["", "with", "x1", "x y", "_", "(x)"]
        for case in should_fail:
            self.assertFalse(Identifier.check_grammar(case), case)

        should_pass = ["x", "With", "WITH", "withx", "jksef", "λ"]
        for case in should_pass:
            self.assertTrue(Identifier.check_grammar(case), case)


class OperatorTestCase(unittest.TestCase):

    def test_from_symbol(self):
        self.assertRaises(UnknownFormError, Operator.from_symbol, "%")

        cases = {"+": Operator.ADD, "-": Operator.SUB, "*": Operator.MUL, "/": Operator.DIV}
        for case, expected in cases.items():
            self.assertIs(expected, Operator.from_symbol(case), case)

    def test_apply(self):
        cases = {Operator.ADD: 8.0, Operator.SUB: 4.0, Operator.MUL: 12.0, Operator.DIV: 3.0}
        for case, expected in cases.items():
            self.assertEqual(expected, case.apply(6.0, 2.0), case)


if __name__ == '__main__':
    unittest.main()
