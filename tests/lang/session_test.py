import unittest
from unittest import mock

from arrowlc.lang.error import ConstructionError, ErrorHandler, EvaluationError, GenericException, LexError, \
    ParseError
from arrowlc.lang.session import Session, Stage, display, pipeline
from arrowlc.pure.lexical import Abstraction, Variable
from arrowlc.pure.parse import Name, Token


def run(expr, stage=Stage.EVAL):
    return display(pipeline(expr, stage))


class PipelineTestCase(unittest.TestCase):

    def test_stages(self):
        self.assertEqual([Token(Token.NAME, "x")], pipeline("x", Stage.LEX))
        self.assertEqual(Name("x"), pipeline("x", Stage.PARSE))
        self.assertEqual(Abstraction("x", Variable("x")), pipeline("(x -> x)", Stage.CONSTRUCT))
        self.assertEqual(Abstraction("x", Variable("x", 0), 0), pipeline("(x -> x)", Stage.DEFINE))
        self.assertEqual(Variable("y", 1), pipeline("((x -> x) y)", Stage.EVAL))

    def test_display(self):
        self.assertEqual("( x -> x )", run("(x->x)", Stage.LEX))
        self.assertEqual("(x -> (x -> x))", run("(x->(x->x))", Stage.PARSE))
        self.assertEqual("(x -> (x.1 -> x.1))", run("(x->(x->x))", Stage.DEFINE))

    def test_church_encodings(self):
        cases = {
            # 3 = 3
            "(f -> (x -> (f (f (f x)))))": "(f -> (x -> (f (f (f x)))))",
            # (increment 3) = 4
            "((n -> (f -> (x -> (f ((n f) x))))) (f -> (x -> (f (f (f x))))))": "(f -> (x -> (f (f (f (f x))))))",
            # (plus 1 1) = 2
            "(((m -> (n -> (f -> (x -> ((m f) ((n f) x)))))) (f -> (x -> (f x)))) (f -> (x -> (f x))))":
                "(f -> (x -> (f (f x))))",
            # (and true true) = true
            "(((p -> (q -> ((p q) p))) (x -> (y -> x))) (x -> (y -> x)))": "(x -> (y -> x))",
            # (and true false) = false
            "(((p -> (q -> ((p q) p))) (x -> (y -> x))) (x -> (y -> y)))": "(x -> (y -> y))",
            # (or false true) = true
            "(((p -> (q -> ((p p) q))) (x -> (y -> y))) (x -> (y -> x)))": "(x -> (y -> x))",
            # (not true) = false
            "((p -> ((p (x -> (y -> y))) (x -> (y -> x)))) (x -> (y -> x)))": "(x -> (y -> y))",
            # (ifThenElse true 3 0) = 3
            "((((p -> (a -> (b -> ((p a) b)))) (x -> (y -> x))) (f -> (x -> (f (f (f x)))))) (f -> (x -> x)))":
                "(f -> (x -> (f (f (f x)))))",
            # (ifThenElse false 3 0) = 0
            "((((p -> (a -> (b -> ((p a) b)))) (x -> (y -> y))) (f -> (x -> (f (f (f x)))))) (f -> (x -> x)))":
                "(f -> (x -> x))",
            # (isZero 1) = false
            "((n -> ((n (p -> (x -> (y -> y)))) (x -> (y -> x)))) (f -> (x -> (f x))))": "(x -> (y -> y))",
            # (isZero 0) = true
            "((n -> ((n (p -> (x -> (y -> y)))) (x -> (y -> x)))) (f -> (x -> x)))": "(x -> (y -> x))",
            # (makePair 0 1) = (pair 0 1)
            "(((a -> (b -> (p -> ((p a) b)))) (f -> (x -> x))) (f -> (x -> (f x))))":
                "(p -> ((p (f -> (x -> x))) (f -> (x -> (f x)))))",
            # (fst (pair a b)) = a
            "((p -> (p (x -> (y -> x)))) (p -> ((p a) b)))": "a",
            # (snd (pair a b)) = b
            "((p -> (p (x -> (y -> y)))) (p -> ((p a) b)))": "b",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_non_interference(self):
        self.assertEqual("(y -> (a -> a))", run("((x -> (y -> x)) (a -> a))"))
        # the free y of the argument must not be captured by the binder y
        self.assertEqual("(y -> (x -> y.3))", run("((f -> (y -> f)) (x -> y))"))

    def test_trailing_input(self):
        self.assertEqual("y", run("((x -> x) y)) z"))
        self.assertEqual("y", run("((x -> x) y"))

    def test_definitions(self):
        self.assertEqual("(i : (x -> x))", run("(i : (x -> x))"))
        self.assertEqual("(t : (x -> (y -> x)))", run("(t : ((a -> a) (x -> (y -> x))))"))

    def test_errors(self):
        cases = {
            "A": (LexError, "'A' is never a valid character"),
            ">": (LexError, "'>' must be preceded by '-'"),
            "": (ParseError, "Empty program!"),
            "x y": (ParseError, "Missing parentheses"),
            "(x)": (ConstructionError, "Expected more symbols after name"),
            "(x -> x y)": (ConstructionError, "Lambda body has too many terms"),
            "(x y z)": (ConstructionError, "Application has too many terms"),
            "(x y) z": (ConstructionError, "Application has too many terms"),
            "(x -> x) y": (ConstructionError, "Lambda body has too many terms"),
            "(x\t-> x)": (LexError, "'\t' is never a valid character"),
            "((x -> (x x)) (x -> (x x)))": (EvaluationError, "Hit recursion limit"),
        }
        for case, (error, msg) in cases.items():
            with self.assertRaises(error, msg=case) as context:
                pipeline(case)
            self.assertIsInstance(context.exception, GenericException, case)
            self.assertEqual(msg, str(context.exception), case)


class SessionTestCase(unittest.TestCase):

    def test_run(self):
        sess = Session(ErrorHandler(fatal=False))
        sess.add("((x -> x) y)\n", 1)
        sess.add("(x -> (y -> x))", 2)
        sess.run()

        self.assertEqual(["y", "(x -> (y -> x))"], sess.results)
        self.assertEqual("y", sess.pop())
        self.assertFalse(sess.to_exec)

    def test_run_error(self):
        sess = Session(ErrorHandler(fatal=False))
        sess.add("(x)", 3)
        self.assertRaises(ConstructionError, sess.run)

        self.assertFalse(sess.to_exec)
        self.assertFalse(sess.results)
        self.assertEqual(("(x)", 3), sess.error_handler.traceback[Session.SH_FILE])

    def test_line_whitespace(self):
        self.assertEqual("(x -> x)", Session.preprocess_line("  (x -> x) \n"))

        sess = Session(ErrorHandler(fatal=False))
        sess.add("\tx")
        self.assertRaises(LexError, sess.run)

    def test_stage(self):
        sess = Session(ErrorHandler(fatal=False), stage=Stage.LEX)
        sess.add("(x -> y)")
        sess.run()
        self.assertEqual(["( x -> y )"], sess.results)

    def test_steps(self):
        sess = Session(ErrorHandler(fatal=False), steps=True)
        sess.add("((x -> x) ((y -> y) z))")

        with mock.patch("builtins.print") as mock_print:
            sess.run()

        self.assertEqual(2, mock_print.call_count)
        self.assertTrue(mock_print.call_args_list[0][0][0].endswith("((y -> y) z)"))
        self.assertEqual(["z"], sess.results)


if __name__ == '__main__':
    unittest.main()
