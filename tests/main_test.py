import io
import unittest
from contextlib import redirect_stdout

from arrowlc.lang.error import ErrorHandler
from arrowlc.lang.session import Session
from arrowlc.lang.shell import run_shell
from arrowlc.main import main


def call(argv):
    out = io.StringIO()
    with redirect_stdout(out):
        main(argv)
    return out.getvalue()


class MainTestCase(unittest.TestCase):

    def test_program(self):
        cases = {
            "((n -> (f -> (x -> (f ((n f) x))))) (f -> (x -> (f (f (f x))))))": "(f -> (x -> (f (f (f (f x))))))\n",
            "((p -> (p (x -> (y -> x)))) (p -> ((p a) b)))": "a\n",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, call([case]), case)

    def test_stage(self):
        self.assertEqual("(x -> (x.1 -> x.1))\n", call(["--stage", "define", "(x -> (x -> x))"]))

    def test_error(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as context:
            main(["(x y z)"])

        self.assertEqual(1, context.exception.code)
        self.assertIn("Application has too many terms", out.getvalue())


class ShellTestCase(unittest.TestCase):

    def test_lines(self):
        stdin = io.StringIO("((x -> x) y)\n(x)\n\n((x -> (x x)) (x -> (x x)))\n(x -> (y -> x))\n")
        out = io.StringIO()
        with redirect_stdout(out):
            run_shell(Session(ErrorHandler(fatal=False)), stdin=stdin)

        lines = out.getvalue().splitlines()
        self.assertEqual(4, len(lines), lines)
        self.assertEqual("y", lines[0])
        self.assertIn("Expected more symbols after name", lines[1])
        self.assertIn("Hit recursion limit", lines[2])
        self.assertEqual("(x -> (y -> x))", lines[3])

    def test_exit(self):
        stdin = io.StringIO("x\nexit\ny\n")
        out = io.StringIO()
        with redirect_stdout(out):
            run_shell(Session(ErrorHandler(fatal=False)), stdin=stdin)

        self.assertEqual(["x"], out.getvalue().splitlines())


if __name__ == '__main__':
    unittest.main()
