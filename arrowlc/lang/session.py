"""Session control for arrowlc. Runs programs through the interpreter pipeline, either once for a program given on the
command line or line by line in command-line mode.

Pipeline stages, in order:
    1. Lex: program text -> list of Tokens (pure/parse.py)
    2. Parse: Tokens -> generic parenthesis tree (pure/parse.py)
    3. Construct: parenthesis tree -> LambdaTerm (pure/lexical.py)
    4. Define: binder identities are resolved in place (pure/lexical.py)
    5. Eval: normal-order beta reduction (pure/lexical.py)
"""

from enum import Enum

from termcolor import colored

from arrowlc.pure.lexical import LambdaTerm, evaluate
from arrowlc.pure.parse import WHITESPACE, lex, parse


class Stage(Enum):
    """Last pipeline stage to run."""
    LEX = "lex"
    PARSE = "parse"
    CONSTRUCT = "construct"
    DEFINE = "define"
    EVAL = "eval"


def pipeline(expr, stage=Stage.EVAL, on_step=None):
    """Runs expr through the pipeline up to and including stage, and returns that stage's result: a list of Tokens,
    a parse tree Node, or a LambdaTerm. Errors of any stage are raised as they are.
    """
    tokens = lex(expr)
    if stage is Stage.LEX:
        return tokens

    tree = parse(tokens)
    if stage is Stage.PARSE:
        return tree

    term = LambdaTerm.generate_tree(tree)
    if stage is Stage.CONSTRUCT:
        return term

    term.resolve()
    if stage is Stage.DEFINE:
        return term

    return evaluate(term, on_step=on_step)


def display(result):
    """Returns printable form of a pipeline result."""
    if isinstance(result, list):
        return " ".join(str(token) for token in result)
    return str(result)


class Session:
    """Governs an arrowlc session: keeps track of programs to run and their results."""
    SH_FILE = "<in>"    # command-line interpreter filename
    ARG_FILE = "<arg>"  # filename used for a program given as an argument

    def __init__(self, error_handler, path=SH_FILE, stage=Stage.EVAL, steps=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path    # used for error messages
        self.stage = stage  # last pipeline stage to run
        self.steps = steps  # whether or not to print every beta reduction

        self.to_exec = {}   # dict of line num: program text to execute
        self.results = []   # printable results, oldest first

    @staticmethod
    def preprocess_line(line):
        """Removes trailing newline and surrounding spaces."""
        return line.strip(WHITESPACE)

    def add(self, expr, line_num=1):
        """Adds program to the current session. Evaluation is lazy and is delayed until run is called."""
        self.to_exec[line_num] = Session.preprocess_line(expr)

    def run(self):
        """Runs this session's programs through the pipeline and stores their results. Will raise any errors that are
        encountered; the failing program is dropped either way.
        """
        for line_num, expr in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

            try:
                result = pipeline(expr, self.stage, self.print_step if self.steps else None)
            finally:
                del self.to_exec[line_num]

            self.results.append(display(result))
            self.error_handler.remove_line(self.path)  # error was not raised

    def pop(self):
        """Removes and returns the oldest result."""
        return self.results.pop(0)

    @staticmethod
    def print_step(term):
        """Prints a single beta reduction step."""
        print(colored("β ", attrs=["dark"]) + str(term))
