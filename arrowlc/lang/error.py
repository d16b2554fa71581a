"""Error handling for arrowlc. Only GenericExceptions should be encountered during running: if another type of error
is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Each pipeline stage has its own GenericException subclass, and every stage raises as soon as it finds a problem. The
message of an error is part of the observable output, so it is kept free of color codes: colors are only added by
ErrorHandler when it prints.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be reported by ErrorHandler."""

    def __init__(self, msg, expr=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException. expr should be the offending expr that caused the error, and start/end
        the span inside it that should be highlighted.
        """
        super().__init__(msg)

        self.msg = msg
        self.expr = expr if expr is not None else ""
        self.start = start
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal


class LexError(GenericException):
    """Invalid character or malformed arrow in the program text."""


class ParseError(GenericException):
    """Token sequence that cannot be grouped into a single parenthesis tree."""


class ConstructionError(GenericException):
    """Parenthesis tree that does not have the shape of any λ-term."""


class EvaluationError(GenericException):
    """Reduction that was given up on before reaching a normal form."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report arrowlc errors."""
    ERROR = "red"

    def __init__(self, fatal=True, verbose=False):
        self.fatal = fatal
        self.verbose = verbose  # whether or not to print traceback and diagnosis
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error):
        """Returns offending part of error.expr highlighted and bolded."""
        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Reports error using error and self.traceback. error must be a GenericException. Exits if self.fatal."""
        if self.verbose:
            for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
                if line is not None:
                    print(f"  File '{file}', line {line_num}:")
                    print(f"    {line}")

        prefix = colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"]) if error.internal else ""
        print(prefix + colored(error.msg, ErrorHandler.ERROR, attrs=["bold"]))

        if self.verbose and not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # if error occurred, reset traceback

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("program is nested too deeply", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
