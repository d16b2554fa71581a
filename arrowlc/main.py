"""Uses implementation of pure lambda calculus to run a single program or run in command-line mode. Also uses error
handling context manager. Called from the arrowlc console script.
"""

import argparse

from arrowlc.lang.error import ErrorHandler
from arrowlc.lang.session import Session, Stage
from arrowlc.lang.shell import run_shell


def build_parser():
    """Returns the argument parser for the arrowlc command."""
    parser = argparse.ArgumentParser(prog="arrowlc", description="Evaluates lambda calculus programs written as "
                                                                 "'(x -> body)' abstractions and '(f x)' applications.")
    parser.add_argument("program", help="program to run (if empty, reads programs from stdin line by line)", nargs="?")
    parser.add_argument("--stage", choices=[stage.value for stage in Stage], default=Stage.EVAL.value,
                        help="last pipeline stage to run (default: eval)")
    parser.add_argument("--steps", action="store_true", help="print every beta reduction step")
    parser.add_argument("-v", "--verbose", action="store_true", help="show where errors happened")
    return parser


def main(argv=None):
    """Runs arrowlc interpreter. Called from arrowlc console script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)
        error_handler.verbose = args.verbose
        stage = Stage(args.stage)

        if args.program is not None:
            sess = Session(error_handler, Session.ARG_FILE, stage, args.steps)
            sess.add(args.program)
            sess.run()

            for result in sess.results:
                print(result)

        else:
            error_handler.fatal = False
            run_shell(Session(error_handler, Session.SH_FILE, stage, args.steps))


if __name__ == "__main__":
    main()
