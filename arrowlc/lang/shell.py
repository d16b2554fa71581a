"""Handles interactive/command-line mode for arrowlc. Uses cmd as backend."""

import cmd
import sys


class Shell(cmd.Cmd):
    """Lambda calculus interpreter shell. Every line is a separate program."""
    intro = "Lambda calculus interpreter :: arrow syntax\nType '?' or 'help' for more information."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

        if not self.stdin.isatty():  # reading a piped program: only print results
            self.intro = None
            self.prompt = ""

    def default(self, line):
        """Executes arbitrary arrowlc program."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.add(line, self.line_num)
            self.sess.run()

            while self.sess.results:
                print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the arrowlc interpreter!\n\n"
              "Lambda calculus is a Turing-complete language created by Alonzo Church. This \n"
              "interpreter supports pure lambda calculus with single-letter names, written as \n"
              "'(x -> body)' for abstractions and '(f x)' for applications.\n\n"
              "Try it out by typing '((x -> x) y)'. This will apply the identity function to \n"
              "'y', giving 'y' as the result.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        if self.stdin.isatty():
            print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True


def run_shell(sess, stdin=None):
    """Runs Shell on sess until stdin is exhausted."""
    shell = Shell(sess, stdin=stdin if stdin is not None else sys.stdin)
    shell.use_rawinput = stdin is None and shell.stdin.isatty()
    shell.cmdloop()
