"""Handles interactive/command-line mode for the WAE interpreter. Uses cmd as backend."""

import cmd

from wae.lang.session import Session
from wae.pure.reducer import SubstitutionReducer


class Shell(cmd.Cmd):
    """WAE interpreter shell."""
    intro = "WAE interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Calculates arbitrary WAE expression."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = Session.preprocess_line(self._tmp_line + " " + line, bool(self._tmp_line))
            line = line.strip()

            if line and add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt

            elif line:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(line, self.line_num)
                self.sess.run()

                if self.sess.results:
                    print(self.sess.pop())

    def do_tree(self, arg):
        """Displays the parsed and resolved syntax trees of a WAE expression."""
        with self.sess.error_handler:
            self.line_num += 1
            self.sess.error_handler.register_line(self.sess.path, arg, self.line_num)

            reducer = SubstitutionReducer(arg)
            print(f"parsed:\n{reducer.tree.display()}\n")
            print(f"resolved:\n{reducer.resolve().display()}")

            self.sess.error_handler.remove_line(self.sess.path)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the WAE interpreter!\n\n"
              "WAE (With-Arithmetic-Expressions) is a tiny prefix arithmetic language with \n"
              "local bindings. Operators are +, -, * and /, each taking exactly two operands, \n"
              "and 'with' binds a name in its body.\n\n"
              "Try it out by typing '(with ([x 5]) (* x x))'. This will bind 'x' to 5 in \n"
              "'(* x x)', giving 25 as the result. Type 'tree <expr>' to see how an \n"
              "expression is parsed and how its bindings are substituted.")

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
