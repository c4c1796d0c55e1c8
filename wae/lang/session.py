"""Session control for the WAE interpreter, either in command line mode or file interpretation mode. Every expression
in a session is independent: bindings never leak from one expression to another.
"""

import math

from wae.lang.error import GenericException
from wae.lang.numerical import numberify
from wae.pure.reducer import SubstitutionReducer


class Session:
    """Governs a WAE session: a queue of expressions to calculate and their results."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path, cmd_line, verbose=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.verbose = verbose    # whether or not to display parsed and resolved trees

        self.to_exec = {}  # dict of line num: SubstitutionReducers to calculate
        self.results = []  # calculated SubstitutionReducers, in order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = Session.preprocess_line(line, add_to_prev, exprs, line_num + 1)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr in exprs:
                self.add(*expr)

        elif not cmd_line:
            raise GenericException("'{}' is a reserved filename", Session.SH_FILE, diagnosis=False)

    @staticmethod
    def preprocess_line(line, add_to_prev, exprs=None, line_num=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of file's exprs), but add_to_prev will indicate whether a line continuation is necessary. Returns
        updated value of line and add_to_prev.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.rstrip()
        if exprs is not None:
            if add_to_prev and exprs:
                prev, prev_line_num = exprs.pop()
                line = prev + " " + line.strip()
                exprs.append((line, prev_line_num))
            elif line and not line.isspace():
                exprs.append((line, line_num))

        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num, original_expr=None):
        """Parses expr and queues it for calculation. Substitution is lazy and is delayed until run is called."""
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        self.to_exec[line_num] = SubstitutionReducer(expr, original_expr)

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs this session's queued expressions by resolving them and then calculating them. Will raise any errors
        that are encountered.
        """
        for line_num, reducer in sorted(self.to_exec.items()):
            self.error_handler.register_line(self.path, reducer.original_expr, line_num)

            try:
                if self.verbose:
                    print(f"parsed:\n{reducer.tree.display()}\n")
                    print(f"resolved:\n{reducer.resolve().display()}\n")

                value = reducer.calc()
                if not math.isfinite(value):
                    self.error_handler.warn("'{}' evaluates to " + numberify(value), reducer.original_expr)

                self.results.append(reducer)
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Pops the last result and returns its value as a string."""
        return numberify(self.results.pop().value)
