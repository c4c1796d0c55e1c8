"""WAE (With-Arithmetic-Expressions) interpreter. Interprets files of expressions, a single expression, or runs in
command-line mode. Also uses error handling context manager. Called from the wae console script.

Basic program flow:
    1. Parser: produces a WAE AST by recursively tokenizing each expression (see wae/pure/lexical.py)
    2. Substitution: eliminates every With binding from the AST (see wae/pure/reducer.py)
    3. Calculation: folds the binding-free AST to a float

Every expression is independent: a file is just a list of expressions, one per line (lines with unbalanced '(' are
continued on the next line).
"""

import argparse

from wae.lang.error import ErrorHandler
from wae.lang.numerical import numberify
from wae.lang.session import Session
from wae.lang.shell import Shell
from wae.pure.lexical import WaeTerm


def main():
    """Runs WAE interpreter. Called from wae console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(description="With-Arithmetic-Expressions interpreter")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("-e", "--expr", help="single expression to calculate")
        parser.add_argument("-t", "--tree", help="display parsed and resolved syntax trees", action="store_true")
        parser.add_argument("--max-depth", help="maximum nesting of parentheses", type=int, default=WaeTerm.MAX_DEPTH)
        args = parser.parse_args()

        WaeTerm.MAX_DEPTH = args.max_depth

        if args.expr is not None:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, verbose=args.tree)
            error_handler.fatal = True

            sess.add(args.expr, 1)
            sess.run()
            print(sess.pop())

        elif args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, verbose=args.tree)
            sess.run()

            for reducer in sess.results:
                print(f"{reducer.original_expr} = {numberify(reducer.value)}")

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, verbose=args.tree)).cmdloop()


if __name__ == "__main__":
    main()
