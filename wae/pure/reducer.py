"""Substitution of With bindings and evaluation of the resulting binding-free tree.

The substitution itself is implemented by the sub/resolve methods of each node in lexical.py. This module wraps them
with a recursion guard: substitution can produce trees far deeper than the parsed expr, and a RecursionError
should surface as a WAE error rather than a Python one.
"""

from wae.lang.error import DepthError
from wae.pure.lexical import WaeTerm


def apply(expr, binding):
    """Replaces every free occurence of binding's identifier in expr with binding's value."""
    try:
        return expr.sub(binding)
    except RecursionError:
        raise DepthError("maximum recursion depth exceeded while substituting '{}'", binding.name)


def resolve(expr):
    """Returns expr with every With eliminated. resolve(resolve(expr)) == resolve(expr)."""
    try:
        return expr.resolve()
    except RecursionError:
        raise DepthError("maximum recursion depth exceeded during substitution")


class SubstitutionReducer:
    """Parses, resolves and calculates a single WAE expression. Keeps the parsed tree around: resolving builds a new
    tree instead of modifying it.
    """

    def __init__(self, expr, original_expr=None):
        self.original_expr = original_expr if original_expr else expr
        self.tree = WaeTerm.generate_tree(expr, self.original_expr)

        self.resolved = None
        self.value = None

    def resolve(self):
        """Returns (and caches) the binding-free version of self.tree."""
        if self.resolved is None:
            self.resolved = resolve(self.tree)
        return self.resolved

    def calc(self):
        """Resolves self.tree if needed and returns its value. Raises UnboundIdentifierError if an identifier was never
        bound.
        """
        tree = self.resolve()
        try:
            self.value = tree.calc()
        except RecursionError:
            raise DepthError("maximum recursion depth exceeded while calculating '{}'", self.original_expr)
        return self.value

    def __repr__(self):
        return repr(self.tree)

    def __str__(self):
        return self.tree.display()
