"""With-Arithmetic-Expressions (WAE) abstract syntax tree generator and parser.

The `pure` directory contains the language itself: parsing, substitution and evaluation of a single expression. It
knows nothing about files, sessions or the shell (see the `lang` directory).

Formally, WAE can be defined as

```
<WAE>     ::= <num>                             ; "number"
                                                ; - standard floating point literal, must start with a digit
            | "(" <op> <WAE> <WAE> ")"          ; "binary"
                                                ; - <op> is one of "+", "-", "*", "/"
                                                ; - exactly two operands: (+ 1 2 3) is not WAE
            | "(" "with" <binding> <WAE> ")"    ; "with"
                                                ; - <binding> is bound in the body, not in itself
            | <id>                              ; "identifier"
                                                ; - must be alphabetic character(s), cannot be "with"

<binding> ::= "(" "[" <id> <WAE> "]" ")"
```

Whitespace only matters as a token separator, so "(   +  1     2 )" == "(+ 1 2)".

Source: https://cs.brown.edu/courses/cs173/2012/book/ (Programming Languages: Application and Interpretation)

------------------------------------------------------------------------------------------------------------------------

Parsing is plain recursive descent: the first character of an expr decides whether it is a Number, Identifier or
parenthesized expression, and the first token inside parentheses decides between Binary and With. There is no
separate lexer pass. Instead, split_tokens splits one level of parentheses at a time and the resulting tokens are
parsed recursively.

All nodes are frozen dataclasses, so substitution always builds new trees and parsed trees can be compared with ==.
"""

import operator
import re
from abc import abstractmethod, ABC
from dataclasses import dataclass
from enum import Enum

from wae.lang.error import (ArityError, DelimiterError, DepthError, EmptyInputError, IdentifierError,
                            MalformedNumberError, UnboundIdentifierError, UnknownFormError)
from wae.lang.numerical import divide, numberify


OPEN_PAREN = "("
CLOSE_PAREN = ")"
OPEN_BRACKET = "["
CLOSE_BRACKET = "]"
KEYWORD = "with"

DIGITS = "0123456789"  # str.isdigit also accepts non-ASCII digits
NUMBER = re.compile(r"[0-9]+(\.[0-9]*)?([eE][+-]?[0-9]+)?")


def split_tokens(expr):
    """Splits expr into top-level tokens: atoms and parenthesized sub-exprs, which are kept whole (whitespace
    included) so they can be split again later. Returns [] if the parentheses in expr are unbalanced.
    """
    tokens = []
    token = ""
    depth = 0

    for char in expr.strip():
        if depth == 0 and char.isspace():
            if token:
                tokens.append(token)
                token = ""
            continue

        token += char
        if char == OPEN_PAREN:
            depth += 1
        elif char == CLOSE_PAREN:
            depth -= 1
            if depth < 0:
                return []
            elif depth == 0:
                tokens.append(token)
                token = ""

    if depth != 0:
        return []
    if token:
        tokens.append(token)
    return tokens


def strip_ends(expr, prefix, suffix):
    """Strips one prefix and one suffix from expr. Returns None if either is missing."""
    if len(expr) < len(prefix) + len(suffix) or not expr.startswith(prefix) or not expr.endswith(suffix):
        return None
    return expr[len(prefix):len(expr) - len(suffix)]


def locate_tokens(expr, tokens, offset=0):
    """Returns the position of each token in the source line, given that expr starts at offset. tokens must come from
    split_tokens(expr), so they appear in expr in order.
    """
    offsets = []
    cursor = 0
    for token in tokens:
        cursor = expr.find(token, cursor)
        offsets.append(offset + cursor)
        cursor += len(token)
    return offsets


def span(original_expr, token, offset=0):
    """Returns (start, end) of token in original_expr, searching from offset. Used for error diagnosis."""
    start = original_expr.find(token, offset) if token else -1
    if start == -1:
        start = offset
    return start, start + max(len(token), 1)


class Grammar(ABC):
    """Superclass that represents any node of a WAE syntax tree."""

    @property
    @abstractmethod
    def label(self):
        """Short name of this node, as shown by display."""

    @property
    @abstractmethod
    def nodes(self):
        """Children of this node, in order."""

    @property
    @abstractmethod
    def expr(self):
        """WAE source text of this node. Parsing it gives back an equal node."""

    def display(self, prefix="", child_prefix=""):
        """Recursively displays Grammar tree with readable format.

        Format:
        With
        ├── Binding
        │   ├── Id: x
        │   └── Number: 1
        └── Id: x
        """
        result = prefix + self.label

        for idx, node in enumerate(self.nodes):
            if idx == len(self.nodes) - 1:
                result += "\n" + node.display(child_prefix + "└── ", child_prefix + "    ")
            else:
                result += "\n" + node.display(child_prefix + "├── ", child_prefix + "│   ")

        return result

    def __str__(self):
        return self.expr


class WaeTerm(Grammar):
    """Represents a valid WAE expression: number, binary, with, or identifier. Also abstractly defines functionality
    that will allow a syntax tree to be built, substituted and calculated.
    """
    MAX_DEPTH = 100  # maximum nesting of parentheses

    @abstractmethod
    def sub(self, binding):
        """Returns a new tree where every free occurence of binding's identifier is replaced by binding's value. Any
        With encountered is eliminated on the way.
        """

    @abstractmethod
    def resolve(self):
        """Returns an equivalent tree without With nodes."""

    @abstractmethod
    def calc(self):
        """Evaluates this tree and returns a float."""

    @classmethod
    def generate_tree(cls, expr, original_expr=None, depth=0, offset=0):
        """Converts expr to the proper WaeTerm type, raises a ParseError if expr is not valid WAE. The grammar rule is
        chosen from the first character of expr alone: there is no backtracking. offset is where expr starts in
        original_expr.
        """
        if original_expr is None:
            original_expr = expr

        if depth > WaeTerm.MAX_DEPTH:
            msg = "'{}' is nested deeper than " + str(WaeTerm.MAX_DEPTH) + " levels"
            raise DepthError(msg, original_expr, *span(original_expr, expr, offset))

        offset += len(expr) - len(expr.lstrip())
        expr = expr.strip()
        if not expr:
            raise EmptyInputError("expected a non-empty input", original_expr, diagnosis=False)

        first_char = expr[0]
        if first_char in DIGITS:
            return Number.parse(expr, original_expr, offset)
        elif first_char == OPEN_PAREN:
            return WaeTerm._parse_parenthesized(expr, original_expr, depth, offset)
        elif first_char.isalpha():
            return Identifier.parse(expr, original_expr, offset)

        raise UnknownFormError("unexpected symbol '{1}' in '{0}'", (original_expr, first_char),
                               *span(original_expr, first_char, offset))

    @staticmethod
    def _parse_parenthesized(expr, original_expr, depth, offset=0):
        """Parses "(" ... ")" into Binary or With based on the first token inside the parentheses."""
        location = span(original_expr, expr, offset)

        inner = strip_ends(expr, OPEN_PAREN, CLOSE_PAREN)
        if inner is None:
            raise DelimiterError("'{1}' is missing a closing ')'", (original_expr, expr), *location)

        tokens = split_tokens(inner)
        if not tokens:
            if not inner.strip():
                msg = "expected an expression within the parentheses of '{1}'"
                raise EmptyInputError(msg, (original_expr, expr), *location)
            raise DelimiterError("'{1}' has mismatched parentheses", (original_expr, expr), *location)

        offsets = locate_tokens(inner, tokens, offset + len(OPEN_PAREN))
        head = tokens[0]
        if head in SYMBOLS:
            return Binary.parse(tokens, original_expr, depth, offsets)
        elif head == KEYWORD:
            return With.parse(tokens, original_expr, depth, offsets)

        msg = "unexpected parenthesized expression '{1}': expected an operator or '" + KEYWORD + "'"
        raise UnknownFormError(msg, (original_expr, head), *span(original_expr, head, offsets[0]))


def parse(expr):
    """Returns the syntax tree represented by expr."""
    return WaeTerm.generate_tree(expr)


class Operator(Enum):
    """Binary operators in WAE. Values are (symbol, display name, function on two floats)."""
    ADD = ("+", "Add", operator.add)
    SUB = ("-", "Subtract", operator.sub)
    MUL = ("*", "Multiply", operator.mul)
    DIV = ("/", "Divide", divide)

    @property
    def symbol(self):
        return self.value[0]

    @property
    def display_name(self):
        return self.value[1]

    @classmethod
    def from_symbol(cls, symbol):
        """Returns the Operator for symbol. Raises UnknownFormError if there is none."""
        for op in cls:
            if op.symbol == symbol:
                return op
        raise UnknownFormError("unexpected operator '{}'", symbol)

    def apply(self, left, right):
        return self.value[2](left, right)


SYMBOLS = [op.symbol for op in Operator]


@dataclass(frozen=True)
class Number(WaeTerm):
    """Number literal. A leaf: inert under substitution."""
    value: float

    @staticmethod
    def parse(expr, original_expr, offset=0):
        """Parses the whole of expr as a number. A digit followed by letters is a malformed number, not an
        identifier.
        """
        if not NUMBER.fullmatch(expr):
            msg = "expected a number, got '{1}'"
            raise MalformedNumberError(msg, (original_expr, expr), *span(original_expr, expr, offset))
        return Number(float(expr))

    def sub(self, binding):
        return self

    def resolve(self):
        return self

    def calc(self):
        return self.value

    @property
    def label(self):
        return f"Number: {numberify(self.value)}"

    @property
    def nodes(self):
        return ()

    @property
    def expr(self):
        return numberify(self.value)


@dataclass(frozen=True)
class Binary(WaeTerm):
    """Binary arithmetic expression: (op left right)."""
    operator: Operator
    left: WaeTerm
    right: WaeTerm

    @staticmethod
    def parse(tokens, original_expr, depth=0, offsets=None):
        """Parses [op, left, right] tokens. offsets are the positions of tokens in original_expr."""
        if offsets is None:
            offsets = [0] * len(tokens)

        if len(tokens) != 3:
            expr = " ".join(tokens)
            msg = "expected an operator type and two inputs for binary expression, got '({1})'"
            raise ArityError(msg, (original_expr, expr), *span(original_expr, tokens[-1], offsets[-1]))

        op, left, right = tokens
        return Binary(
            Operator.from_symbol(op),
            WaeTerm.generate_tree(left, original_expr, depth + 1, offsets[1]),
            WaeTerm.generate_tree(right, original_expr, depth + 1, offsets[2])
        )

    def sub(self, binding):
        return Binary(self.operator, self.left.sub(binding), self.right.sub(binding))

    def resolve(self):
        return Binary(self.operator, self.left.resolve(), self.right.resolve())

    def calc(self):
        return self.operator.apply(self.left.calc(), self.right.calc())

    @property
    def label(self):
        return self.operator.display_name

    @property
    def nodes(self):
        return self.left, self.right

    @property
    def expr(self):
        return f"({self.operator.symbol} {self.left.expr} {self.right.expr})"


@dataclass(frozen=True)
class Identifier(WaeTerm):
    """Identifier: alphabetic character(s) that refer to an enclosing binding."""
    name: str

    @staticmethod
    def check_grammar(expr):
        """Whether or not expr is a valid identifier."""
        return expr.isalpha() and expr != KEYWORD

    @staticmethod
    def parse(expr, original_expr=None, offset=0):
        if original_expr is None:
            original_expr = expr

        offset += len(expr) - len(expr.lstrip())
        expr = expr.strip()
        if not expr:
            raise EmptyInputError("expected a non-empty identifier", original_expr, diagnosis=False)
        elif expr == KEYWORD:
            msg = "identifier cannot be the reserved word '{1}'"
            raise IdentifierError(msg, (original_expr, KEYWORD), *span(original_expr, expr, offset))
        elif not Identifier.check_grammar(expr):
            msg = "expected an alphabetic identifier, got '{1}'"
            raise IdentifierError(msg, (original_expr, expr), *span(original_expr, expr, offset))

        return Identifier(expr)

    def sub(self, binding):
        if self == binding.identifier:
            return binding.value  # immutable, so no need to copy
        return self

    def resolve(self):
        return self  # unbound if still here: calc will complain

    def calc(self):
        raise UnboundIdentifierError("failed to replace identifier '{}'", self.name)

    @property
    def label(self):
        return f"Id: {self.name}"

    @property
    def nodes(self):
        return ()

    @property
    def expr(self):
        return self.name


@dataclass(frozen=True)
class Binding(Grammar):
    """Binding of a With: [identifier value]. value lives in the scope enclosing the With."""
    identifier: Identifier
    value: WaeTerm

    @staticmethod
    def parse(expr, original_expr, depth=0, offset=0):
        """Parses "([" <id> <WAE> "])". offset is where expr starts in original_expr."""
        location = span(original_expr, expr.strip(), offset)

        offset += len(expr) - len(expr.lstrip()) + len(OPEN_PAREN)
        stripped = strip_ends(expr.strip(), OPEN_PAREN, CLOSE_PAREN)
        if stripped is None:
            msg = "expected " + KEYWORD + " binding '{1}' to be wrapped in parentheses"
            raise DelimiterError(msg, (original_expr, expr), *location)

        offset += len(stripped) - len(stripped.lstrip()) + len(OPEN_BRACKET)
        stripped = strip_ends(stripped.strip(), OPEN_BRACKET, CLOSE_BRACKET)
        if stripped is None:
            msg = "expected " + KEYWORD + " binding '{1}' to be wrapped in brackets"
            raise DelimiterError(msg, (original_expr, expr), *location)

        if not stripped.strip():
            msg = "expected a binding expression for " + KEYWORD + " clause '{1}'"
            raise EmptyInputError(msg, (original_expr, expr), *location)

        tokens = split_tokens(stripped)
        if len(tokens) != 2:
            msg = "expected an identifier and bound expression for " + KEYWORD + " clause '{1}'"
            raise ArityError(msg, (original_expr, expr), *location)

        identifier, value = tokens
        identifier_offset, value_offset = locate_tokens(stripped, tokens, offset)
        return Binding(
            Identifier.parse(identifier, original_expr, identifier_offset),
            WaeTerm.generate_tree(value, original_expr, depth, value_offset)
        )

    def sub(self, binding):
        """Substitutes binding into self.value only: self.identifier is being declared, not used."""
        return Binding(self.identifier, self.value.sub(binding))

    def resolve(self):
        return Binding(self.identifier, self.value.resolve())

    @property
    def name(self):
        return self.identifier.name

    @property
    def label(self):
        return "Binding"

    @property
    def nodes(self):
        return self.identifier, self.value

    @property
    def expr(self):
        return f"([{self.identifier.expr} {self.value.expr}])"


@dataclass(frozen=True)
class With(WaeTerm):
    """Local binding: (with ([identifier value]) body)."""
    binding: Binding
    body: WaeTerm

    @staticmethod
    def parse(tokens, original_expr, depth=0, offsets=None):
        """Parses ["with", binding, body] tokens. offsets are the positions of tokens in original_expr."""
        if offsets is None:
            offsets = [0] * len(tokens)

        if len(tokens) != 3:
            expr = " ".join(tokens)
            msg = "expected '" + KEYWORD + "' symbol, binding, and input for " + KEYWORD + " expression, got '({1})'"
            raise ArityError(msg, (original_expr, expr), *span(original_expr, tokens[-1], offsets[-1]))

        __, binding, body = tokens
        return With(
            Binding.parse(binding, original_expr, depth + 1, offsets[1]),
            WaeTerm.generate_tree(body, original_expr, depth + 1, offsets[2])
        )

    def sub(self, binding):
        """Two-phase substitution of an outer binding into this With:
            1. the outer binding is substituted into self.binding's value, which lives in the enclosing scope,
            2. the result is substituted into self.body, eliminating this With,
            3. the outer binding is substituted into what is left of the body.

        If self.binding shadows the outer binding, step 2 already replaced every occurence of the name, so step 3
        finds nothing to replace.
        """
        inner = self.binding.sub(binding)
        return self.body.sub(inner).sub(binding)

    def resolve(self):
        return self.body.sub(self.binding.resolve())

    def calc(self):
        return self.resolve().calc()

    @property
    def label(self):
        return "With"

    @property
    def nodes(self):
        return self.binding, self.body

    @property
    def expr(self):
        return f"({KEYWORD} {self.binding.expr} {self.body.expr})"
