"""
Recursive-descent parser for quantity expressions.

Grammar:
    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := '-' factor | NUMBER | IDENT | '(' expression ')'

Both binary levels are left-associative. Unary minus binds tighter than
'*' and '/', so `-a * b` is `(0 - a) * b`. The parser produces a tree of
three node types only: Literal, VarRef and BinOp; negation is `0 - x`.

Parenthesis nesting is capped at MAX_DEPTH levels. Long operator chains
are built by loops, so their length is not limited.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import FrozenSet, List, Union

from ..errors import ErrorKind, ExpressionEvaluationError
from .tokenizer import END, IDENT, LPAREN, NUMBER, OP, RPAREN, Token, tokenize


@dataclass(frozen=True)
class Literal:
    value: Decimal


@dataclass(frozen=True)
class VarRef:
    name: str


@dataclass(frozen=True)
class BinOp:
    op: str
    left: "Node"
    right: "Node"


Node = Union[Literal, VarRef, BinOp]

# Maximum parenthesis nesting
MAX_DEPTH = 100

_ZERO = Literal(Decimal(0))


class Parser:
    """Parses one expression string into a Node tree."""

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens: List[Token] = tokenize(expression)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _error(self, detail: str, token: Token) -> ExpressionEvaluationError:
        return ExpressionEvaluationError(ErrorKind.PARSE_ERROR, self.expression, detail, position=token.pos)

    def parse(self) -> Node:
        if self.current.kind == END:
            raise self._error("empty expression", self.current)
        node = self._expression()
        if self.current.kind != END:
            raise self._error(f"unexpected {self.current.text!r} at position {self.current.pos}", self.current)
        return node

    def _expression(self) -> Node:
        node = self._term()
        while self.current.kind == OP and self.current.text in "+-":
            op = self._advance().text
            node = BinOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._factor()
        while self.current.kind == OP and self.current.text in "*/":
            op = self._advance().text
            node = BinOp(op, node, self._factor())
        return node

    def _factor(self) -> Node:
        negate = False
        while self.current.kind == OP and self.current.text == "-":
            self._advance()
            negate = not negate

        node = self._operand()
        return BinOp("-", _ZERO, node) if negate else node

    def _operand(self) -> Node:
        token = self.current

        if token.kind == NUMBER:
            self._advance()
            return Literal(Decimal(token.text))

        if token.kind == IDENT:
            self._advance()
            return VarRef(token.text)

        if token.kind == LPAREN:
            if self.depth >= MAX_DEPTH:
                raise self._error(f"expression too deeply nested at position {token.pos}", token)
            self.depth += 1
            self._advance()
            node = self._expression()
            if self.current.kind != RPAREN:
                raise self._error(f"expected ')' at position {self.current.pos}", self.current)
            self._advance()
            self.depth -= 1
            return node

        if token.kind == END:
            raise self._error("unexpected end of expression", token)
        raise self._error(f"unexpected {token.text!r} at position {token.pos}", token)


@lru_cache(maxsize=1024)
def parse(expression: str) -> Node:
    """
    Parse an expression into a tree. Results are cached per expression text.

    Raises:
        ExpressionEvaluationError(PARSE_ERROR)
    """
    return Parser(expression).parse()


def referenced_names(node: Node) -> FrozenSet[str]:
    """All identifiers used in a tree."""
    names = set()
    stack = [node]
    while stack:
        node = stack.pop()
        if isinstance(node, VarRef):
            names.add(node.name)
        elif isinstance(node, BinOp):
            stack.append(node.left)
            stack.append(node.right)
    return frozenset(names)
