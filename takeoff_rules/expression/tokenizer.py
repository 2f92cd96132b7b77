"""
Tokenizer for quantity expressions.

Token kinds: NUMBER, IDENT, OP (+ - * /), LPAREN, RPAREN, END.
"""

import re
from dataclasses import dataclass
from typing import List

from ..errors import ErrorKind, ExpressionEvaluationError

NUMBER = "NUMBER"
IDENT = "IDENT"
OP = "OP"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
END = "END"

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<NUMBER>\d+\.?\d*|\.\d+)
  | (?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<OP>[-+*/])
  | (?P<LPAREN>\()
  | (?P<RPAREN>\))
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int


def tokenize(expression: str) -> List[Token]:
    """
    Split an expression into tokens, always ending with an END token.

    Raises:
        ExpressionEvaluationError(PARSE_ERROR): on a character outside the language
    """
    tokens = []
    pos = 0
    length = len(expression)

    while pos < length:
        match = _TOKEN_RE.match(expression, pos)
        if match is None:
            raise ExpressionEvaluationError(
                ErrorKind.PARSE_ERROR,
                expression,
                f"unexpected character {expression[pos]!r} at position {pos}",
                position=pos,
            )
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()

    tokens.append(Token(END, "", length))
    return tokens
