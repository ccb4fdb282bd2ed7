"""Token kinds and token representation for the lambdac lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from lambdac.source import Position


class TokenKind(Enum):
    ILLEGAL = auto()
    EOF = auto()
    EOL = auto()
    IDENTIFIER = auto()

    # Operators
    ASSIGN = auto()   # :=
    MODULE = auto()   # |
    NSDEREF = auto()  # ->
    LAMBDA = auto()   # \
    DOT = auto()      # .

    STRING = auto()

    LPAREN = auto()
    RPAREN = auto()

    def __str__(self) -> str:
        return _DISPLAY.get(self, self.name)


_DISPLAY: dict[TokenKind, str] = {
    TokenKind.IDENTIFIER: "IDENT",
    TokenKind.LAMBDA: "\\",
    TokenKind.DOT: ".",
    TokenKind.LPAREN: "(",
    TokenKind.RPAREN: ")",
    TokenKind.MODULE: "|",
    TokenKind.NSDEREF: "->",
    TokenKind.ASSIGN: ":=",
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    position: Position
    literal: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.name,
            "row": self.position.row,
            "col": self.position.col,
            "literal": self.literal,
        }

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.literal!r}, {self.position})"


SINGLE_OPERATORS: dict[str, TokenKind] = {
    "\\": TokenKind.LAMBDA,
    ".": TokenKind.DOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "|": TokenKind.MODULE,
}

COMPOSITE_OPERATORS: dict[str, TokenKind] = {
    ":=": TokenKind.ASSIGN,
    "->": TokenKind.NSDEREF,
}

# Runes the dispatcher hands to the operator state.
RESERVED: frozenset[str] = frozenset("\\.()|:-")

# Runes that can never appear inside an identifier. ':' and '-' are allowed
# unless they start a composite operator.
IDENTIFIER_EXCLUDED: frozenset[str] = frozenset(SINGLE_OPERATORS) | {'"'}

QUOTE = '"'
ESCAPE = "\\"
