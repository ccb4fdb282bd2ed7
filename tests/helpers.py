"""Shared test helpers for the lambdac test suite."""

from __future__ import annotations

from lambdac.ast_nodes import ASTNode
from lambdac.lexer import tokenize
from lambdac.parser import parse
from lambdac.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Lex source and return (kind, literal) pairs, excluding EOF."""
    return [(t.kind, t.literal) for t in tokenize(source) if t.kind is not TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Lex source and return just the token kinds, excluding EOF."""
    return [kind for kind, _ in lex(source)]


def positions(source: str) -> list[tuple[int, int]]:
    """Lex source and return (row, col) of every token, EOF included."""
    return [(t.position.row, t.position.col) for t in tokenize(source)]


def parse_source(source: str) -> ASTNode:
    """Lex and parse source, return the PROGRAM node."""
    return parse(tokenize(source))
