"""Lexer for the lambdac language.

Tokenizing is a state machine over immutable ``ScanState`` snapshots. Each
scan state is a plain function taking a snapshot and returning the token it
produced (or None) together with the next snapshot, which names the state to
run next. A state either emits a token and consumes its runes, consumes
silently (whitespace), or hands over to another state without consuming.

    dispatch --> end_of_line | space          (newline / whitespace)
             --> operator --> composite --> identifier --> illegal
             --> string
             --> identifier

Every state starts with the end-of-file guard, so an empty remainder always
yields EOF whatever state is pending. Lookahead never exceeds two runes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from typing import IO, AnyStr

from lambdac.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from lambdac.source import START_POSITION, Position, Span, read_source
from lambdac.tokens import (
    COMPOSITE_OPERATORS,
    ESCAPE,
    IDENTIFIER_EXCLUDED,
    QUOTE,
    RESERVED,
    SINGLE_OPERATORS,
    Token,
    TokenKind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanState:
    """Snapshot of the lexer: unread input, its position, and the next state."""

    remaining: str
    position: Position = START_POSITION
    next_scan: ScanFunc | None = None

    @classmethod
    def start(cls, text: str) -> ScanState:
        return cls(text, START_POSITION, scan_dispatch)

    @property
    def done(self) -> bool:
        return self.next_scan is None

    def consume(self, n: int) -> ScanState:
        """Drop ``n`` runes on the current row and return to the dispatcher."""
        return ScanState(self.remaining[n:], self.position.advance_by(n), scan_dispatch)

    def delegate(self, scan_func: ScanFunc) -> ScanState:
        return replace(self, next_scan=scan_func)


ScanResult = tuple[Token | None, ScanState]
ScanFunc = Callable[[ScanState], ScanResult]


# ── Driver ───────────────────────────────────────────────────────


def scan(state: ScanState) -> ScanResult:
    """Run the pending scan state once."""
    if state.next_scan is None:
        raise RuntimeError("scan state is exhausted: EOF was already emitted")
    return state.next_scan(state)


def iter_tokens(text: str) -> Iterator[Token]:
    """Yield the tokens of ``text``; EOF is always the last one."""
    state = ScanState.start(text)
    while True:
        token, state = scan(state)
        if token is None:
            continue
        yield token
        if token.kind is TokenKind.EOF:
            return


def tokenize(text: str) -> list[Token]:
    return list(iter_tokens(text))


# ── States ───────────────────────────────────────────────────────


def scan_dispatch(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)

    ch = state.remaining[0]
    if ch == "\n":
        return scan_end_of_line(state)
    if ch.isspace():
        return scan_space(state)
    if ch in RESERVED:
        return None, state.delegate(scan_operator)
    if ch == QUOTE:
        return None, state.delegate(scan_string)
    return None, state.delegate(scan_identifier)


def scan_end_of_file(state: ScanState) -> ScanResult:
    if not state.remaining:
        return Token(TokenKind.EOF, state.position), replace(state, next_scan=None)
    return scan_end_of_line(state)


def scan_end_of_line(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    if state.remaining[0] == "\n":
        token = Token(TokenKind.EOL, state.position)
        return token, ScanState(state.remaining[1:], state.position.new_row(), scan_dispatch)
    return scan_space(state)


def scan_space(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    ch = state.remaining[0]
    if ch == "\n":
        return scan_end_of_line(state)
    if ch.isspace():
        return None, state.consume(1)
    return None, state.delegate(scan_dispatch)


def scan_operator(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    ch = state.remaining[0]
    kind = SINGLE_OPERATORS.get(ch)
    if kind is not None:
        return Token(kind, state.position, ch), state.consume(1)
    return scan_composite(state)


def scan_composite(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    pair = state.remaining[:2]
    kind = COMPOSITE_OPERATORS.get(pair)
    if kind is not None:
        return Token(kind, state.position, pair), state.consume(2)
    # A lone ':' or '-' is an ordinary identifier rune.
    return None, state.delegate(scan_identifier)


def scan_identifier(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    text = state.remaining
    end = 0
    while end < len(text) and _is_identifier_rune(text, end):
        end += 1
    if end == 0:
        return None, state.delegate(scan_illegal)
    return Token(TokenKind.IDENTIFIER, state.position, text[:end]), state.consume(end)


def scan_illegal(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    ch = state.remaining[0]
    return Token(TokenKind.ILLEGAL, state.position, ch), state.consume(1)


def scan_string(state: ScanState) -> ScanResult:
    if not state.remaining:
        return scan_end_of_file(state)
    text = state.remaining
    chars: list[str] = []
    i = 1  # opening quote
    while i < len(text):
        ch = text[i]
        if ch == "\n":
            return _illegal_string(state, i)
        if ch == QUOTE:
            token = Token(TokenKind.STRING, state.position, "".join(chars))
            return token, state.consume(i + 1)
        if ch == ESCAPE:
            if i + 1 >= len(text) or text[i + 1] == "\n":
                return _illegal_string(state, i + 1)
            escaped = text[i + 1]
            if escaped == QUOTE:
                chars.append(QUOTE)
            else:
                chars.append(ch)
                chars.append(escaped)
            i += 2
            continue
        chars.append(ch)
        i += 1
    return _illegal_string(state, len(text))


def _illegal_string(state: ScanState, consumed: int) -> ScanResult:
    # The rest of the input is dropped; the next scan emits EOF.
    rest = ScanState("", state.position.advance_by(consumed), scan_end_of_file)
    return Token(TokenKind.ILLEGAL, state.position), rest


def _is_identifier_rune(text: str, i: int) -> bool:
    ch = text[i]
    if ch.isspace() or not ch.isprintable() or ch in IDENTIFIER_EXCLUDED:
        return False
    return text[i:i + 2] not in COMPOSITE_OPERATORS


# ── Lexer ────────────────────────────────────────────────────────


class Lexer:
    """Tokenizes lambdac source and reports ILLEGAL tokens as diagnostics."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []

    @classmethod
    def from_stream(cls, stream: IO[AnyStr], filename: str = "<stdin>") -> Lexer:
        """Build a lexer over a stream. Raises ReadError if it can't be read."""
        return cls(read_source(stream), filename)

    def lex(self, *, strict: bool = False) -> list[Token]:
        """Tokenize the entire source and return the token list.

        ILLEGAL tokens stay in the list. With ``strict`` they raise a
        CompileError instead.
        """
        self.tokens = tokenize(self.source)
        self.diagnostics = []
        for token in self.tokens:
            if token.kind is TokenKind.ILLEGAL:
                self._error(token)

        logger.debug(
            "lexed %s: %d tokens, %d illegal",
            self.filename, len(self.tokens), len(self.diagnostics),
        )
        if strict and self.diagnostics:
            raise CompileError(self.diagnostics)
        return self.tokens

    def _error(self, token: Token) -> None:
        if token.literal:
            message = f"illegal character {token.literal!r}"
            notes: list[str] = []
        else:
            message = "malformed string literal"
            notes = [
                "a string must be closed on the line it starts on, "
                "and may not end with a lone backslash",
            ]
        span = Span.from_position(self.filename, token.position, len(token.literal))
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code="E100",
                message=message,
                labels=[DiagnosticLabel(span=span, message="")],
                notes=notes,
            )
        )
