"""Parser for the lambdac language.

The parser walks the token list one token per step. Like the lexer, each
step is a plain function over an immutable ``ParseState`` that either
handles the current token or hands it to the next function in the chain:

    end_of_file -> end_of_line -> identifier -> module -> string
                -> illegal -> unimplemented

Only the module import ``name | "path"`` is assembled into the AST; it
becomes ``Module(Identifier(name), String(path))``. Newlines close a
top-level statement. Abstractions, application and definitions are reported
as not implemented.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from lambdac.ast_nodes import ASTNode, NodeKind
from lambdac.errors import CompileError, Diagnostic, DiagnosticLabel, ParseError, Severity
from lambdac.source import START_POSITION, Span
from lambdac.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

_EMPTY_PROGRAM = ASTNode(NodeKind.PROGRAM)


@dataclass(frozen=True)
class ParseState:
    """Snapshot of the parser: tokens, cursor, and the AST built so far.

    ``pending`` is the token kind the previous step requires next (a STRING
    after ``|``). ``statement_start`` is the index of the first AST child
    belonging to the statement being parsed.
    """

    tokens: tuple[Token, ...]
    cursor: int = 0
    ast: ASTNode = _EMPTY_PROGRAM
    pending: TokenKind | None = None
    statement_start: int = 0
    finished: bool = False

    @classmethod
    def start(cls, tokens: Iterable[Token]) -> ParseState:
        return cls(tuple(tokens))

    @property
    def done(self) -> bool:
        return self.cursor >= len(self.tokens)

    def current(self) -> Token:
        if self.done:
            raise ParseError("unexpected end of input")
        return self.tokens[self.cursor]

    def statement_nodes(self) -> tuple[ASTNode, ...]:
        return self.ast.children[self.statement_start:]

    def advance(self) -> ParseState:
        return replace(self, cursor=self.cursor + 1)

    def with_ast(self, ast: ASTNode) -> ParseState:
        return replace(self, ast=ast)


StepResult = tuple[ASTNode, ParseState]
ParseFunc = Callable[[ParseState], StepResult]


def step(state: ParseState) -> StepResult:
    """Consume one token, returning the updated AST and state."""
    if state.finished:
        raise RuntimeError("parse state is finished: EOF was already consumed")
    token = state.current()
    if state.pending is not None and token.kind is not state.pending:
        if token.kind is TokenKind.EOF:
            raise ParseError("unexpected end of input", token)
        raise ParseError(f"unexpected token type: {token.kind}", token)
    return parse_end_of_file(state)


def parse(tokens: Iterable[Token]) -> ASTNode:
    """Run steps until EOF is consumed and return the PROGRAM node."""
    state = ParseState.start(tokens)
    ast = state.ast
    while not state.finished:
        ast, state = step(state)
    return ast


# ── Steps ────────────────────────────────────────────────────────


def parse_end_of_file(state: ParseState) -> StepResult:
    token = state.current()
    if token.kind is not TokenKind.EOF:
        return parse_end_of_line(state)
    return state.ast, replace(state.advance(), finished=True)


def parse_end_of_line(state: ParseState) -> StepResult:
    token = state.current()
    if token.kind is not TokenKind.EOL:
        return parse_identifier(state)
    next_state = replace(state.advance(), statement_start=len(state.ast.children))
    return state.ast, next_state


def parse_identifier(state: ParseState) -> StepResult:
    token = state.current()
    if token.kind is not TokenKind.IDENTIFIER:
        return parse_module(state)
    if state.statement_nodes():
        raise ParseError("not implemented: application", token)
    ast = state.ast.append_child(ASTNode.from_token(token))
    return ast, state.with_ast(ast).advance()


def parse_module(state: ParseState) -> StepResult:
    token = state.current()
    if token.kind is not TokenKind.MODULE:
        return parse_string(state)

    last = state.ast.last_child()
    if last is None or last.kind is not NodeKind.IDENTIFIER or not state.statement_nodes():
        raise ParseError("module operator without previous ident", token)
    ast = state.ast.replace_last_child(ASTNode.from_token(token).append_child(last))
    if ast is None:
        raise ParseError("module operator without previous ident", token)
    return ast, replace(state.with_ast(ast).advance(), pending=TokenKind.STRING)


def parse_string(state: ParseState) -> StepResult:
    token = state.current()
    if token.kind is not TokenKind.STRING:
        return parse_illegal(state)

    last = state.ast.last_child()
    if (
        state.pending is not TokenKind.STRING
        or last is None
        or last.kind is not NodeKind.MODULE
        or len(last.children) != 1
    ):
        raise ParseError("string token not after a module operator", token)
    ast = state.ast.replace_last_child(last.append_child(ASTNode.from_token(token)))
    if ast is None:
        raise ParseError("string token not after a module operator", token)
    return ast, replace(state.with_ast(ast).advance(), pending=None)


def parse_illegal(state: ParseState) -> StepResult:
    token = state.current()
    if token.kind is TokenKind.ILLEGAL:
        raise ParseError("illegal token", token)
    return parse_unimplemented(state)


def parse_unimplemented(state: ParseState) -> StepResult:
    # Abstractions, grouping, definitions and namespace access.
    token = state.current()
    raise ParseError(f"not implemented: {token.kind}", token)


# ── Parser ───────────────────────────────────────────────────────


class Parser:
    """Parses a list of tokens into a lambdac AST."""

    def __init__(self, tokens: list[Token], filename: str = "<stdin>") -> None:
        self.tokens = tokens
        self.filename = filename

    def parse(self) -> ASTNode:
        """Parse the entire token stream. Raises CompileError on the first error."""
        try:
            ast = parse(self.tokens)
        except ParseError as e:
            raise CompileError([self._diagnostic(e)]) from e
        logger.debug("parsed %s: %d statement(s)", self.filename, len(ast.children))
        return ast

    def _diagnostic(self, error: ParseError) -> Diagnostic:
        token = error.token
        if token is None and self.tokens:
            token = self.tokens[-1]
        position = token.position if token is not None else START_POSITION
        length = len(token.literal) if token is not None else 1
        span = Span.from_position(self.filename, position, length)
        return Diagnostic(
            severity=Severity.ERROR,
            code="E200",
            message=error.message,
            labels=[DiagnosticLabel(span=span, message="")],
        )
