"""Tests for the lambdac parser."""

from __future__ import annotations

import pytest

from lambdac.ast_nodes import ASTNode, NodeKind
from lambdac.errors import CompileError, ParseError
from lambdac.lexer import Lexer, tokenize
from lambdac.parser import ParseState, Parser, parse, step
from lambdac.source import Position
from lambdac.tokens import Token, TokenKind
from tests.helpers import parse_source


def tok(kind: TokenKind, literal: str = "", col: int = 0) -> Token:
    return Token(kind, Position(1, col), literal)


class TestModuleImport:
    def test_module_import(self):
        ast = parse_source('m | "x"')
        assert str(ast) == "Program(Module(Identifier(m), String(x)))"

    def test_module_import_nodes(self):
        ast = parse_source('maths | "github.com/foo/bar"')
        (module,) = ast.children
        assert module.kind is NodeKind.MODULE
        assert module.token == Token(TokenKind.MODULE, Position(1, 6), "|")
        ident, path = module.children
        assert ident.token == Token(TokenKind.IDENTIFIER, Position(1, 0), "maths")
        assert path.token == Token(TokenKind.STRING, Position(1, 8), "github.com/foo/bar")

    def test_from_hand_built_tokens(self):
        tokens = [
            tok(TokenKind.IDENTIFIER, "m"),
            tok(TokenKind.MODULE, "|", 2),
            tok(TokenKind.STRING, "x", 4),
            tok(TokenKind.EOF, col=7),
        ]
        assert str(parse(tokens)) == "Program(Module(Identifier(m), String(x)))"

    def test_several_imports(self):
        ast = parse_source('a | "x"\nb | "y"\n')
        assert str(ast) == (
            "Program(Module(Identifier(a), String(x)), Module(Identifier(b), String(y)))"
        )

    def test_blank_lines(self):
        ast = parse_source('\n\nm | "x"\n\n')
        assert str(ast) == "Program(Module(Identifier(m), String(x)))"

    def test_empty_program(self):
        assert str(parse_source("")) == "Program()"

    def test_lone_identifier(self):
        assert str(parse_source("m")) == "Program(Identifier(m))"


class TestModuleErrors:
    def test_module_without_identifier(self):
        with pytest.raises(ParseError, match="module operator without previous ident"):
            parse_source('| "x"')

    def test_module_after_module(self):
        with pytest.raises(ParseError, match="unexpected token type: \\|"):
            parse_source('m | | "x"')

    def test_module_identifier_on_previous_line(self):
        with pytest.raises(ParseError, match="module operator without previous ident"):
            parse_source('m\n| "x"')

    def test_module_after_complete_import(self):
        with pytest.raises(ParseError, match="module operator without previous ident"):
            parse_source('m | "x" | "y"')

    def test_string_without_module(self):
        with pytest.raises(ParseError, match="string token not after a module operator"):
            parse_source('"x"')

    def test_string_after_identifier(self):
        with pytest.raises(ParseError, match="string token not after a module operator"):
            parse_source('m "x"')

    def test_second_string(self):
        with pytest.raises(ParseError, match="string token not after a module operator"):
            parse_source('m | "x" "y"')

    def test_missing_string(self):
        with pytest.raises(ParseError, match="unexpected end of input"):
            parse_source("m |")

    def test_newline_before_string(self):
        with pytest.raises(ParseError, match="unexpected token type: EOL"):
            parse_source('m |\n"x"')

    def test_error_carries_token(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('  | "x"')
        assert exc_info.value.token == Token(TokenKind.MODULE, Position(1, 2), "|")


class TestUnimplemented:
    @pytest.mark.parametrize("source", [
        "\\x.x",
        "(m)",
        "Y := f",
        "maths->fact",
        ".",
    ])
    def test_not_implemented(self, source):
        with pytest.raises(ParseError, match="not implemented"):
            parse_source(source)

    def test_application(self):
        with pytest.raises(ParseError, match="not implemented: application"):
            parse_source("fact 5")

    def test_illegal_token(self):
        with pytest.raises(ParseError, match="illegal token"):
            parse_source('"x')


class TestParseState:
    def test_missing_eof(self):
        tokens = [tok(TokenKind.IDENTIFIER, "m")]
        with pytest.raises(ParseError, match="unexpected end of input"):
            parse(tokens)

    def test_no_tokens(self):
        with pytest.raises(ParseError, match="unexpected end of input"):
            parse([])

    def test_step_consumes_one_token(self):
        state = ParseState.start(tokenize('m | "x"'))
        cursors = [state.cursor]
        while not state.finished:
            _, state = step(state)
            cursors.append(state.cursor)
        assert cursors == [0, 1, 2, 3, 4]

    def test_step_records_pending_string(self):
        state = ParseState.start(tokenize('m | "x"'))
        _, state = step(state)
        assert state.pending is None
        ast, state = step(state)
        assert state.pending is TokenKind.STRING
        assert ast.last_child().kind is NodeKind.MODULE
        ast, state = step(state)
        assert state.pending is None
        assert len(ast.last_child().children) == 2

    def test_step_leaves_previous_state(self):
        state = ParseState.start(tokenize("m"))
        ast, following = step(state)
        assert state.cursor == 0
        assert state.ast == ASTNode(NodeKind.PROGRAM)
        assert following.ast == ast

    def test_end_of_line_closes_statement(self):
        state = ParseState.start(tokenize("m\n"))
        _, state = step(state)
        _, state = step(state)
        assert state.statement_start == 1
        assert state.statement_nodes() == ()

    def test_step_after_finish(self):
        state = ParseState.start(tokenize(""))
        _, state = step(state)
        assert state.finished
        with pytest.raises(RuntimeError, match="finished"):
            step(state)


class TestParser:
    def test_parse(self):
        tokens = Lexer('m | "x"', "test.lc").lex()
        ast = Parser(tokens, "test.lc").parse()
        assert str(ast) == "Program(Module(Identifier(m), String(x)))"

    def test_error_becomes_diagnostic(self):
        tokens = Lexer('ok | "x"\n  | "y"', "test.lc").lex()
        with pytest.raises(CompileError) as exc_info:
            Parser(tokens, "test.lc").parse()
        (diag,) = exc_info.value.diagnostics
        assert diag.code == "E200"
        assert diag.message == "module operator without previous ident"
        assert str(diag.labels[0].span) == "test.lc:2:3"

    def test_end_of_input_points_at_last_token(self):
        tokens = [tok(TokenKind.IDENTIFIER, "abc", 4)]
        with pytest.raises(CompileError) as exc_info:
            Parser(tokens, "test.lc").parse()
        span = exc_info.value.diagnostics[0].labels[0].span
        assert (span.start_col, span.end_col) == (5, 7)
