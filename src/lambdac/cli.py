"""lambdac front-end CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

import click

from lambdac import __version__
from lambdac.ast_nodes import ASTNode
from lambdac.config import find_config, load_config
from lambdac.errors import CompileError, DiagnosticRenderer, ReadError
from lambdac.lexer import Lexer
from lambdac.parser import Parser
from lambdac.tokens import TokenKind


def _open_lexer(file: BinaryIO) -> Lexer:
    filename = getattr(file, "name", "<stdin>")
    try:
        return Lexer.from_stream(file, filename)
    except ReadError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


def _report(e: CompileError, renderer: DiagnosticRenderer) -> None:
    for diag in e.diagnostics:
        click.echo(renderer.render(diag), err=True)


def _compile_source(lexer: Lexer, renderer: DiagnosticRenderer, *, strict: bool) -> ASTNode | None:
    """Lex and parse one source. Renders diagnostics and returns None on failure."""
    renderer.add_source(lexer.filename, lexer.source)
    try:
        tokens = lexer.lex(strict=strict)
        return Parser(tokens, lexer.filename).parse()
    except CompileError as e:
        _report(e, renderer)
        return None


@click.group()
@click.version_option(__version__, prog_name="lambdac")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """The lambdac compiler front end."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("file", type=click.File("rb"))
def tokens(file: BinaryIO) -> None:
    """Print the token stream of FILE ('-' for stdin)."""
    lexer = _open_lexer(file)
    result = lexer.lex()
    for tok in result:
        click.echo(f"{tok.position}\t{tok.kind!s}\t{tok.literal!r}")

    if lexer.diagnostics:
        renderer = DiagnosticRenderer(color=True)
        renderer.add_source(lexer.filename, lexer.source)
        _report(CompileError(lexer.diagnostics), renderer)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.File("rb"))
def view(file: BinaryIO) -> None:
    """View the AST of a lambdac source file."""
    lexer = _open_lexer(file)
    ast = _compile_source(lexer, DiagnosticRenderer(color=True), strict=True)
    if ast is None:
        raise SystemExit(1)
    _dump_ast(ast, 0)


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Lex and parse every .lc file of a lambdac project."""
    try:
        config_path = find_config(Path(path))
    except FileNotFoundError:
        click.echo("error: no lambdac.toml found", err=True)
        raise SystemExit(1)

    config = load_config(config_path)
    click.echo(f"checking {config.package.name}...")

    src_dir = config_path.parent / config.check.source_dir
    if not src_dir.is_dir():
        src_dir = config_path.parent  # fallback to project root

    lc_files = sorted(src_dir.rglob("*.lc"))
    if not lc_files:
        click.echo("warning: no .lc files found", err=True)
        return

    renderer = DiagnosticRenderer(color=True)
    failed = 0
    for lc_file in lc_files:
        with open(lc_file, "rb") as f:
            lexer = _open_lexer(f)
        if _compile_source(lexer, renderer, strict=config.check.strict) is None:
            failed += 1

    if failed:
        click.echo(f"{failed} of {len(lc_files)} file(s) failed", err=True)
        raise SystemExit(1)
    click.echo(f"checked {config.package.name}: {len(lc_files)} file(s), no errors")


def _dump_ast(node: ASTNode, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    if node.token is None or node.token.kind is TokenKind.MODULE:
        click.echo(f"{indent}{node.kind.value}")
    else:
        click.echo(f"{indent}{node.kind.value} {node.token.literal!r} @ {node.token.position}")
    for child in node.children:
        _dump_ast(child, depth + 1)
