"""tyexpr command line interface."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import click

from tyexpr import __version__
from tyexpr.ast_nodes import TypeExpr
from tyexpr.config import TyexprConfig, config_for
from tyexpr.errors import CompileError, Diagnostic, DiagnosticRenderer, ParseError
from tyexpr.parser import parse_str
from tyexpr.printer import render, to_source
from tyexpr.punctuated import Punctuated
from tyexpr.source import SourceFile
from tyexpr.tokens import Delim, Group, Token


def _is_skipped(line: str) -> bool:
    """Blank lines and ``//`` comment lines hold no type."""
    stripped = line.strip()
    return not stripped or stripped.startswith("//")


def _ty_files(target: Path) -> list[Path]:
    return sorted(target.rglob("*.ty")) if target.is_dir() else [target]


def _parse_lines(
    lines: list[str], filename: str, allow_plus: bool,
) -> Iterator[tuple[int, TypeExpr | None, list[Diagnostic]]]:
    """Parse each non-skipped line; yield (line number, type or None, diagnostics)."""
    for number, line in enumerate(lines, start=1):
        if _is_skipped(line):
            continue
        try:
            ty = parse_str(line, filename, allow_plus=allow_plus, line=number)
        except CompileError as e:
            yield number, None, e.diagnostics
            continue
        except ParseError as e:
            yield number, None, [e.to_diagnostic()]
            continue
        yield number, ty, []


def _renderer(config: TyexprConfig, source: SourceFile | None = None,
              color: bool | None = None) -> DiagnosticRenderer:
    sources = {str(source.path): source.content} if source is not None else None
    use_color = config.output.color if color is None else color
    return DiagnosticRenderer(color=use_color, sources=sources)


def _format_text(text: str, filename: str, allow_plus: bool,
                 renderer: DiagnosticRenderer) -> str | None:
    """Reprint every type in ``text`` canonically, or None on any error."""
    lines = text.splitlines()
    output = list(lines)
    ok = True
    for number, ty, diagnostics in _parse_lines(lines, filename, allow_plus):
        for diag in diagnostics:
            click.echo(renderer.render(diag), err=True)
        if ty is None:
            ok = False
            continue
        output[number - 1] = to_source(ty)
    if not ok:
        return None
    return "\n".join(output) + "\n" if output else ""


@click.group()
@click.version_option(__version__, prog_name="tyexpr")
def main() -> None:
    """Parse, check and format type expressions."""


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--without-plus", is_flag=True, help="Leave a trailing `+` unparsed.")
def check(path: str, without_plus: bool) -> None:
    """Parse every type in .ty files and report errors."""
    target = Path(path)
    config = config_for(target)
    allow_plus = config.parse.allow_plus and not without_plus

    ty_files = _ty_files(target)
    if not ty_files:
        click.echo("warning: no .ty files found", err=True)
        return

    had_errors = False
    count = 0
    for ty_file in ty_files:
        source = SourceFile(ty_file)
        renderer = _renderer(config, source)
        for _, ty, diagnostics in _parse_lines(source.lines, str(ty_file), allow_plus):
            for diag in diagnostics:
                click.echo(renderer.render(diag), err=True)
            if ty is None:
                had_errors = True
            else:
                count += 1

    if had_errors:
        raise SystemExit(1)
    click.echo(f"checked {count} types in {len(ty_files)} files, no errors")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
@click.option("--color/--no-color", default=None, help="Colorize output.")
def format_cmd(path: str, check: bool, use_stdin: bool, color: bool | None) -> None:
    """Reprint types in canonical form."""
    import sys

    from tyexpr.highlight import highlight

    config = config_for(Path(path))
    allow_plus = config.parse.allow_plus
    renderer = _renderer(config, color=color)

    if use_stdin:
        source = sys.stdin.read()
        formatted = _format_text(source, "<stdin>", allow_plus, renderer)
        if formatted is None:
            raise SystemExit(1)
        if check:
            if formatted != source:
                raise SystemExit(1)
        else:
            use_color = config.output.color if color is None else color
            click.echo(highlight(formatted, use_color), nl=False, color=use_color)
        return

    ty_files = _ty_files(Path(path))
    if not ty_files:
        click.echo("no .ty files found", err=True)
        return

    needs_formatting = False
    had_errors = False
    for ty_file in ty_files:
        source_file = SourceFile(ty_file)
        filename = str(ty_file)
        formatted = _format_text(
            source_file.content, filename, allow_plus,
            _renderer(config, source_file, color),
        )
        if formatted is None:
            had_errors = True
            continue

        if formatted != source_file.content:
            if check:
                click.echo(f"would reformat {filename}")
                needs_formatting = True
            else:
                ty_file.write_text(formatted)
                click.echo(f"formatted {filename}")

    if had_errors or (check and needs_formatting):
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--without-plus", is_flag=True, help="Leave a trailing `+` unparsed.")
def view(file: str, without_plus: bool) -> None:
    """View the syntax tree of every type in a .ty file."""
    source = SourceFile(Path(file))
    config = config_for(Path(file))
    allow_plus = config.parse.allow_plus and not without_plus
    renderer = _renderer(config, source)

    had_errors = False
    for number, ty, diagnostics in _parse_lines(source.lines, str(file), allow_plus):
        for diag in diagnostics:
            click.echo(renderer.render(diag), err=True)
        if ty is None:
            had_errors = True
            continue
        click.echo(f"line {number}: {to_source(ty)}")
        _dump_ast(ty, 1)

    if had_errors:
        raise SystemExit(1)


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__") and not isinstance(node, (Token, Group, Delim)):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name}")
        for field_name in fields:
            value = getattr(node, field_name)
            if _is_token_stream(value):
                click.echo(f"{indent}  {field_name}: {render(value)!r}")
            elif isinstance(value, (Punctuated, tuple)):
                items = list(value)
                if items:
                    click.echo(f"{indent}  {field_name}:")
                    for item in items:
                        _dump_ast(item, depth + 2)
                else:
                    click.echo(f"{indent}  {field_name}: []")
            elif isinstance(value, (Token, Delim)):
                click.echo(f"{indent}  {field_name}: {_describe(value)}")
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_ast(value, depth + 2)
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {value!r}")
    else:
        click.echo(f"{indent}{_describe(node)}")


def _is_token_stream(value: object) -> bool:
    return (isinstance(value, tuple) and bool(value)
            and all(isinstance(tree, (Token, Group)) for tree in value))


def _describe(value: object) -> str:
    if isinstance(value, Token):
        return repr(value.value)
    if isinstance(value, Delim):
        return repr(value.delimiter.value or "<none>")
    return f"{type(value).__name__}: {value!r}"
