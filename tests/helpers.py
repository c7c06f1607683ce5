"""Shared test helpers for the tyexpr test suite."""

from __future__ import annotations

from tyexpr.buffer import tokenize
from tyexpr.cursor import Cursor
from tyexpr.parser import parse_str
from tyexpr.printer import render, to_tokens
from tyexpr.source import Span
from tyexpr.tokens import flatten


def parse(source: str, allow_plus: bool = True):
    """Parse source as exactly one type expression."""
    return parse_str(source, "<test>", allow_plus=allow_plus)


def cursor(source: str) -> Cursor:
    """A cursor over the token trees of source, for partial parses."""
    return Cursor(tokenize(source, "<test>"), Span.call_site())


def fmt(source: str) -> str:
    """Parse and print back to canonical text."""
    return render(to_tokens(parse(source)))


def assert_roundtrip(source: str) -> None:
    """Printing the parsed type yields the same tokens as the source."""
    printed = list(flatten(to_tokens(parse(source))))
    expected = list(flatten(tokenize(source, "<test>")))
    assert printed == expected, f"{source!r} printed as {fmt(source)!r}"
