"""Macro invocation payloads."""

from __future__ import annotations

from tyexpr.cursor import Cursor
from tyexpr.tokens import Delim, TokenStream


def parse_delimiter(input: Cursor) -> tuple[Delim, TokenStream]:
    """Read the delimited body of a macro call without interpreting it."""
    span = input.span()
    group = input.any_group()
    if group is None:
        raise input.error("expected delimiter")
    return Delim(group.delimiter, span), group.stream
