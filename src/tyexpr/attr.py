"""Outer attributes, kept as raw token payloads."""

from __future__ import annotations

from tyexpr.ast_nodes import Attribute
from tyexpr.cursor import Cursor
from tyexpr.tokens import Delimiter


def parse_outer_attributes(input: Cursor) -> tuple[Attribute, ...]:
    """Parse zero or more ``#[...]`` attributes."""
    attrs: list[Attribute] = []
    while input.peek_punct("#") and input.peek_group(Delimiter.BRACKET, 1):
        pound = input.expect_punct("#")
        bracket, content = input.open_group(Delimiter.BRACKET)
        attrs.append(Attribute(pound, bracket, content.rest()))
    return tuple(attrs)
