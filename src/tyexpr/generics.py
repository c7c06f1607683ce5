"""Lifetimes, ``for<...>`` binders and trait bounds."""

from __future__ import annotations

from dataclasses import replace

from tyexpr.ast_nodes import (
    BoundLifetimes,
    Lifetime,
    LifetimeDef,
    TraitBound,
    TypeParamBound,
)
from tyexpr.attr import parse_outer_attributes
from tyexpr.cursor import Cursor
from tyexpr.path import parse_parenthesized_args, parse_path, with_last_arguments
from tyexpr.punctuated import Punctuated
from tyexpr.tokens import Delimiter


def parse_lifetime(input: Cursor) -> Lifetime:
    return Lifetime(input.expect_lifetime())


def parse_optional_lifetime(input: Cursor) -> Lifetime | None:
    if input.peek_lifetime():
        return parse_lifetime(input)
    return None


def parse_lifetime_def(input: Cursor) -> LifetimeDef:
    attrs = parse_outer_attributes(input)
    lifetime = parse_lifetime(input)
    colon = input.optional_punct(":")
    bounds: Punctuated[Lifetime] = Punctuated("+")
    if colon is not None:
        while not (input.peek_punct(",") or input.peek_punct(">")):
            bounds.push_value(parse_lifetime(input))
            if not input.peek_punct("+"):
                break
            bounds.push_punct(input.expect_punct("+"))
    return LifetimeDef(attrs, lifetime, colon, bounds)


def parse_bound_lifetimes(input: Cursor) -> BoundLifetimes:
    """``for<'a, 'b: 'a>``"""
    for_token = input.expect_keyword("for")
    lt = input.expect_punct("<")
    lifetimes: Punctuated[LifetimeDef] = Punctuated(",")
    while not input.peek_punct(">"):
        lifetimes.push_value(parse_lifetime_def(input))
        if input.peek_punct(">"):
            break
        lifetimes.push_punct(input.expect_punct(","))
    gt = input.expect_punct(">")
    return BoundLifetimes(for_token, lt, lifetimes, gt)


def parse_optional_bound_lifetimes(input: Cursor) -> BoundLifetimes | None:
    if input.peek_keyword("for"):
        return parse_bound_lifetimes(input)
    return None


def parse_trait_bound(input: Cursor) -> TraitBound:
    """``?Sized``, ``for<'a> Fn(&'a T) -> U``, ``Iterator<Item = u8>``"""
    modifier = input.optional_punct("?")
    lifetimes = parse_optional_bound_lifetimes(input)
    path = parse_path(input, expr_style=False)
    last = path.segments.last()
    if last is not None and last.arguments is None and input.peek_group(Delimiter.PAREN):
        path = with_last_arguments(path, parse_parenthesized_args(input))
    return TraitBound(None, modifier, lifetimes, path)


def parse_type_param_bound(input: Cursor) -> TypeParamBound:
    if input.peek_lifetime():
        return parse_lifetime(input)
    if input.peek_group(Delimiter.PAREN):
        paren, content = input.open_group(Delimiter.PAREN)
        bound = parse_trait_bound(content)
        content.expect_end()
        return replace(bound, paren=paren)
    return parse_trait_bound(input)
