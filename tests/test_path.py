"""Tests for paths, generic arguments and qualified self types."""

from __future__ import annotations

import pytest

from tests.helpers import cursor
from tyexpr.ast_nodes import (
    AngleBracketedArgs,
    Binding,
    ConstArg,
    Constraint,
    Lifetime,
    ParenthesizedArgs,
    PathSegment,
    PathType,
    TraitObjectType,
)
from tyexpr.errors import ParseError
from tyexpr.path import (
    parse_angle_bracketed,
    parse_generic_argument,
    parse_parenthesized_args,
    parse_path,
    parse_qpath,
    with_last_arguments,
)


def _names(path) -> list[str]:
    return [seg.ident.value for seg in path.segments]


class TestParsePath:
    def test_simple(self):
        path = parse_path(cursor("a::b::C"))
        assert _names(path) == ["a", "b", "C"]
        assert path.leading_colon is None

    def test_leading_colon(self):
        path = parse_path(cursor("::std::mem"))
        assert path.leading_colon is not None
        assert _names(path) == ["std", "mem"]

    def test_generic_segment(self):
        path = parse_path(cursor("Vec<u8>::Iter"))
        first = path.segments[0]
        assert isinstance(first.arguments, AngleBracketedArgs)
        assert first.arguments.colon2 is None
        assert path.segments[1].arguments is None

    def test_turbofish_in_type_position(self):
        path = parse_path(cursor("Vec::<u8>"))
        assert path.segments[0].arguments.colon2 is not None

    def test_expression_style_needs_turbofish(self):
        c = cursor("a < b")
        path = parse_path(c, expr_style=True)
        assert path.segments[0].arguments is None
        assert c.peek_punct("<")

    def test_roots_take_no_arguments(self):
        c = cursor("self<T>")
        path = parse_path(c)
        assert _names(path) == ["self"]
        assert c.peek_punct("<")

    def test_self_type_takes_arguments(self):
        path = parse_path(cursor("Self<T>"))
        assert path.segments[0].arguments is not None

    def test_keyword_segment_rejected(self):
        with pytest.raises(ParseError, match="expected identifier"):
            parse_path(cursor("a::fn"))


class TestQualifiedPath:
    def test_unqualified(self):
        qself, path = parse_qpath(cursor("a::b"), expr_style=False)
        assert qself is None
        assert _names(path) == ["a", "b"]

    def test_without_trait(self):
        qself, path = parse_qpath(cursor("<T>::Assoc"), expr_style=False)
        assert qself.position == 0
        assert qself.as_token is None
        assert path.leading_colon is not None
        assert _names(path) == ["Assoc"]

    def test_with_trait(self):
        qself, path = parse_qpath(cursor("<T as a::Trait>::Assoc::More"), expr_style=False)
        assert qself.position == 2
        assert _names(path) == ["a", "Trait", "Assoc", "More"]
        assert isinstance(qself.ty, PathType)

    def test_missing_segment_after_qself(self):
        with pytest.raises(ParseError):
            parse_qpath(cursor("<T as Trait>"), expr_style=False)


class TestGenericArguments:
    def test_lifetime(self):
        assert isinstance(parse_generic_argument(cursor("'a")), Lifetime)

    def test_lifetime_bound_is_a_type(self):
        arg = parse_generic_argument(cursor("'a + Send"))
        assert isinstance(arg, TraitObjectType)

    def test_binding(self):
        arg = parse_generic_argument(cursor("Item = u8"))
        assert isinstance(arg, Binding)
        assert arg.ident.value == "Item"

    def test_constraint(self):
        arg = parse_generic_argument(cursor("Item: Clone + 'a"))
        assert isinstance(arg, Constraint)
        assert len(arg.bounds) == 2

    def test_literal_const(self):
        assert isinstance(parse_generic_argument(cursor("3")), ConstArg)

    def test_block_const(self):
        assert isinstance(parse_generic_argument(cursor("{ N }")), ConstArg)

    def test_path_with_colons_is_a_type(self):
        arg = parse_generic_argument(cursor("a::B"))
        assert isinstance(arg, PathType)

    def test_angle_bracketed_list(self):
        args = parse_angle_bracketed(cursor("<'a, T, Item = U>"))
        assert len(args.args) == 3
        assert not args.args.trailing_punct()

    def test_empty_angle_brackets(self):
        args = parse_angle_bracketed(cursor("<>"))
        assert args.args.is_empty()

    def test_missing_comma(self):
        with pytest.raises(ParseError, match="expected `,`"):
            parse_angle_bracketed(cursor("<A B>"))


class TestParenthesizedArgs:
    def test_inputs_and_output(self):
        args = parse_parenthesized_args(cursor("(A, B) -> C"))
        assert len(args.inputs) == 2
        assert args.output.ty is not None

    def test_output_stops_at_plus(self):
        c = cursor("() -> A + Send")
        args = parse_parenthesized_args(c)
        assert args.inputs.is_empty()
        assert isinstance(args.output.ty, PathType)
        assert c.peek_punct("+")

    def test_with_last_arguments(self):
        path = parse_path(cursor("std::ops::Fn"))
        args = parse_parenthesized_args(cursor("(u8)"))
        rebuilt = with_last_arguments(path, args)
        assert isinstance(rebuilt.segments[2].arguments, ParenthesizedArgs)
        assert path.segments[2].arguments is None
        assert rebuilt.segments[0] == PathSegment(path.segments[0].ident)
