"""Tests for separator-interleaved sequences."""

from __future__ import annotations

import pytest

from tests.helpers import cursor
from tyexpr.errors import ParseError
from tyexpr.punctuated import Punctuated, parse_terminated
from tyexpr.tokens import punct


def _ident(input):
    return input.expect_ident().value


class TestPunctuated:
    def test_empty(self):
        p = Punctuated()
        assert len(p) == 0
        assert p.is_empty()
        assert p.empty_or_trailing()
        assert not p.trailing_punct()
        assert p.first() is None
        assert p.last() is None

    def test_values_and_separators(self):
        p = Punctuated()
        p.push_value("a")
        p.push_punct(punct(","))
        p.push_value("b")
        assert list(p) == ["a", "b"]
        assert len(p) == 2
        assert p[1] == "b"
        assert [sep is None for _, sep in p.pairs()] == [False, True]
        assert not p.trailing_punct()
        assert not p.empty_or_trailing()

    def test_trailing(self):
        p = Punctuated()
        p.push_value("a")
        p.push_punct(punct(","))
        assert p.trailing_punct()
        assert p.empty_or_trailing()
        assert p.last() == "a"

    def test_push_inserts_default_separator(self):
        p = Punctuated("+")
        p.push("a")
        p.push("b")
        seps = [sep.value for _, sep in p.pairs() if sep is not None]
        assert seps == ["+"]

    def test_push_after_trailing_separator(self):
        p = Punctuated()
        p.push_value("a")
        p.push_punct(punct(","))
        p.push("b")
        assert len(p) == 2
        assert not p.trailing_punct()

    def test_push_value_twice_rejected(self):
        p = Punctuated()
        p.push_value("a")
        with pytest.raises(ValueError):
            p.push_value("b")

    def test_push_punct_without_value_rejected(self):
        with pytest.raises(ValueError):
            Punctuated().push_punct(punct(","))

    def test_of(self):
        p = Punctuated.of(["a", "b", "c"])
        assert list(p) == ["a", "b", "c"]
        assert not p.trailing_punct()

    def test_extend_copies_pairs(self):
        source = Punctuated.of(["a", "b"])
        source.push_punct(punct(","))
        copy = Punctuated()
        copy.extend(source.pairs())
        assert copy == source

    def test_equality_includes_trailing_separator(self):
        plain = Punctuated.of(["a"])
        trailing = Punctuated.of(["a"])
        trailing.push_punct(punct(","))
        assert plain != trailing
        assert plain == Punctuated.of(["a"])
        assert hash(plain) == hash(Punctuated.of(["a"]))


class TestParseTerminated:
    def test_consumes_everything(self):
        c = cursor("a, b, c")
        p = parse_terminated(c, _ident)
        assert list(p) == ["a", "b", "c"]
        assert c.is_empty()

    def test_trailing_separator_allowed(self):
        p = parse_terminated(cursor("a, b,"), _ident)
        assert len(p) == 2
        assert p.trailing_punct()

    def test_empty(self):
        assert parse_terminated(cursor(""), _ident).is_empty()

    def test_missing_separator(self):
        with pytest.raises(ParseError, match="expected `,`"):
            parse_terminated(cursor("a b"), _ident)

    def test_other_separator(self):
        p = parse_terminated(cursor("a + b"), _ident, "+")
        assert list(p) == ["a", "b"]
