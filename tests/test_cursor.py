"""Tests for token trees and the parse cursor."""

from __future__ import annotations

import pytest

from tests.helpers import cursor
from tyexpr.buffer import tokenize
from tyexpr.errors import CompileError, ParseError
from tyexpr.tokens import Delimiter, Group, TokenKind


class TestTokenTrees:
    def test_groups_nest(self):
        trees = tokenize("a (b [c]) d", "<test>")
        assert len(trees) == 3
        group = trees[1]
        assert isinstance(group, Group)
        assert group.delimiter is Delimiter.PAREN
        assert isinstance(group.stream[1], Group)
        assert group.stream[1].delimiter is Delimiter.BRACKET

    def test_group_spans(self):
        group = tokenize("(a)", "<test>")[0]
        assert group.span.start_col == 1
        assert group.close_span.start_col == 3

    def test_unclosed(self):
        with pytest.raises(CompileError) as exc_info:
            tokenize("(a", "<test>")
        diag = exc_info.value.diagnostics[0]
        assert diag.code == "E101"
        assert "unclosed delimiter `(`" in diag.message

    def test_unexpected_close(self):
        with pytest.raises(CompileError) as exc_info:
            tokenize("a)", "<test>")
        assert exc_info.value.diagnostics[0].code == "E102"

    def test_mismatched_close(self):
        with pytest.raises(CompileError) as exc_info:
            tokenize("(a]", "<test>")
        diag = exc_info.value.diagnostics[0]
        assert diag.code == "E102"
        assert "mismatched" in diag.message


class TestPeekPunct:
    def test_multi_char_needs_joint(self):
        assert cursor("::").peek_punct("::")
        assert not cursor(": :").peek_punct("::")

    def test_single_matches_start_of_joint_run(self):
        assert cursor(">>").peek_punct(">")

    def test_shift_vs_spaced_angles(self):
        assert cursor(">>").peek_punct(">>")
        assert not cursor("> >").peek_punct(">>")

    def test_offset(self):
        c = cursor("a::b")
        assert c.peek_punct("::", 1)
        assert not c.peek_punct("::")

    def test_expect_returns_merged_marker(self):
        c = cursor("-> u8")
        tok = c.expect_punct("->")
        assert tok.kind is TokenKind.PUNCT
        assert tok.value == "->"
        assert (tok.span.start_col, tok.span.end_col) == (1, 2)
        assert c.peek_ident()

    def test_expect_single_from_joint_run(self):
        c = cursor(">>")
        c.expect_punct(">")
        assert c.peek_punct(">")
        c.expect_punct(">")
        assert c.is_empty()

    def test_expect_failure_message(self):
        with pytest.raises(ParseError, match="expected `,`"):
            cursor("a").expect_punct(",")


class TestCursorWords:
    def test_peek_keyword_accepts_contextual_words(self):
        assert cursor("dyn").peek_keyword("dyn")
        assert cursor("fn").peek_keyword("fn")

    def test_peek_ident_rejects_keywords(self):
        assert not cursor("fn").peek_ident()
        assert cursor("dyn").peek_ident()

    def test_expect_any_ident(self):
        assert cursor("self").expect_any_ident().value == "self"
        with pytest.raises(ParseError, match="expected identifier"):
            cursor("'a").expect_any_ident()

    def test_expect_literal(self):
        assert cursor("42").expect_literal().value == "42"
        with pytest.raises(ParseError, match="expected literal"):
            cursor("x").expect_literal()

    def test_peek_kind(self):
        assert cursor('"C"').peek_kind(TokenKind.STRING_LIT)
        assert not cursor("C").peek_kind(TokenKind.STRING_LIT)


class TestGroups:
    def test_open_group(self):
        c = cursor("(a, b) c")
        delim, inner = c.open_group(Delimiter.PAREN)
        assert delim.delimiter is Delimiter.PAREN
        assert inner.peek_ident()
        assert c.peek_ident()

    def test_open_wrong_group(self):
        with pytest.raises(ParseError, match="expected square brackets"):
            cursor("(a)").open_group(Delimiter.BRACKET)

    def test_inner_cursor_is_bounded(self):
        c = cursor("(a) b")
        _, inner = c.open_group(Delimiter.PAREN)
        inner.advance()
        assert inner.is_empty()
        with pytest.raises(ParseError, match="unexpected end of input"):
            inner.advance()

    def test_inner_end_span_is_closing_delimiter(self):
        c = cursor("(a)")
        _, inner = c.open_group(Delimiter.PAREN)
        inner.advance()
        assert inner.span().start_col == 3

    def test_any_group(self):
        c = cursor("[x]")
        group = c.any_group()
        assert group is not None and group.delimiter is Delimiter.BRACKET
        assert cursor("x").any_group() is None

    def test_rest(self):
        c = cursor("a b c")
        c.advance()
        assert [t.value for t in c.rest()] == ["b", "c"]
        assert c.is_empty()

    def test_expect_end(self):
        cursor("").expect_end()
        with pytest.raises(ParseError, match="unexpected token"):
            cursor("a").expect_end()


class TestLookahead:
    def test_single_expectation(self):
        c = cursor("x")
        lookahead = c.lookahead()
        assert not lookahead.peek_punct("*")
        assert str(lookahead.error()).endswith("expected `*`")

    def test_two_expectations(self):
        lookahead = cursor("x").lookahead()
        lookahead.peek_keyword("const")
        lookahead.peek_keyword("mut")
        assert lookahead.error().message == "expected `const` or `mut`"

    def test_many_expectations(self):
        lookahead = cursor("x").lookahead()
        lookahead.peek_lifetime()
        lookahead.peek_literal()
        lookahead.peek_group(Delimiter.BRACE)
        assert lookahead.error().message == "expected one of: lifetime, literal, curly braces"

    def test_duplicates_recorded_once(self):
        lookahead = cursor("x").lookahead()
        lookahead.peek_punct("<")
        lookahead.peek_punct("<")
        assert lookahead.error().message == "expected `<`"

    def test_end_of_input(self):
        lookahead = cursor("").lookahead()
        lookahead.peek_ident()
        assert lookahead.error().message == "unexpected end of input, expected identifier"

    def test_nothing_tried(self):
        assert cursor("x").lookahead().error().message == "unexpected token"

    def test_error_points_at_next_token(self):
        c = cursor("a b")
        c.advance()
        assert c.lookahead().error().span.start_col == 3
