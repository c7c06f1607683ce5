"""Tests for the type-expression lexer."""

from __future__ import annotations

import pytest

from tyexpr.errors import CompileError
from tyexpr.lexer import Lexer
from tyexpr.tokens import TokenKind


def _lex(source: str):
    return Lexer(source, "<test>").lex()


def _kinds(source: str) -> list[TokenKind]:
    return [t.kind for t in _lex(source)]


def _values(source: str) -> list[str]:
    return [t.value for t in _lex(source) if t.kind != TokenKind.EOF]


class TestLexerWords:
    def test_identifiers_and_keywords(self):
        tokens = _lex("mut Foo")
        assert tokens[0].kind == TokenKind.KEYWORD
        assert tokens[1].kind == TokenKind.IDENTIFIER

    def test_contextual_dyn_is_identifier(self):
        assert _kinds("dyn") == [TokenKind.IDENTIFIER, TokenKind.EOF]

    def test_underscore_is_keyword(self):
        assert _kinds("_") == [TokenKind.KEYWORD, TokenKind.EOF]

    def test_underscore_prefixed_identifier(self):
        assert _kinds("_foo") == [TokenKind.IDENTIFIER, TokenKind.EOF]

    def test_raw_identifier(self):
        tokens = _lex("r#type")
        assert tokens[0].kind == TokenKind.IDENTIFIER
        assert tokens[0].value == "r#type"

    def test_self_variants(self):
        assert _kinds("self Self") == [TokenKind.KEYWORD, TokenKind.KEYWORD, TokenKind.EOF]


class TestLexerQuotes:
    def test_lifetime(self):
        tokens = _lex("'a")
        assert tokens[0].kind == TokenKind.LIFETIME
        assert tokens[0].value == "'a"

    def test_static_lifetime(self):
        assert _values("&'static str") == ["&", "'static", "str"]

    def test_char_literal(self):
        tokens = _lex("'a'")
        assert tokens[0].kind == TokenKind.CHAR_LIT
        assert tokens[0].value == "'a'"

    def test_escaped_char(self):
        assert _kinds(r"'\n'") == [TokenKind.CHAR_LIT, TokenKind.EOF]

    def test_unicode_escape_char(self):
        assert _values(r"'\u{1F600}'") == [r"'\u{1F600}'"]

    def test_byte_literal(self):
        assert _kinds("b'x'") == [TokenKind.BYTE_LIT, TokenKind.EOF]


class TestLexerLiterals:
    def test_integer(self):
        assert _kinds("42") == [TokenKind.INTEGER_LIT, TokenKind.EOF]

    def test_suffixed_integer(self):
        tokens = _lex("4usize")
        assert tokens[0].kind == TokenKind.INTEGER_LIT
        assert tokens[0].value == "4usize"

    def test_hex(self):
        assert _values("0xFF_u8") == ["0xFF_u8"]

    def test_float(self):
        assert _kinds("1.5") == [TokenKind.FLOAT_LIT, TokenKind.EOF]

    def test_float_suffix(self):
        assert _kinds("1f32") == [TokenKind.FLOAT_LIT, TokenKind.EOF]

    def test_exponent(self):
        assert _kinds("1e10") == [TokenKind.FLOAT_LIT, TokenKind.EOF]

    def test_string(self):
        tokens = _lex('"C"')
        assert tokens[0].kind == TokenKind.STRING_LIT
        assert tokens[0].value == '"C"'

    def test_string_with_escape(self):
        assert _values(r'"a\"b"') == [r'"a\"b"']

    def test_raw_string(self):
        tokens = _lex('r#"x"y"#')
        assert tokens[0].kind == TokenKind.STRING_LIT
        assert tokens[0].value == 'r#"x"y"#'

    def test_byte_string(self):
        assert _kinds('b"abc"') == [TokenKind.BYTE_STRING_LIT, TokenKind.EOF]


class TestLexerPunct:
    def test_single_chars(self):
        assert _values("::") == [":", ":"]

    def test_joint_flags(self):
        tokens = _lex("-> ! ")
        assert tokens[0].joint
        assert not tokens[1].joint
        assert not tokens[2].joint

    def test_closing_angles_joint(self):
        tokens = _lex(">>")
        assert tokens[0].joint
        assert not tokens[1].joint

    def test_spaced_angles_not_joint(self):
        tokens = _lex("> >")
        assert not tokens[0].joint

    def test_punct_before_delimiter_not_joint(self):
        tokens = _lex("!(")
        assert not tokens[0].joint
        assert tokens[1].kind == TokenKind.LPAREN

    def test_delimiters(self):
        assert _kinds("([{}])") == [
            TokenKind.LPAREN, TokenKind.LBRACKET, TokenKind.LBRACE,
            TokenKind.RBRACE, TokenKind.RBRACKET, TokenKind.RPAREN,
            TokenKind.EOF,
        ]


class TestLexerTrivia:
    def test_line_comment(self):
        assert _values("u8 // trailing") == ["u8"]

    def test_nested_block_comment(self):
        assert _values("a /* x /* y */ z */ b") == ["a", "b"]

    def test_positions(self):
        tokens = Lexer("a\n  b", "f.ty").lex()
        assert (tokens[0].span.start_line, tokens[0].span.start_col) == (1, 1)
        assert (tokens[1].span.start_line, tokens[1].span.start_col) == (2, 3)
        assert tokens[1].span.file == "f.ty"

    def test_starting_line(self):
        tokens = Lexer("u8", "f.ty", line=7).lex()
        assert tokens[0].span.start_line == 7

    def test_eof_always_present(self):
        assert _kinds("") == [TokenKind.EOF]


class TestLexerErrors:
    def test_unexpected_character(self):
        with pytest.raises(CompileError) as exc_info:
            _lex("u8 `")
        diag = exc_info.value.diagnostics[0]
        assert diag.code == "E100"
        assert "unexpected character" in diag.message
        assert diag.labels[0].span.start_col == 4

    def test_unterminated_string(self):
        with pytest.raises(CompileError, match="unterminated string literal"):
            _lex('"abc')

    def test_unterminated_block_comment(self):
        with pytest.raises(CompileError, match="unterminated block comment"):
            _lex("a /* b")

    def test_errors_are_collected(self):
        with pytest.raises(CompileError) as exc_info:
            _lex("` $x `")
        assert len(exc_info.value.diagnostics) == 2
