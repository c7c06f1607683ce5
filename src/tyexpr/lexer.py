"""Lexer for type-expression source text.

Produces a flat stream of tokens. Punctuation is emitted one character
at a time; a punctuation character immediately followed by another is
marked ``joint`` so that the cursor can recognize ``::``, ``->`` or
``...`` while still letting ``>>`` close two generic argument lists.
"""

from __future__ import annotations

from tyexpr.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from tyexpr.source import Span
from tyexpr.tokens import KEYWORDS, PUNCT_CHARS, Token, TokenKind

_DELIMITERS: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF_")


class Lexer:
    """Tokenizes type-expression source text."""

    def __init__(self, source: str, filename: str = "<stdin>", line: int = 1) -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = line
        self.col = 1
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in (' ', '\t', '\r', '\n'):
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                self._skip_line_comment()
            elif ch == '/' and self._peek(1) == '*':
                self._skip_block_comment()
            elif ch == 'r' and self._peek(1) == '#' and self._is_ident_start(self._peek(2)):
                self._lex_raw_identifier()
            elif ch in ('r', 'b') and self._at_prefixed_literal():
                self._lex_prefixed_literal()
            elif ch == '"':
                self._lex_string(self.line, self.col, TokenKind.STRING_LIT)
            elif ch == "'":
                self._lex_quote()
            elif ch.isdigit():
                self._lex_number()
            elif self._is_ident_start(ch):
                self._lex_identifier()
            elif ch in _DELIMITERS:
                line, col = self.line, self.col
                self._advance()
                self._emit(_DELIMITERS[ch], ch, line, col)
            elif ch in PUNCT_CHARS:
                self._lex_punct()
            else:
                self._error(f"unexpected character {ch!r}", self.line, self.col)
                self._advance()

        self._emit(TokenKind.EOF, "", self.line, self.col)

        if self.diagnostics:
            raise CompileError(self.diagnostics)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    @staticmethod
    def _is_ident_start(ch: str) -> bool:
        return ch.isalpha() or ch == '_'

    def _is_ident_char(self) -> bool:
        ch = self._peek()
        return ch.isalnum() or ch == '_'

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int,
              joint: bool = False) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        tok = Token(kind, value, span, joint)
        self.tokens.append(tok)
        return tok

    def _error(self, message: str, line: int, col: int) -> None:
        span = Span(self.filename, line, col, line, col)
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code="E100",
                message=message,
                labels=[DiagnosticLabel(span=span, message="")],
            )
        )

    # ── Comments ─────────────────────────────────────────────────

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self._advance()

    def _skip_block_comment(self) -> None:
        line, col = self.line, self.col
        self._advance()  # /
        self._advance()  # *
        depth = 1
        while self.pos < len(self.source):
            if self._peek() == '/' and self._peek(1) == '*':
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == '*' and self._peek(1) == '/':
                self._advance()
                self._advance()
                depth -= 1
                if depth == 0:
                    return
            else:
                self._advance()
        self._error("unterminated block comment", line, col)

    # ── Words ────────────────────────────────────────────────────

    def _lex_identifier(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        while self.pos < len(self.source) and self._is_ident_char():
            self._advance()
        word = self.source[start:self.pos]
        kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.IDENTIFIER
        self._emit(kind, word, line, col)

    def _lex_raw_identifier(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        self._advance()  # r
        self._advance()  # #
        while self.pos < len(self.source) and self._is_ident_char():
            self._advance()
        self._emit(TokenKind.IDENTIFIER, self.source[start:self.pos], line, col)

    # ── Punctuation ──────────────────────────────────────────────

    def _lex_punct(self) -> None:
        line, col = self.line, self.col
        ch = self._advance()
        joint = self._peek() in PUNCT_CHARS
        self._emit(TokenKind.PUNCT, ch, line, col, joint)

    # ── Literals ─────────────────────────────────────────────────

    def _at_prefixed_literal(self) -> bool:
        ch, nxt = self._peek(), self._peek(1)
        if ch == 'b':
            if nxt in ('"', "'"):
                return True
            return nxt == 'r' and self._raw_string_follows(2)
        return self._raw_string_follows(1)

    def _raw_string_follows(self, offset: int) -> bool:
        while self._peek(offset) == '#':
            offset += 1
        return self._peek(offset) == '"'

    def _lex_prefixed_literal(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        byte = self._peek() == 'b'
        if byte:
            self._advance()
        if self._peek() == 'r':
            self._advance()
            self._lex_raw_string(start, line, col, byte)
        elif self._peek() == "'":
            self._lex_char(start, line, col, TokenKind.BYTE_LIT)
        else:
            kind = TokenKind.BYTE_STRING_LIT if byte else TokenKind.STRING_LIT
            self._lex_string(line, col, kind, start)

    def _lex_raw_string(self, start: int, line: int, col: int, byte: bool) -> None:
        hashes = 0
        while self._peek() == '#':
            self._advance()
            hashes += 1
        self._advance()  # opening quote
        terminator = '"' + '#' * hashes
        while self.pos < len(self.source):
            if self.source.startswith(terminator, self.pos):
                for _ in terminator:
                    self._advance()
                kind = TokenKind.BYTE_STRING_LIT if byte else TokenKind.STRING_LIT
                self._emit(kind, self.source[start:self.pos], line, col)
                return
            self._advance()
        self._error("unterminated raw string", line, col)

    def _lex_string(self, line: int, col: int, kind: TokenKind, start: int | None = None) -> None:
        if start is None:
            start = self.pos
        self._advance()  # opening quote
        while self.pos < len(self.source):
            ch = self._advance()
            if ch == '\\' and self.pos < len(self.source):
                self._advance()
            elif ch == '"':
                self._emit(kind, self.source[start:self.pos], line, col)
                return
        self._error("unterminated string literal", line, col)

    def _lex_quote(self) -> None:
        """A quote starts either a lifetime (``'a``) or a char literal (``'a'``)."""
        line, col = self.line, self.col
        start = self.pos
        if (self._peek(1) != '\\' and self._peek(2) != "'"
                and self._is_ident_start(self._peek(1))):
            self._advance()  # '
            while self.pos < len(self.source) and self._is_ident_char():
                self._advance()
            self._emit(TokenKind.LIFETIME, self.source[start:self.pos], line, col)
            return
        self._lex_char(start, line, col, TokenKind.CHAR_LIT)

    def _lex_char(self, start: int, line: int, col: int, kind: TokenKind) -> None:
        self._advance()  # opening quote
        if self.pos >= len(self.source):
            self._error("unterminated character literal", line, col)
            return
        ch = self._advance()
        if ch == '\\' and self.pos < len(self.source):
            esc = self._advance()
            if esc == 'u' and self._peek() == '{':
                while self.pos < len(self.source) and self._peek() != '}':
                    self._advance()
                if self.pos < len(self.source):
                    self._advance()
        if self._peek() != "'":
            self._error("unterminated character literal", line, col)
            return
        self._advance()
        self._emit(kind, self.source[start:self.pos], line, col)

    def _lex_number(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        kind = TokenKind.INTEGER_LIT
        if self._peek() == '0' and self._peek(1) in ('x', 'o', 'b'):
            self._advance()
            self._advance()
            while self.pos < len(self.source) and self._peek() in _HEX_DIGITS:
                self._advance()
        else:
            self._consume_digits()
            if self._peek() == '.' and self._peek(1).isdigit():
                kind = TokenKind.FLOAT_LIT
                self._advance()
                self._consume_digits()
            if self._peek() in ('e', 'E') and (
                self._peek(1).isdigit()
                or (self._peek(1) in ('+', '-') and self._peek(2).isdigit())
            ):
                kind = TokenKind.FLOAT_LIT
                self._advance()
                if self._peek() in ('+', '-'):
                    self._advance()
                self._consume_digits()
        # Type suffix: 4usize, 1.5f32
        if self._is_ident_start(self._peek()):
            suffix_start = self.pos
            while self.pos < len(self.source) and self._is_ident_char():
                self._advance()
            if self.source[suffix_start] == 'f':
                kind = TokenKind.FLOAT_LIT
        self._emit(kind, self.source[start:self.pos], line, col)

    def _consume_digits(self) -> None:
        while self.pos < len(self.source) and (self._peek().isdigit() or self._peek() == '_'):
            self._advance()
