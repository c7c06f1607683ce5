"""Read position over a sequence of token trees.

A cursor only ever sees the trees of one delimited group (or the top
level); entering a group yields a new cursor bounded by that group, so a
malformed inner parse can never consume an enclosing delimiter.
"""

from __future__ import annotations

from tyexpr.errors import ParseError
from tyexpr.source import Span
from tyexpr.tokens import (
    LITERAL_KINDS,
    Delim,
    Delimiter,
    Group,
    Token,
    TokenKind,
    TokenStream,
    TokenTree,
)

_GROUP_NAMES: dict[Delimiter, str] = {
    Delimiter.PAREN: "parentheses",
    Delimiter.BRACKET: "square brackets",
    Delimiter.BRACE: "curly braces",
    Delimiter.NONE: "invisible group",
}


class Cursor:
    """Parses over a token-tree stream bounded by ``end_span``."""

    def __init__(self, stream: TokenStream, end_span: Span) -> None:
        self.stream = stream
        self.pos = 0
        self.end_span = end_span

    # ── Token access ─────────────────────────────────────────────

    def _tree(self, offset: int = 0) -> TokenTree | None:
        idx = self.pos + offset
        if idx < len(self.stream):
            return self.stream[idx]
        return None

    def _token(self, offset: int = 0) -> Token | None:
        tree = self._tree(offset)
        return tree if isinstance(tree, Token) else None

    def is_empty(self) -> bool:
        return self.pos >= len(self.stream)

    def span(self) -> Span:
        """Span of the next token tree, or of the group end when exhausted."""
        tree = self._tree()
        if tree is None:
            return self.end_span
        return tree.span

    def advance(self) -> TokenTree:
        tree = self._tree()
        if tree is None:
            raise self.error("unexpected end of input")
        self.pos += 1
        return tree

    def rest(self) -> TokenStream:
        """Consume and return every remaining token tree."""
        trees = self.stream[self.pos:]
        self.pos = len(self.stream)
        return trees

    def error(self, message: str) -> ParseError:
        return ParseError(message, self.span())

    def expect_end(self) -> None:
        if not self.is_empty():
            raise self.error("unexpected token")

    def lookahead(self) -> Lookahead:
        return Lookahead(self)

    # ── Peeking ──────────────────────────────────────────────────

    def peek_punct(self, op: str, offset: int = 0) -> bool:
        """True if ``op`` starts at ``offset``.

        Every character but the last must be joint to its successor; the
        last may be joint, so ``>`` matches the start of ``>>``.
        """
        last = len(op) - 1
        for i, ch in enumerate(op):
            tok = self._token(offset + i)
            if tok is None or tok.kind != TokenKind.PUNCT or tok.value != ch:
                return False
            if i < last and not tok.joint:
                return False
        return True

    def peek_keyword(self, word: str, offset: int = 0) -> bool:
        tok = self._token(offset)
        return (tok is not None
                and tok.kind in (TokenKind.KEYWORD, TokenKind.IDENTIFIER)
                and tok.value == word)

    def peek_ident(self, offset: int = 0) -> bool:
        """True for a non-keyword identifier (contextual words like ``dyn`` included)."""
        tok = self._token(offset)
        return tok is not None and tok.kind == TokenKind.IDENTIFIER

    def peek_lifetime(self, offset: int = 0) -> bool:
        tok = self._token(offset)
        return tok is not None and tok.kind == TokenKind.LIFETIME

    def peek_literal(self, offset: int = 0) -> bool:
        tok = self._token(offset)
        return tok is not None and tok.kind in LITERAL_KINDS

    def peek_kind(self, kind: TokenKind, offset: int = 0) -> bool:
        tok = self._token(offset)
        return tok is not None and tok.kind == kind

    def peek_group(self, delimiter: Delimiter, offset: int = 0) -> bool:
        tree = self._tree(offset)
        return isinstance(tree, Group) and tree.delimiter is delimiter

    # ── Consuming ────────────────────────────────────────────────

    def expect_punct(self, op: str) -> Token:
        """Consume ``op`` and return it as a single marker token."""
        if not self.peek_punct(op):
            raise self.error(f"expected `{op}`")
        first = self.advance()
        last = first
        for _ in op[1:]:
            last = self.advance()
        return Token(TokenKind.PUNCT, op, first.span.join(last.span))

    def optional_punct(self, op: str) -> Token | None:
        if self.peek_punct(op):
            return self.expect_punct(op)
        return None

    def expect_keyword(self, word: str) -> Token:
        if not self.peek_keyword(word):
            raise self.error(f"expected `{word}`")
        return self.advance()  # type: ignore[return-value]

    def optional_keyword(self, word: str) -> Token | None:
        if self.peek_keyword(word):
            return self.expect_keyword(word)
        return None

    def expect_ident(self) -> Token:
        if not self.peek_ident():
            raise self.error("expected identifier")
        return self.advance()  # type: ignore[return-value]

    def expect_any_ident(self) -> Token:
        """Consume an identifier or keyword, as path roots and arg names allow."""
        tok = self._token()
        if tok is None or tok.kind not in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
            raise self.error("expected identifier")
        return self.advance()  # type: ignore[return-value]

    def expect_lifetime(self) -> Token:
        if not self.peek_lifetime():
            raise self.error("expected lifetime")
        return self.advance()  # type: ignore[return-value]

    def expect_literal(self) -> Token:
        if not self.peek_literal():
            raise self.error("expected literal")
        return self.advance()  # type: ignore[return-value]

    def open_group(self, delimiter: Delimiter) -> tuple[Delim, Cursor]:
        """Enter a delimited group: return its marker and a cursor over its contents."""
        tree = self._tree()
        if not isinstance(tree, Group) or tree.delimiter is not delimiter:
            raise self.error(f"expected {_GROUP_NAMES[delimiter]}")
        self.pos += 1
        return Delim(delimiter, tree.span), Cursor(tree.stream, tree.close_span)

    def any_group(self) -> Group | None:
        """Consume a parenthesized, bracketed or braced group if one is next."""
        tree = self._tree()
        if isinstance(tree, Group) and tree.delimiter is not Delimiter.NONE:
            self.pos += 1
            return tree
        return None


class Lookahead:
    """Peeks at the next token while recording what was tried.

    The recorded names only feed the error message produced when no
    alternative matched.
    """

    def __init__(self, cursor: Cursor) -> None:
        self._cursor = cursor
        self._expected: list[str] = []

    def _record(self, name: str, matched: bool) -> bool:
        if name not in self._expected:
            self._expected.append(name)
        return matched

    def peek_punct(self, op: str) -> bool:
        return self._record(f"`{op}`", self._cursor.peek_punct(op))

    def peek_keyword(self, word: str) -> bool:
        return self._record(f"`{word}`", self._cursor.peek_keyword(word))

    def peek_ident(self) -> bool:
        return self._record("identifier", self._cursor.peek_ident())

    def peek_lifetime(self) -> bool:
        return self._record("lifetime", self._cursor.peek_lifetime())

    def peek_literal(self) -> bool:
        return self._record("literal", self._cursor.peek_literal())

    def peek_group(self, delimiter: Delimiter) -> bool:
        return self._record(_GROUP_NAMES[delimiter], self._cursor.peek_group(delimiter))

    def error(self) -> ParseError:
        expected = self._expected
        if not expected:
            message = "unexpected token"
        elif len(expected) == 1:
            message = f"expected {expected[0]}"
        elif len(expected) == 2:
            message = f"expected {expected[0]} or {expected[1]}"
        else:
            message = f"expected one of: {', '.join(expected)}"
        if self._cursor.is_empty():
            message = f"unexpected end of input, {message}"
        return self._cursor.error(message)
