"""Token kinds, token trees and token factories for the tyexpr lexer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Union

from tyexpr.source import CALL_SITE, Span


class TokenKind(Enum):
    # Words
    IDENTIFIER = auto()
    KEYWORD = auto()
    LIFETIME = auto()

    # Literals
    INTEGER_LIT = auto()
    FLOAT_LIT = auto()
    STRING_LIT = auto()
    BYTE_STRING_LIT = auto()
    CHAR_LIT = auto()
    BYTE_LIT = auto()

    # Single punctuation character; multi-character operators are runs
    # of joint PUNCT tokens.
    PUNCT = auto()

    # Delimiters (flat token list only, folded into Group by the buffer)
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()

    # Special
    EOF = auto()


class Delimiter(Enum):
    PAREN = "()"
    BRACKET = "[]"
    BRACE = "{}"
    NONE = ""  # invisible, compiler-inserted

    @property
    def open(self) -> str:
        return self.value[:1]

    @property
    def close(self) -> str:
        return self.value[1:]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span = field(default=CALL_SITE, compare=False)
    joint: bool = False  # PUNCT immediately followed by another PUNCT


@dataclass(frozen=True)
class Group:
    """A delimited token tree."""

    delimiter: Delimiter
    stream: tuple[TokenTree, ...]
    span: Span = field(default=CALL_SITE, compare=False)
    close_span: Span = field(default=CALL_SITE, compare=False)


@dataclass(frozen=True)
class Delim:
    """A recorded delimiter pair on a syntax node, e.g. the parens of a tuple."""

    delimiter: Delimiter
    span: Span = field(default=CALL_SITE, compare=False)


TokenTree = Union[Token, Group]
TokenStream = tuple[TokenTree, ...]


KEYWORDS: frozenset[str] = frozenset({
    "_", "as", "async", "await", "break", "const", "continue", "crate",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "Self", "static", "struct", "super", "trait", "true", "type",
    "unsafe", "use", "where", "while",
    # Reserved
    "abstract", "become", "box", "do", "final", "macro", "override",
    "priv", "typeof", "unsized", "virtual", "yield",
})

# Words usable as the first segment of a path even though they are keywords.
PATH_ROOTS: frozenset[str] = frozenset({"self", "Self", "super", "crate", "extern"})

PUNCT_CHARS = frozenset("~!@#$%^&*-+=|\\;:,.<>/?")

LITERAL_KINDS: frozenset[TokenKind] = frozenset({
    TokenKind.INTEGER_LIT,
    TokenKind.FLOAT_LIT,
    TokenKind.STRING_LIT,
    TokenKind.BYTE_STRING_LIT,
    TokenKind.CHAR_LIT,
    TokenKind.BYTE_LIT,
})

OPEN_DELIMITERS: dict[TokenKind, Delimiter] = {
    TokenKind.LPAREN: Delimiter.PAREN,
    TokenKind.LBRACKET: Delimiter.BRACKET,
    TokenKind.LBRACE: Delimiter.BRACE,
}

CLOSE_DELIMITERS: dict[TokenKind, Delimiter] = {
    TokenKind.RPAREN: Delimiter.PAREN,
    TokenKind.RBRACKET: Delimiter.BRACKET,
    TokenKind.RBRACE: Delimiter.BRACE,
}


# ── Factories for synthesized tokens ─────────────────────────────


def punct(op: str, span: Span = CALL_SITE) -> Token:
    """A punctuation marker; ``op`` may be multi-character (``::``, ``->``)."""
    return Token(TokenKind.PUNCT, op, span)


def keyword(word: str, span: Span = CALL_SITE) -> Token:
    return Token(TokenKind.KEYWORD, word, span)


def lifetime(name: str, span: Span = CALL_SITE) -> Token:
    if not name.startswith("'"):
        name = "'" + name
    return Token(TokenKind.LIFETIME, name, span)


def split_punct(tok: Token) -> Iterator[Token]:
    """Split a multi-character PUNCT marker into joint single characters."""
    last = len(tok.value) - 1
    for i, ch in enumerate(tok.value):
        yield Token(TokenKind.PUNCT, ch, tok.span, joint=i < last)


def flatten(stream: TokenStream) -> Iterator[tuple[TokenKind | Delimiter, str]]:
    """Yield ``(kind, text)`` for every token, descending into groups.

    Spacing and spans are dropped, so two streams that differ only in
    whitespace flatten identically.
    """
    for tree in stream:
        if isinstance(tree, Group):
            if tree.delimiter is not Delimiter.NONE:
                yield tree.delimiter, tree.delimiter.open
            yield from flatten(tree.stream)
            if tree.delimiter is not Delimiter.NONE:
                yield tree.delimiter, tree.delimiter.close
        elif tree.kind is TokenKind.PUNCT:
            for ch in tree.value:
                yield TokenKind.PUNCT, ch
        else:
            yield tree.kind, tree.value
