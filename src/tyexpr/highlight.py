"""Pygments lexer for type-expression text."""

from __future__ import annotations

import pygments
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class TypeExprLexer(RegexLexer):
    """Pygments lexer for type expressions (``*.ty`` files)."""

    name = "TypeExpr"
    aliases = ["tyexpr"]
    filenames = ["*.ty"]
    mimetypes = ["text/x-tyexpr"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Comments
            (r"//.*$", Comment.Single),
            (r"/\*", Comment.Multiline, "comment"),
            # Strings (ABI names, literal const arguments)
            (r'b?r(#*)".*?"\1', String),
            (r'b?"', String, "string"),
            (r"b?'(\\.|[^\\'])'", String.Char),
            # Lifetimes (after char literals so 'a' stays a char)
            (r"'[A-Za-z_][A-Za-z0-9_]*", Name.Label),
            # Numbers
            (r"0x[0-9a-fA-F_]+[A-Za-z0-9]*", Number.Hex),
            (r"0o[0-7_]+[A-Za-z0-9]*", Number.Oct),
            (r"0b[01_]+[A-Za-z0-9]*", Number.Bin),
            (r"[0-9][0-9_]*\.[0-9][0-9_]*([eE][+\-]?[0-9_]+)?", Number.Float),
            (r"[0-9][0-9_]*[A-Za-z0-9]*", Number.Integer),
            # Pointer and reference qualifiers, binders
            (
                words(
                    ("const", "mut", "dyn", "impl", "for", "unsafe", "extern", "fn", "as"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword,
            ),
            # Path roots
            (
                words(
                    ("self", "Self", "super", "crate"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword.Pseudo,
            ),
            (r"\b(true|false)\b", Keyword.Constant),
            (r"\b_\b", Keyword.Pseudo),
            # Primitive types
            (
                words(
                    (
                        "bool", "char", "str",
                        "u8", "u16", "u32", "u64", "u128", "usize",
                        "i8", "i16", "i32", "i64", "i128", "isize",
                        "f32", "f64",
                    ),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword.Type,
            ),
            # Macro invocations
            (r"[A-Za-z_][A-Za-z0-9_]*!", Name.Function.Magic),
            # Operators (multi-char before single-char)
            (r"->|::|\.\.\.", Punctuation),
            (r"==|!=|<=|>=|&&|\|\||<<|>>", Operator),
            (r"[+\-*/%<>&|^!?=#]", Operator),
            # Constant identifiers (ALL_CAPS)
            (r"[A-Z][A-Z0-9_]+\b", Name.Constant),
            # Type names (PascalCase)
            (r"[A-Z][A-Za-z0-9_]*", Name.Class),
            # Identifiers, raw identifiers included
            (r"(r#)?[a-z_][A-Za-z0-9_]*", Name),
            # Punctuation
            (r"[(),;\[\]{}:.]", Punctuation),
        ],
        "string": [
            (r'\\.', String.Escape),
            (r'[^"\\]+', String),
            (r'"', String, "#pop"),
        ],
        "comment": [
            (r"/\*", Comment.Multiline, "#push"),
            (r"\*/", Comment.Multiline, "#pop"),
            (r"[^/*]+", Comment.Multiline),
            (r"[/*]", Comment.Multiline),
        ],
    }


def highlight(text: str, color: bool = True) -> str:
    """Colorize type-expression text for a terminal; plain text when ``color`` is off."""
    if not color:
        return text
    return pygments.highlight(text, TypeExprLexer(), TerminalFormatter())
