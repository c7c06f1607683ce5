"""Fold a flat token list into delimited token trees."""

from __future__ import annotations

from tyexpr.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from tyexpr.lexer import Lexer
from tyexpr.tokens import (
    CLOSE_DELIMITERS,
    OPEN_DELIMITERS,
    Delimiter,
    Group,
    Token,
    TokenKind,
    TokenStream,
    TokenTree,
)


def build_token_trees(tokens: list[Token]) -> TokenStream:
    """Match delimiters and nest their contents into ``Group`` trees.

    Raises CompileError listing every unbalanced delimiter.
    """
    diagnostics: list[Diagnostic] = []
    # Each frame: (opening token, delimiter, collected trees)
    stack: list[tuple[Token | None, Delimiter | None, list[TokenTree]]] = [(None, None, [])]

    for tok in tokens:
        if tok.kind == TokenKind.EOF:
            break
        if tok.kind in OPEN_DELIMITERS:
            stack.append((tok, OPEN_DELIMITERS[tok.kind], []))
        elif tok.kind in CLOSE_DELIMITERS:
            delimiter = CLOSE_DELIMITERS[tok.kind]
            open_tok, open_delim, trees = stack[-1]
            if open_tok is None:
                diagnostics.append(_diagnostic(
                    "E102", f"unexpected closing delimiter `{tok.value}`", tok))
                continue
            if open_delim is not delimiter:
                diagnostics.append(_diagnostic(
                    "E102",
                    f"mismatched closing delimiter `{tok.value}` for `{open_tok.value}`",
                    tok,
                ))
            stack.pop()
            stack[-1][2].append(Group(open_delim, tuple(trees), open_tok.span, tok.span))
        else:
            stack[-1][2].append(tok)

    while len(stack) > 1:
        open_tok, _, _ = stack.pop()
        assert open_tok is not None
        diagnostics.append(_diagnostic("E101", f"unclosed delimiter `{open_tok.value}`", open_tok))

    if diagnostics:
        raise CompileError(diagnostics)
    return tuple(stack[0][2])


def tokenize(source: str, filename: str = "<stdin>", line: int = 1) -> TokenStream:
    """Lex source text and build its token trees."""
    return build_token_trees(Lexer(source, filename, line).lex())


def _diagnostic(code: str, message: str, tok: Token) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=message,
        labels=[DiagnosticLabel(span=tok.span, message="")],
    )
