"""Constant expressions: array lengths and const generic arguments.

Only the operators that can appear in a constant position are handled.
Binding powers follow the usual precedence, loosest first.
"""

from __future__ import annotations

from tyexpr.ast_nodes import (
    BinaryExpr,
    BlockExpr,
    CallExpr,
    CastExpr,
    Expr,
    LitExpr,
    Macro,
    MacroExpr,
    ParenExpr,
    PathExpr,
    UnaryExpr,
)
from tyexpr.cursor import Cursor
from tyexpr.punctuated import parse_terminated
from tyexpr.tokens import PATH_ROOTS, Delimiter

_INFIX_BP: dict[str, tuple[int, int]] = {
    "||": (1, 2),
    "&&": (3, 4),
    "==": (5, 6),
    "!=": (5, 6),
    "<=": (5, 6),
    ">=": (5, 6),
    "<": (5, 6),
    ">": (5, 6),
    "|": (7, 8),
    "^": (9, 10),
    "&": (11, 12),
    "<<": (13, 14),
    ">>": (13, 14),
    "+": (15, 16),
    "-": (15, 16),
    "*": (17, 18),
    "/": (17, 18),
    "%": (17, 18),
}

# Two-character operators first so `<<` is not read as `<`.
_INFIX_OPS = sorted(_INFIX_BP, key=len, reverse=True)

_CAST_BP = 19  # left bp for `as`
_PREFIX_BP = 21  # right bp for unary - ! * &
_POSTFIX_BP = 23  # left bp for calls

_PREFIX_OPS = ("-", "!", "*", "&")


def parse_expr(input: Cursor) -> Expr:
    return _parse_expression(input, 0)


def _parse_expression(input: Cursor, min_bp: int) -> Expr:
    """Parse an expression using Pratt parsing with binding powers."""
    left = _parse_prefix(input)

    while True:
        if input.peek_group(Delimiter.PAREN):
            if _POSTFIX_BP < min_bp:
                break
            paren, content = input.open_group(Delimiter.PAREN)
            left = CallExpr(left, paren, parse_terminated(content, parse_expr, ","))
            continue

        if input.peek_keyword("as"):
            if _CAST_BP < min_bp:
                break
            from tyexpr.parser import parse_type_without_plus

            as_token = input.expect_keyword("as")
            left = CastExpr(left, as_token, parse_type_without_plus(input))
            continue

        op = _peek_infix(input)
        if op is None:
            break
        left_bp, right_bp = _INFIX_BP[op]
        if left_bp < min_bp:
            break
        op_tok = input.expect_punct(op)
        right = _parse_expression(input, right_bp)
        left = BinaryExpr(left, op_tok, right)

    return left


def _peek_infix(input: Cursor) -> str | None:
    for op in _INFIX_OPS:
        if input.peek_punct(op):
            return op
    return None


def _parse_prefix(input: Cursor) -> Expr:
    """Parse a unary operator application or an atom."""
    for op in _PREFIX_OPS:
        if input.peek_punct(op):
            op_tok = input.expect_punct(op)
            operand = _parse_expression(input, _PREFIX_BP)
            return UnaryExpr(op_tok, operand)

    if input.peek_literal():
        return LitExpr(input.expect_literal())

    if input.peek_keyword("true") or input.peek_keyword("false"):
        return LitExpr(input.advance())  # type: ignore[arg-type]

    if input.peek_group(Delimiter.PAREN):
        paren, content = input.open_group(Delimiter.PAREN)
        inner = parse_expr(content)
        content.expect_end()
        return ParenExpr(paren, inner)

    if input.peek_group(Delimiter.BRACE):
        brace, content = input.open_group(Delimiter.BRACE)
        return BlockExpr(brace, content.rest())

    lookahead = input.lookahead()
    if (lookahead.peek_ident()
            or any(input.peek_keyword(word) for word in PATH_ROOTS)
            or lookahead.peek_punct("::")
            or lookahead.peek_punct("<")):
        return _parse_path_expr(input)

    lookahead.peek_literal()
    raise lookahead.error()


def _parse_path_expr(input: Cursor) -> Expr:
    from tyexpr.mac import parse_delimiter
    from tyexpr.path import parse_qpath

    qself, path = parse_qpath(input, expr_style=True)
    if (qself is None
            and input.peek_punct("!") and not input.peek_punct("!=")
            and all(seg.arguments is None for seg in path.segments)):
        bang = input.expect_punct("!")
        delimiter, tokens = parse_delimiter(input)
        return MacroExpr(Macro(path, bang, delimiter, tokens))
    return PathExpr(qself, path)
