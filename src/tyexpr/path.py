"""Paths, generic arguments and qualified self types.

Generic arguments contain types and bounds, so this module reaches back
into the type and bound grammars; those imports happen at call time.
"""

from __future__ import annotations

from dataclasses import replace

from tyexpr.ast_nodes import (
    AngleBracketedArgs,
    Binding,
    BlockExpr,
    ConstArg,
    Constraint,
    GenericArgument,
    LitExpr,
    ParenthesizedArgs,
    Path,
    PathArguments,
    PathSegment,
    QSelf,
    TypeExpr,
    TypeParamBound,
)
from tyexpr.cursor import Cursor
from tyexpr.punctuated import Punctuated, parse_terminated
from tyexpr.tokens import Delimiter

_UNGENERIC_ROOTS = ("super", "self", "crate", "extern")


def parse_path(input: Cursor, expr_style: bool = False) -> Path:
    """``::std::collections::HashMap<K, V>``

    In expression style generic arguments need a turbofish (``::<``) so
    that ``<`` can be read as a comparison.
    """
    leading_colon = input.optional_punct("::")
    segments: Punctuated[PathSegment] = Punctuated("::")
    segments.push_value(parse_path_segment(input, expr_style))
    while input.peek_punct("::"):
        segments.push_punct(input.expect_punct("::"))
        segments.push_value(parse_path_segment(input, expr_style))
    return Path(leading_colon, segments)


def parse_path_segment(input: Cursor, expr_style: bool) -> PathSegment:
    if any(input.peek_keyword(word) for word in _UNGENERIC_ROOTS):
        return PathSegment(input.expect_any_ident())

    if input.peek_keyword("Self"):
        ident = input.expect_any_ident()
    else:
        ident = input.expect_ident()

    if ((not expr_style and input.peek_punct("<") and not input.peek_punct("<="))
            or (input.peek_punct("::") and input.peek_punct("<", 2))):
        return PathSegment(ident, parse_angle_bracketed(input))
    return PathSegment(ident)


def parse_qpath(input: Cursor, expr_style: bool) -> tuple[QSelf | None, Path]:
    """A path with an optional ``<T as Trait>::`` prefix."""
    from tyexpr.parser import parse_type

    if not input.peek_punct("<"):
        return None, parse_path(input, expr_style)

    lt = input.expect_punct("<")
    this = parse_type(input)
    as_token = input.optional_keyword("as")
    trait_path = parse_path(input, expr_style=False) if as_token is not None else None
    gt = input.expect_punct(">")
    colon2 = input.expect_punct("::")

    rest: Punctuated[PathSegment] = Punctuated("::")
    while True:
        rest.push_value(parse_path_segment(input, expr_style))
        if not input.peek_punct("::"):
            break
        rest.push_punct(input.expect_punct("::"))

    if trait_path is None:
        return QSelf(lt, this, 0, None, gt), Path(colon2, rest)

    segments: Punctuated[PathSegment] = Punctuated("::")
    segments.extend(trait_path.segments.pairs())
    segments.push_punct(colon2)
    segments.extend(rest.pairs())
    position = len(trait_path.segments)
    return QSelf(lt, this, position, as_token, gt), Path(trait_path.leading_colon, segments)


# ── Generic arguments ────────────────────────────────────────────


def parse_angle_bracketed(input: Cursor) -> AngleBracketedArgs:
    colon2 = input.optional_punct("::")
    lt = input.expect_punct("<")
    args: Punctuated[GenericArgument] = Punctuated(",")
    while not input.peek_punct(">"):
        args.push_value(parse_generic_argument(input))
        if input.peek_punct(">"):
            break
        args.push_punct(input.expect_punct(","))
    gt = input.expect_punct(">")
    return AngleBracketedArgs(colon2, lt, args, gt)


def parse_generic_argument(input: Cursor) -> GenericArgument:
    from tyexpr.generics import parse_lifetime
    from tyexpr.parser import parse_type

    if input.peek_lifetime() and not input.peek_punct("+", 1):
        return parse_lifetime(input)
    if input.peek_ident() and input.peek_punct("=", 1):
        ident = input.expect_ident()
        eq = input.expect_punct("=")
        return Binding(ident, eq, parse_type(input))
    if input.peek_ident() and input.peek_punct(":", 1) and not input.peek_punct("::", 1):
        ident = input.expect_ident()
        colon = input.expect_punct(":")
        return Constraint(ident, colon, _parse_constraint_bounds(input))
    if input.peek_literal():
        return ConstArg(LitExpr(input.expect_literal()))
    if input.peek_group(Delimiter.BRACE):
        brace, content = input.open_group(Delimiter.BRACE)
        return ConstArg(BlockExpr(brace, content.rest()))
    return parse_type(input)


def _parse_constraint_bounds(input: Cursor) -> Punctuated[TypeParamBound]:
    from tyexpr.generics import parse_type_param_bound

    bounds: Punctuated[TypeParamBound] = Punctuated("+")
    while not (input.peek_punct(",") or input.peek_punct(">")):
        bounds.push_value(parse_type_param_bound(input))
        if not input.peek_punct("+"):
            break
        bounds.push_punct(input.expect_punct("+"))
    return bounds


def parse_parenthesized_args(input: Cursor) -> ParenthesizedArgs:
    """``(A, B) -> C`` following ``Fn``, ``FnMut`` or ``FnOnce``."""
    from tyexpr.parser import parse_return_type, parse_type

    paren, content = input.open_group(Delimiter.PAREN)
    inputs: Punctuated[TypeExpr] = parse_terminated(content, parse_type, ",")
    output = parse_return_type(input, allow_plus=False)
    return ParenthesizedArgs(paren, inputs, output)


def with_last_arguments(path: Path, arguments: PathArguments) -> Path:
    """Copy of ``path`` whose final segment carries ``arguments``."""
    pairs = list(path.segments.pairs())
    segment, sep = pairs[-1]
    pairs[-1] = (replace(segment, arguments=arguments), sep)
    segments: Punctuated[PathSegment] = Punctuated("::")
    segments.extend(pairs)
    return replace(path, segments=segments)
