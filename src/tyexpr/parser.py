"""Recursive descent parser for type expressions.

Every entry point takes ``allow_plus`` explicitly. With it set, a ``+``
after a path, a lifetime or a parenthesized bound continues a trait
object; without it the ``+`` is left for the caller, as after ``&``,
``*const`` or a function's ``->``.

The grammar is ambiguous on its first token, so the parser dispatches on
at most two tokens of lookahead and, in two places, rewrites a node it
has already built once the following token is visible:

- ``(Path) + Bound`` turns the parenthesized path into a parenthesized
  trait bound of a trait object;
- ``Path!(...)`` turns an argument-less path into a macro invocation.
"""

from __future__ import annotations

from dataclasses import replace

from tyexpr.ast_nodes import (
    Abi,
    ArrayType,
    BareFnArg,
    BareFnType,
    BoundLifetimes,
    DefaultReturn,
    ExplicitReturn,
    GroupType,
    ImplTraitType,
    InferType,
    Macro,
    MacroType,
    NeverType,
    ParenType,
    PathType,
    PointerType,
    ReferenceType,
    ReturnType,
    SliceType,
    TraitBound,
    TraitObjectType,
    TupleType,
    TypeExpr,
    TypeParamBound,
)
from tyexpr.attr import parse_outer_attributes
from tyexpr.buffer import build_token_trees
from tyexpr.cursor import Cursor
from tyexpr.expr import parse_expr
from tyexpr.generics import (
    parse_bound_lifetimes,
    parse_optional_bound_lifetimes,
    parse_optional_lifetime,
    parse_trait_bound,
    parse_type_param_bound,
)
from tyexpr.lexer import Lexer
from tyexpr.mac import parse_delimiter
from tyexpr.path import parse_parenthesized_args, parse_path, parse_qpath, with_last_arguments
from tyexpr.punctuated import Punctuated, parse_terminated
from tyexpr.tokens import PATH_ROOTS, Delim, Delimiter, TokenKind

# What may follow a `for<...>` binder in type position.
_BINDER_FOLLOWERS = ("fn", "unsafe", "extern", "super", "self", "Self", "crate")


# ── Entry points ─────────────────────────────────────────────────


def parse_type(input: Cursor, allow_plus: bool = True) -> TypeExpr:
    return _ambig_type(input, allow_plus)


def parse_type_without_plus(input: Cursor) -> TypeExpr:
    """Parse a type where a following ``+`` belongs to the caller."""
    return _ambig_type(input, allow_plus=False)


def parse_str(text: str, filename: str = "<string>", allow_plus: bool = True,
              line: int = 1) -> TypeExpr:
    """Tokenize ``text`` and parse it as exactly one type expression.

    Raises CompileError for lexical or delimiter errors and ParseError
    when the tokens do not form a type or leave anything unconsumed.
    """
    tokens = Lexer(text, filename, line).lex()
    eof = tokens[-1]
    input = Cursor(build_token_trees(tokens), eof.span)
    ty = _ambig_type(input, allow_plus)
    input.expect_end()
    return ty


# ── Dispatch ─────────────────────────────────────────────────────


def _ambig_type(input: Cursor, allow_plus: bool) -> TypeExpr:
    if input.peek_group(Delimiter.NONE):
        return parse_group_type(input)

    lifetimes: BoundLifetimes | None = None
    lookahead = input.lookahead()
    if lookahead.peek_keyword("for"):
        lifetimes = parse_bound_lifetimes(input)
        lookahead = input.lookahead()
        if not (lookahead.peek_ident()
                or any(lookahead.peek_keyword(word) for word in _BINDER_FOLLOWERS)):
            raise lookahead.error()

    if lookahead.peek_group(Delimiter.PAREN):
        return _parse_parenthesized(input, allow_plus)

    if (lookahead.peek_keyword("fn")
            or lookahead.peek_keyword("unsafe")
            or (lookahead.peek_keyword("extern") and not input.peek_punct("::", 1))):
        return replace(parse_bare_fn(input), lifetimes=lifetimes)

    if (lookahead.peek_ident()
            or any(input.peek_keyword(word) for word in PATH_ROOTS)
            or lookahead.peek_punct("::")
            or lookahead.peek_punct("<")):
        return _parse_path_like(input, lifetimes, allow_plus)

    if lookahead.peek_group(Delimiter.BRACKET):
        return _parse_array_or_slice(input)
    if lookahead.peek_punct("*"):
        return parse_pointer(input)
    if lookahead.peek_punct("&"):
        return parse_reference(input)
    if lookahead.peek_punct("!") and not input.peek_punct("!="):
        return parse_never(input)
    if lookahead.peek_keyword("impl"):
        return parse_impl_trait(input)
    if lookahead.peek_keyword("_"):
        return parse_infer(input)
    if lookahead.peek_lifetime():
        return parse_trait_object(input, allow_plus)

    raise lookahead.error()


def _parse_parenthesized(input: Cursor, allow_plus: bool) -> TypeExpr:
    """``()``, ``(T)``, ``(T,)``, ``(A, B)``, ``('a + T)``, ``(?Sized) + T``, ``(T) + U``"""
    paren, content = input.open_group(Delimiter.PAREN)
    if content.is_empty():
        return TupleType(paren, Punctuated(","))

    if content.peek_lifetime():
        elem = parse_trait_object(content, allow_plus=True)
        content.expect_end()
        return ParenType(paren, elem)

    if content.peek_punct("?"):
        bound = replace(parse_trait_bound(content), paren=paren)
        content.expect_end()
        bounds: Punctuated[TypeParamBound] = Punctuated("+")
        bounds.push_value(bound)
        _parse_more_bounds(input, bounds)
        return TraitObjectType(None, bounds)

    first = parse_type(content)
    if content.peek_punct(","):
        elems: Punctuated[TypeExpr] = Punctuated(",")
        elems.push_value(first)
        elems.push_punct(content.expect_punct(","))
        elems.extend(parse_terminated(content, parse_type, ",").pairs())
        return TupleType(paren, elems)
    content.expect_end()

    if allow_plus and input.peek_punct("+"):
        promoted = _as_parenthesized_bound(first, paren)
        if promoted is not None:
            bounds = Punctuated("+")
            bounds.push_value(promoted)
            _parse_more_bounds(input, bounds)
            return TraitObjectType(None, bounds)

    return ParenType(paren, first)


def _as_parenthesized_bound(ty: TypeExpr, paren: Delim) -> TypeParamBound | None:
    """Reinterpret the type inside ``( )`` as a bound, or None if it is not one."""
    if isinstance(ty, PathType) and ty.qself is None:
        return TraitBound(paren, None, None, ty.path)
    if (isinstance(ty, TraitObjectType) and ty.dyn_token is None
            and len(ty.bounds) == 1 and not ty.bounds.trailing_punct()):
        bound = ty.bounds[0]
        if isinstance(bound, TraitBound):
            return replace(bound, paren=paren)
        return bound
    return None


def _parse_more_bounds(input: Cursor, bounds: Punctuated[TypeParamBound]) -> None:
    while input.peek_punct("+"):
        bounds.push_punct(input.expect_punct("+"))
        bounds.push_value(parse_type_param_bound(input))


def _parse_path_like(input: Cursor, lifetimes: BoundLifetimes | None,
                     allow_plus: bool) -> TypeExpr:
    """A path type, or what a path turns into: a macro or a trait object."""
    if input.peek_keyword("dyn"):
        trait_object = parse_trait_object(input, allow_plus)
        if lifetimes is not None:
            trait_object = _attach_binder(input, trait_object, lifetimes)
        return trait_object

    ty = parse_type_path(input)
    if ty.qself is not None:
        return ty

    if (input.peek_punct("!") and not input.peek_punct("!=")
            and all(seg.arguments is None for seg in ty.path.segments)):
        bang = input.expect_punct("!")
        delimiter, tokens = parse_delimiter(input)
        return MacroType(Macro(ty.path, bang, delimiter, tokens))

    if lifetimes is not None or (allow_plus and input.peek_punct("+")):
        bounds: Punctuated[TypeParamBound] = Punctuated("+")
        bounds.push_value(TraitBound(None, None, lifetimes, ty.path))
        if allow_plus:
            while input.peek_punct("+"):
                bounds.push_punct(input.expect_punct("+"))
                if input.peek_punct(">"):
                    break
                bounds.push_value(parse_type_param_bound(input))
        return TraitObjectType(None, bounds)

    return ty


def _attach_binder(input: Cursor, trait_object: TraitObjectType,
                   lifetimes: BoundLifetimes) -> TraitObjectType:
    pairs = list(trait_object.bounds.pairs())
    first, sep = pairs[0]
    if not isinstance(first, TraitBound):
        raise input.error("expected a trait bound after `for<...>`")
    pairs[0] = (replace(first, lifetimes=lifetimes), sep)
    bounds: Punctuated[TypeParamBound] = Punctuated("+")
    bounds.extend(pairs)
    return replace(trait_object, bounds=bounds)


# ── Individual forms ─────────────────────────────────────────────


def parse_group_type(input: Cursor) -> GroupType:
    group, content = input.open_group(Delimiter.NONE)
    elem = parse_type(content)
    content.expect_end()
    return GroupType(group, elem)


def parse_type_path(input: Cursor) -> PathType:
    """A possibly qualified path, with ``(A) -> B`` sugar on its last segment."""
    qself, path = parse_qpath(input, expr_style=False)
    last = path.segments.last()
    if last is not None and last.arguments is None and input.peek_group(Delimiter.PAREN):
        path = with_last_arguments(path, parse_parenthesized_args(input))
    return PathType(qself, path)


def _parse_array_or_slice(input: Cursor) -> ArrayType | SliceType:
    bracket, content = input.open_group(Delimiter.BRACKET)
    elem = parse_type(content)
    if content.peek_punct(";"):
        semi = content.expect_punct(";")
        length = parse_expr(content)
        content.expect_end()
        return ArrayType(bracket, elem, semi, length)
    content.expect_end()
    return SliceType(bracket, elem)


def parse_slice(input: Cursor) -> SliceType:
    bracket, content = input.open_group(Delimiter.BRACKET)
    elem = parse_type(content)
    content.expect_end()
    return SliceType(bracket, elem)


def parse_array(input: Cursor) -> ArrayType:
    """``[T; N]``; unlike the dispatcher, the length is required."""
    bracket, content = input.open_group(Delimiter.BRACKET)
    elem = parse_type(content)
    semi = content.expect_punct(";")
    length = parse_expr(content)
    content.expect_end()
    return ArrayType(bracket, elem, semi, length)


def parse_tuple(input: Cursor) -> TupleType:
    """``()``, ``(T,)`` or ``(A, B)``. A lone element needs its trailing comma."""
    paren, content = input.open_group(Delimiter.PAREN)
    elems = parse_terminated(content, parse_type, ",")
    if len(elems) == 1 and not elems.trailing_punct():
        raise content.error("expected `,`")
    return TupleType(paren, elems)


def parse_paren(input: Cursor, allow_plus: bool = True) -> ParenType:
    paren, content = input.open_group(Delimiter.PAREN)
    elem = parse_type(content, allow_plus)
    content.expect_end()
    return ParenType(paren, elem)


def parse_never(input: Cursor) -> NeverType:
    if input.peek_punct("!="):
        raise input.error("expected `!`")
    return NeverType(input.expect_punct("!"))


def parse_infer(input: Cursor) -> InferType:
    return InferType(input.expect_keyword("_"))


def parse_macro_type(input: Cursor) -> MacroType:
    """``name!(...)``, ``a::b![...]`` or ``m! { ... }`` with an argument-less path."""
    path = parse_path(input)
    if any(seg.arguments is not None for seg in path.segments):
        raise input.error("expected `!`")
    bang = input.expect_punct("!")
    delimiter, tokens = parse_delimiter(input)
    return MacroType(Macro(path, bang, delimiter, tokens))


def parse_pointer(input: Cursor) -> PointerType:
    star = input.expect_punct("*")
    lookahead = input.lookahead()
    if lookahead.peek_keyword("const"):
        const_token, mutability = input.expect_keyword("const"), None
    elif lookahead.peek_keyword("mut"):
        const_token, mutability = None, input.expect_keyword("mut")
    else:
        raise lookahead.error()
    return PointerType(star, const_token, mutability, parse_type_without_plus(input))


def parse_reference(input: Cursor) -> ReferenceType:
    and_token = input.expect_punct("&")
    lifetime = parse_optional_lifetime(input)
    mutability = input.optional_keyword("mut")
    # `&A + B` is `(&A) + B`
    return ReferenceType(and_token, lifetime, mutability, parse_type_without_plus(input))


def parse_trait_object(input: Cursor, allow_plus: bool = True) -> TraitObjectType:
    """``dyn A + B + 'a``; without ``allow_plus`` only a single bound is read.

    A list of nothing but lifetimes is not a trait object.
    """
    dyn_token = input.optional_keyword("dyn")
    bounds: Punctuated[TypeParamBound] = Punctuated("+")
    if allow_plus:
        while True:
            bounds.push_value(parse_type_param_bound(input))
            if not input.peek_punct("+"):
                break
            bounds.push_punct(input.expect_punct("+"))
            if input.peek_punct(">"):
                break
    else:
        bounds.push_value(parse_type_param_bound(input))
    if not any(isinstance(bound, TraitBound) for bound in bounds):
        raise input.error("expected at least one type")
    return TraitObjectType(dyn_token, bounds)


def parse_impl_trait(input: Cursor) -> ImplTraitType:
    impl_token = input.expect_keyword("impl")
    bounds: Punctuated[TypeParamBound] = Punctuated("+")
    while True:
        bounds.push_value(parse_type_param_bound(input))
        if not input.peek_punct("+"):
            break
        bounds.push_punct(input.expect_punct("+"))
    return ImplTraitType(impl_token, bounds)


# ── Function pointers ────────────────────────────────────────────


def parse_bare_fn(input: Cursor) -> BareFnType:
    """``for<'a> unsafe extern "C" fn(&'a u8, ...) -> bool``

    A variadic ``...`` is accepted only first or after a trailing comma.
    """
    lifetimes = parse_optional_bound_lifetimes(input)
    unsafety = input.optional_keyword("unsafe")
    abi = parse_abi(input) if input.peek_keyword("extern") else None
    fn_token = input.expect_keyword("fn")
    paren, args = input.open_group(Delimiter.PAREN)

    inputs: Punctuated[BareFnArg] = Punctuated(",")
    while not args.is_empty() and not args.peek_punct("..."):
        inputs.push_value(parse_bare_fn_arg(args))
        if args.is_empty():
            break
        inputs.push_punct(args.expect_punct(","))

    variadic = None
    if inputs.empty_or_trailing() and args.peek_punct("..."):
        variadic = args.expect_punct("...")
    args.expect_end()

    output = parse_return_type(input, allow_plus=False)
    return BareFnType(lifetimes, unsafety, abi, fn_token, paren, inputs, variadic, output)


def parse_bare_fn_arg(input: Cursor) -> BareFnArg:
    attrs = parse_outer_attributes(input)
    name = None
    if ((input.peek_ident() or input.peek_keyword("_"))
            and input.peek_punct(":", 1) and not input.peek_punct("::", 1)):
        name = (input.expect_any_ident(), input.expect_punct(":"))
    return BareFnArg(attrs, name, parse_type(input))


def parse_abi(input: Cursor) -> Abi:
    extern_token = input.expect_keyword("extern")
    name = None
    if input.peek_kind(TokenKind.STRING_LIT):
        name = input.expect_literal()
    return Abi(extern_token, name)


def parse_return_type(input: Cursor, allow_plus: bool = True) -> ReturnType:
    if input.peek_punct("->"):
        arrow = input.expect_punct("->")
        return ExplicitReturn(arrow, _ambig_type(input, allow_plus))
    return DefaultReturn()


def parse_return_type_without_plus(input: Cursor) -> ReturnType:
    return parse_return_type(input, allow_plus=False)
