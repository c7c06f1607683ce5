"""Syntax tree node definitions for type expressions.

Nodes keep the tokens they were parsed from (keywords, punctuation,
delimiters) so the printer can reproduce the input. Those tokens carry
source spans that take no part in equality or hashing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tyexpr.equality import Structural
from tyexpr.punctuated import Punctuated
from tyexpr.tokens import Delim, Token, TokenStream

# ── Attributes and macros ────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Attribute(Structural):
    """An outer attribute ``#[...]``; its contents are kept as raw tokens."""

    pound: Token
    bracket: Delim
    tokens: TokenStream


@dataclass(frozen=True, eq=False)
class Macro(Structural):
    path: Path
    bang: Token
    delimiter: Delim
    tokens: TokenStream


# ── Lifetimes and bounds ─────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Lifetime(Structural):
    token: Token

    @property
    def name(self) -> str:
        return self.token.value[1:]


@dataclass(frozen=True, eq=False)
class LifetimeDef(Structural):
    """A lifetime introduced by a ``for<...>`` binder: ``'a: 'b + 'c``."""

    attrs: tuple[Attribute, ...]
    lifetime: Lifetime
    colon: Token | None
    bounds: Punctuated[Lifetime]


@dataclass(frozen=True, eq=False)
class BoundLifetimes(Structural):
    """``for<'a, 'b>``"""

    for_token: Token
    lt: Token
    lifetimes: Punctuated[LifetimeDef]
    gt: Token


@dataclass(frozen=True, eq=False)
class TraitBound(Structural):
    paren: Delim | None
    modifier: Token | None  # `?`
    lifetimes: BoundLifetimes | None
    path: Path


TypeParamBound = Union[TraitBound, Lifetime]


# ── Paths ────────────────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Binding(Structural):
    """``Item = T`` inside generic arguments."""

    ident: Token
    eq: Token
    ty: TypeExpr


@dataclass(frozen=True, eq=False)
class Constraint(Structural):
    """``Item: Bound + Bound`` inside generic arguments."""

    ident: Token
    colon: Token
    bounds: Punctuated[TypeParamBound]


@dataclass(frozen=True, eq=False)
class ConstArg(Structural):
    """A literal or block passed as a const generic argument."""

    expr: Expr


@dataclass(frozen=True, eq=False)
class AngleBracketedArgs(Structural):
    """``<'a, T, Item = U>``, optionally turbofished as ``::<...>``."""

    colon2: Token | None
    lt: Token
    args: Punctuated[GenericArgument]
    gt: Token


@dataclass(frozen=True, eq=False)
class ParenthesizedArgs(Structural):
    """``(A, B) -> C`` as in ``Fn(A, B) -> C``."""

    paren: Delim
    inputs: Punctuated[TypeExpr]
    output: ReturnType


PathArguments = Union[AngleBracketedArgs, ParenthesizedArgs, None]


@dataclass(frozen=True, eq=False)
class PathSegment(Structural):
    ident: Token
    arguments: PathArguments = None


@dataclass(frozen=True, eq=False)
class Path(Structural):
    leading_colon: Token | None
    segments: Punctuated[PathSegment]


@dataclass(frozen=True, eq=False)
class QSelf(Structural):
    """The ``<T as Trait>`` prefix of a qualified path.

    ``position`` counts the leading segments of the path that belong to
    the trait; zero means there was no ``as`` clause.
    """

    lt: Token
    ty: TypeExpr
    position: int
    as_token: Token | None
    gt: Token


# ── Expressions (opaque constant expressions) ────────────────────


@dataclass(frozen=True, eq=False)
class LitExpr(Structural):
    lit: Token


@dataclass(frozen=True, eq=False)
class PathExpr(Structural):
    qself: QSelf | None
    path: Path


@dataclass(frozen=True, eq=False)
class UnaryExpr(Structural):
    op: Token
    expr: Expr


@dataclass(frozen=True, eq=False)
class BinaryExpr(Structural):
    left: Expr
    op: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class CastExpr(Structural):
    expr: Expr
    as_token: Token
    ty: TypeExpr


@dataclass(frozen=True, eq=False)
class CallExpr(Structural):
    func: Expr
    paren: Delim
    args: Punctuated[Expr]


@dataclass(frozen=True, eq=False)
class ParenExpr(Structural):
    paren: Delim
    expr: Expr


@dataclass(frozen=True, eq=False)
class BlockExpr(Structural):
    """A ``{ ... }`` block, kept as raw tokens."""

    brace: Delim
    tokens: TokenStream


@dataclass(frozen=True, eq=False)
class MacroExpr(Structural):
    mac: Macro


Expr = Union[
    LitExpr, PathExpr, UnaryExpr, BinaryExpr, CastExpr,
    CallExpr, ParenExpr, BlockExpr, MacroExpr,
]


# ── Function types ───────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Abi(Structural):
    """``extern`` with an optional calling convention string: ``extern "C"``."""

    extern_token: Token
    name: Token | None


@dataclass(frozen=True, eq=False)
class BareFnArg(Structural):
    attrs: tuple[Attribute, ...]
    name: tuple[Token, Token] | None  # (identifier, colon)
    ty: TypeExpr


@dataclass(frozen=True, eq=False)
class DefaultReturn(Structural):
    """No ``->``: the function returns unit."""


@dataclass(frozen=True, eq=False)
class ExplicitReturn(Structural):
    arrow: Token
    ty: TypeExpr


ReturnType = Union[DefaultReturn, ExplicitReturn]


# ── Type expressions ─────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class ArrayType(Structural):
    """``[T; n]``"""

    tag = 0

    bracket: Delim
    elem: TypeExpr
    semi: Token
    len: Expr


@dataclass(frozen=True, eq=False)
class BareFnType(Structural):
    """``for<'a> unsafe extern "C" fn(x: &'a u8, ...) -> bool``"""

    tag = 1

    lifetimes: BoundLifetimes | None
    unsafety: Token | None
    abi: Abi | None
    fn_token: Token
    paren: Delim
    inputs: Punctuated[BareFnArg]
    variadic: Token | None
    output: ReturnType


@dataclass(frozen=True, eq=False)
class GroupType(Structural):
    """A type inside invisible delimiters."""

    tag = 2

    group: Delim
    elem: TypeExpr


@dataclass(frozen=True, eq=False)
class ImplTraitType(Structural):
    """``impl Bound1 + Bound2``"""

    tag = 3

    impl_token: Token
    bounds: Punctuated[TypeParamBound]


@dataclass(frozen=True, eq=False)
class InferType(Structural):
    """``_``"""

    tag = 4

    underscore: Token


@dataclass(frozen=True, eq=False)
class MacroType(Structural):
    """``name!(...)`` in type position."""

    tag = 5

    mac: Macro


@dataclass(frozen=True, eq=False)
class NeverType(Structural):
    """``!``"""

    tag = 6

    bang: Token


@dataclass(frozen=True, eq=False)
class ParenType(Structural):
    """``(T)``"""

    tag = 7

    paren: Delim
    elem: TypeExpr


@dataclass(frozen=True, eq=False)
class PathType(Structural):
    """``std::slice::Iter<'a, T>`` or ``<Vec<T> as IntoIterator>::Item``"""

    tag = 8

    qself: QSelf | None
    path: Path


@dataclass(frozen=True, eq=False)
class PointerType(Structural):
    """``*const T`` or ``*mut T``"""

    tag = 9

    star: Token
    const_token: Token | None
    mutability: Token | None
    elem: TypeExpr


@dataclass(frozen=True, eq=False)
class ReferenceType(Structural):
    """``&'a mut T``"""

    tag = 10

    and_token: Token
    lifetime: Lifetime | None
    mutability: Token | None
    elem: TypeExpr


@dataclass(frozen=True, eq=False)
class SliceType(Structural):
    """``[T]``"""

    tag = 11

    bracket: Delim
    elem: TypeExpr


@dataclass(frozen=True, eq=False)
class TraitObjectType(Structural):
    """``dyn Bound1 + Bound2`` (the ``dyn`` is optional)."""

    tag = 12

    dyn_token: Token | None
    bounds: Punctuated[TypeParamBound]


@dataclass(frozen=True, eq=False)
class TupleType(Structural):
    """``()``, ``(T,)``, ``(A, B)``"""

    tag = 13

    paren: Delim
    elems: Punctuated[TypeExpr]


@dataclass(frozen=True, eq=False)
class VerbatimType(Structural):
    """Tokens in type position that the grammar does not interpret.

    Built by callers wrapping raw tokens; the parser never produces one.
    """

    tag = 14

    tokens: TokenStream


TypeExpr = Union[
    ArrayType,
    BareFnType,
    GroupType,
    ImplTraitType,
    InferType,
    MacroType,
    NeverType,
    ParenType,
    PathType,
    PointerType,
    ReferenceType,
    SliceType,
    TraitObjectType,
    TupleType,
    VerbatimType,
]

TYPE_VARIANTS: tuple[type, ...] = (
    ArrayType,
    BareFnType,
    GroupType,
    ImplTraitType,
    InferType,
    MacroType,
    NeverType,
    ParenType,
    PathType,
    PointerType,
    ReferenceType,
    SliceType,
    TraitObjectType,
    TupleType,
    VerbatimType,
)

GenericArgument = Union[Lifetime, Binding, Constraint, ConstArg, TypeExpr]
