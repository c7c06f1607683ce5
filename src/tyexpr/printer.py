"""Turn syntax nodes back into tokens, and tokens into canonical text.

``to_tokens`` is the inverse of the parser: each node emits the tokens it
was parsed from, in field order, with delimiters restored around the
contents they enclose. ``render`` lays a token stream out as text with
the conventional spacing (``Vec<&'a mut [u8; 4]>``, ``fn(i32, ...) -> !``).
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from tyexpr.ast_nodes import (
    TYPE_VARIANTS,
    Abi,
    AngleBracketedArgs,
    ArrayType,
    Attribute,
    BareFnArg,
    BareFnType,
    BinaryExpr,
    Binding,
    BlockExpr,
    BoundLifetimes,
    CallExpr,
    CastExpr,
    ConstArg,
    Constraint,
    DefaultReturn,
    ExplicitReturn,
    GroupType,
    ImplTraitType,
    InferType,
    Lifetime,
    LifetimeDef,
    LitExpr,
    Macro,
    MacroExpr,
    MacroType,
    NeverType,
    ParenExpr,
    ParenthesizedArgs,
    ParenType,
    Path,
    PathExpr,
    PathSegment,
    PathType,
    PointerType,
    QSelf,
    ReferenceType,
    SliceType,
    TraitBound,
    TraitObjectType,
    TupleType,
    UnaryExpr,
    VerbatimType,
)
from tyexpr.punctuated import Punctuated
from tyexpr.tokens import (
    Delim,
    Delimiter,
    Group,
    Token,
    TokenKind,
    TokenStream,
    TokenTree,
    keyword,
    punct,
    split_punct,
)


class TypePrinter:
    """Emit the token trees of a syntax node."""

    def __init__(self) -> None:
        self._out: list[TokenTree] = []

    # ── Public API ─────────────────────────────────────────────

    def print(self, node: object) -> TokenStream:
        self._out = []
        self._emit(node)
        return tuple(self._out)

    # ── Emission helpers ───────────────────────────────────────

    def _tok(self, tok: Token | None) -> None:
        if tok is None:
            return
        if tok.kind is TokenKind.PUNCT and len(tok.value) > 1:
            self._out.extend(split_punct(tok))
        else:
            self._out.append(tok)

    def _raw(self, stream: TokenStream) -> None:
        self._out.extend(stream)

    @contextmanager
    def _surround(self, delim: Delim) -> Iterator[None]:
        outer = self._out
        self._out = []
        yield
        inner, self._out = self._out, outer
        self._out.append(Group(delim.delimiter, tuple(inner), delim.span))

    def _punctuated(self, items: Punctuated) -> None:
        for value, sep in items.pairs():
            self._emit(value)
            self._tok(sep)

    def _opt(self, node: object | None) -> None:
        if node is not None:
            self._emit(node)

    # ── Dispatch ───────────────────────────────────────────────

    def _emit(self, node: object) -> None:
        if isinstance(node, TYPE_VARIANTS):
            self._emit_type(node)
        elif isinstance(node, (LitExpr, PathExpr, UnaryExpr, BinaryExpr, CastExpr,
                               CallExpr, ParenExpr, BlockExpr, MacroExpr)):
            self._emit_expr(node)
        else:
            self._emit_part(node)

    def _emit_type(self, ty: object) -> None:
        if isinstance(ty, ArrayType):
            with self._surround(ty.bracket):
                self._emit(ty.elem)
                self._tok(ty.semi)
                self._emit(ty.len)
        elif isinstance(ty, BareFnType):
            self._emit_bare_fn(ty)
        elif isinstance(ty, GroupType):
            with self._surround(ty.group):
                self._emit(ty.elem)
        elif isinstance(ty, ImplTraitType):
            self._tok(ty.impl_token)
            self._punctuated(ty.bounds)
        elif isinstance(ty, InferType):
            self._tok(ty.underscore)
        elif isinstance(ty, MacroType):
            self._emit(ty.mac)
        elif isinstance(ty, NeverType):
            self._tok(ty.bang)
        elif isinstance(ty, ParenType):
            with self._surround(ty.paren):
                self._emit(ty.elem)
        elif isinstance(ty, PathType):
            self._emit_path(ty.qself, ty.path)
        elif isinstance(ty, PointerType):
            self._tok(ty.star)
            if ty.mutability is not None:
                self._tok(ty.mutability)
            else:
                self._tok(ty.const_token or keyword("const"))
            self._emit(ty.elem)
        elif isinstance(ty, ReferenceType):
            self._tok(ty.and_token)
            self._opt(ty.lifetime)
            self._tok(ty.mutability)
            self._emit(ty.elem)
        elif isinstance(ty, SliceType):
            with self._surround(ty.bracket):
                self._emit(ty.elem)
        elif isinstance(ty, TraitObjectType):
            self._tok(ty.dyn_token)
            self._punctuated(ty.bounds)
        elif isinstance(ty, TupleType):
            with self._surround(ty.paren):
                self._punctuated(ty.elems)
        elif isinstance(ty, VerbatimType):
            self._raw(ty.tokens)

    def _emit_bare_fn(self, ty: BareFnType) -> None:
        self._opt(ty.lifetimes)
        self._tok(ty.unsafety)
        self._opt(ty.abi)
        self._tok(ty.fn_token)
        with self._surround(ty.paren):
            self._punctuated(ty.inputs)
            if ty.variadic is not None:
                if not ty.inputs.empty_or_trailing():
                    self._tok(punct(",", ty.variadic.span))
                self._tok(ty.variadic)
        self._emit(ty.output)

    def _emit_path(self, qself: QSelf | None, path: Path) -> None:
        """Print a path, weaving in the ``<T as Trait>`` prefix if there is one."""
        if qself is None:
            self._emit(path)
            return

        self._tok(qself.lt)
        self._emit(qself.ty)

        pairs = list(path.segments.pairs())
        pos = qself.position
        if pos > 0 and pos >= len(pairs):
            pos = len(pairs) - 1

        if pos > 0:
            self._tok(qself.as_token or keyword("as"))
            self._tok(path.leading_colon)
            for i, (segment, sep) in enumerate(pairs[:pos]):
                self._emit(segment)
                if i + 1 == pos:
                    self._tok(qself.gt)
                self._tok(sep)
        else:
            self._tok(qself.gt)
            self._tok(path.leading_colon)

        for segment, sep in pairs[pos:]:
            self._emit(segment)
            self._tok(sep)

    def _emit_expr(self, expr: object) -> None:
        if isinstance(expr, LitExpr):
            self._tok(expr.lit)
        elif isinstance(expr, PathExpr):
            self._emit_path(expr.qself, expr.path)
        elif isinstance(expr, UnaryExpr):
            self._tok(expr.op)
            self._emit(expr.expr)
        elif isinstance(expr, BinaryExpr):
            self._emit(expr.left)
            self._tok(expr.op)
            self._emit(expr.right)
        elif isinstance(expr, CastExpr):
            self._emit(expr.expr)
            self._tok(expr.as_token)
            self._emit(expr.ty)
        elif isinstance(expr, CallExpr):
            self._emit(expr.func)
            with self._surround(expr.paren):
                self._punctuated(expr.args)
        elif isinstance(expr, ParenExpr):
            with self._surround(expr.paren):
                self._emit(expr.expr)
        elif isinstance(expr, BlockExpr):
            with self._surround(expr.brace):
                self._raw(expr.tokens)
        elif isinstance(expr, MacroExpr):
            self._emit(expr.mac)

    def _emit_part(self, node: object) -> None:
        if isinstance(node, Path):
            self._tok(node.leading_colon)
            self._punctuated(node.segments)
        elif isinstance(node, PathSegment):
            self._tok(node.ident)
            self._opt(node.arguments)
        elif isinstance(node, AngleBracketedArgs):
            self._tok(node.colon2)
            self._tok(node.lt)
            self._punctuated(node.args)
            self._tok(node.gt)
        elif isinstance(node, ParenthesizedArgs):
            with self._surround(node.paren):
                self._punctuated(node.inputs)
            self._emit(node.output)
        elif isinstance(node, Binding):
            self._tok(node.ident)
            self._tok(node.eq)
            self._emit(node.ty)
        elif isinstance(node, Constraint):
            self._tok(node.ident)
            self._tok(node.colon)
            self._punctuated(node.bounds)
        elif isinstance(node, ConstArg):
            self._emit(node.expr)
        elif isinstance(node, Lifetime):
            self._tok(node.token)
        elif isinstance(node, LifetimeDef):
            for attr in node.attrs:
                self._emit(attr)
            self._emit(node.lifetime)
            if not node.bounds.is_empty():
                self._tok(node.colon or punct(":"))
                self._punctuated(node.bounds)
        elif isinstance(node, BoundLifetimes):
            self._tok(node.for_token)
            self._tok(node.lt)
            self._punctuated(node.lifetimes)
            self._tok(node.gt)
        elif isinstance(node, TraitBound):
            if node.paren is not None:
                with self._surround(node.paren):
                    self._emit_trait_bound_body(node)
            else:
                self._emit_trait_bound_body(node)
        elif isinstance(node, Attribute):
            self._tok(node.pound)
            with self._surround(node.bracket):
                self._raw(node.tokens)
        elif isinstance(node, Macro):
            self._emit(node.path)
            self._tok(node.bang)
            with self._surround(node.delimiter):
                self._raw(node.tokens)
        elif isinstance(node, Abi):
            self._tok(node.extern_token)
            self._tok(node.name)
        elif isinstance(node, BareFnArg):
            for attr in node.attrs:
                self._emit(attr)
            if node.name is not None:
                self._tok(node.name[0])
                self._tok(node.name[1])
            self._emit(node.ty)
        elif isinstance(node, DefaultReturn):
            pass
        elif isinstance(node, ExplicitReturn):
            self._tok(node.arrow)
            self._emit(node.ty)
        else:
            raise TypeError(f"cannot print {type(node).__name__}")

    def _emit_trait_bound_body(self, bound: TraitBound) -> None:
        self._tok(bound.modifier)
        self._opt(bound.lifetimes)
        self._emit(bound.path)


def to_tokens(node: object) -> TokenStream:
    """The token trees that print ``node``."""
    return TypePrinter().print(node)


def to_source(node: object) -> str:
    return render(to_tokens(node))


# ── Rendering ────────────────────────────────────────────────────

# Never take a space after them.
_ALWAYS_PREFIX = frozenset({"?", "#"})
# Unary when they follow an operator, an opening delimiter or a keyword.
_MAYBE_PREFIX = frozenset({"&", "*", "-", "!"})
_TIGHT_BEFORE = frozenset({",", ";", ":"})
_GENERIC_KEYWORDS = frozenset({"Self", "self", "super", "crate", "for"})
_VALUE_KEYWORDS = frozenset({"self", "Self", "super", "crate", "true", "false"})
_PATH_ROOT_KEYWORDS = frozenset({"self", "Self", "super", "crate", "extern"})


@dataclass(frozen=True)
class _Atom:
    """One unit of rendered text: a word, a literal, an operator or a delimiter."""

    kind: TokenKind | None  # None for delimiters
    text: str

    def is_punct(self, *ops: str) -> bool:
        return self.kind is TokenKind.PUNCT and (not ops or self.text in ops)

    def is_open(self, chars: str = "([{") -> bool:
        return self.kind is None and self.text in chars

    def is_close(self, chars: str = ")]}") -> bool:
        return self.kind is None and self.text in chars

    def is_closing_angle(self) -> bool:
        return self.kind is TokenKind.PUNCT and set(self.text) == {">"}


def render(stream: TokenStream) -> str:
    """Lay out a token stream as source text with canonical spacing."""
    atoms = list(_atoms(stream))
    parts: list[str] = []
    for i, atom in enumerate(atoms):
        if i > 0:
            before = atoms[i - 2] if i > 1 else None
            if _space_between(before, atoms[i - 1], atom):
                parts.append(" ")
        parts.append(atom.text)
    return "".join(parts)


def _atoms(stream: TokenStream) -> Iterator[_Atom]:
    """Flatten token trees, merging runs of joint punctuation into one operator."""
    pending = ""
    for tree in stream:
        if isinstance(tree, Token) and tree.kind is TokenKind.PUNCT:
            pending += tree.value
            if tree.joint:
                continue
            yield _Atom(TokenKind.PUNCT, pending)
            pending = ""
            continue
        if pending:
            yield _Atom(TokenKind.PUNCT, pending)
            pending = ""
        if isinstance(tree, Group):
            if tree.delimiter is Delimiter.NONE:
                yield from _atoms(tree.stream)
            else:
                yield _Atom(None, tree.delimiter.open)
                yield from _atoms(tree.stream)
                yield _Atom(None, tree.delimiter.close)
        else:
            yield _Atom(tree.kind, tree.value)
    if pending:
        yield _Atom(TokenKind.PUNCT, pending)


def _space_between(before: _Atom | None, prev: _Atom, cur: _Atom) -> bool:
    if prev.is_open("{"):
        return not cur.is_close("}")
    if cur.is_close("}"):
        return True
    if prev.is_open() or cur.is_close():
        return False

    if cur.is_punct("::"):
        return not _continues_path(before, prev)
    if cur.is_punct(*_TIGHT_BEFORE) or cur.is_closing_angle():
        return False
    if cur.is_punct("<") and _opens_generics(prev):
        return False
    if cur.is_punct("!") and prev.kind is TokenKind.IDENTIFIER:
        return False

    if prev.is_punct("::", "<") or prev.is_punct(*_ALWAYS_PREFIX):
        return False
    if prev.is_punct(*_MAYBE_PREFIX) and _prefix_position(before):
        return False

    if cur.is_open("(["):
        return not _takes_arguments(prev)
    return True


def _opens_generics(prev: _Atom) -> bool:
    if prev.kind is TokenKind.IDENTIFIER:
        return True
    return prev.kind is TokenKind.KEYWORD and prev.text in _GENERIC_KEYWORDS


def _continues_path(before: _Atom | None, prev: _Atom) -> bool:
    """True if a `::` after ``prev`` joins it as a path separator or a leading colon."""
    if prev.kind is TokenKind.IDENTIFIER:
        # `dyn ::Trait` must not become the path `dyn::Trait`
        return prev.text != "dyn"
    if prev.kind is TokenKind.KEYWORD:
        return prev.text in _PATH_ROOT_KEYWORDS
    if prev.is_closing_angle() or prev.is_punct("<", *_ALWAYS_PREFIX):
        return True
    return prev.is_punct(*_MAYBE_PREFIX) and _prefix_position(before)


def _prefix_position(atom: _Atom | None) -> bool:
    """True if an operator following ``atom`` is unary."""
    if atom is None or atom.kind is TokenKind.PUNCT:
        return True
    if atom.kind is None:
        return atom.is_open()
    return atom.kind is TokenKind.KEYWORD and atom.text not in _VALUE_KEYWORDS


def _takes_arguments(prev: _Atom) -> bool:
    """Call-like ``(``/``[`` follows with no space: ``Fn(u8)``, ``fn()``, ``m![]``, ``f::<T>()``."""
    if prev.kind is TokenKind.IDENTIFIER:
        # `dyn (A)` must not become the path `dyn(A)`
        return prev.text != "dyn"
    return ((prev.kind is TokenKind.KEYWORD and prev.text == "fn")
            or prev.is_punct("!") or prev.is_closing_angle())
