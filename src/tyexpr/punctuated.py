"""A sequence of syntax values separated by punctuation markers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, Iterable, Iterator, TypeVar

from tyexpr.tokens import Token, punct

if TYPE_CHECKING:
    from tyexpr.cursor import Cursor

T = TypeVar("T")


class Punctuated(Generic[T]):
    """Values interleaved with separators, e.g. ``A, B, C,`` or ``Send + 'a``.

    Tracks whether the final value is followed by a trailing separator.
    Only the parser mutates an instance, and only before the node holding
    it is returned.
    """

    def __init__(self, separator: str = ",") -> None:
        self.separator = separator
        self._inner: list[tuple[T, Token]] = []
        self._last: T | None = None
        self._has_last = False

    # ── Building ─────────────────────────────────────────────────

    def push_value(self, value: T) -> None:
        if self._has_last:
            raise ValueError("push_value on a Punctuated missing its separator")
        self._last = value
        self._has_last = True

    def push_punct(self, sep: Token) -> None:
        if not self._has_last:
            raise ValueError("push_punct on a Punctuated without a value")
        self._inner.append((self._last, sep))  # type: ignore[arg-type]
        self._last = None
        self._has_last = False

    def push(self, value: T) -> None:
        """Append a value, inserting a default separator if one is missing."""
        if self._has_last:
            self.push_punct(punct(self.separator))
        self.push_value(value)

    def extend(self, pairs: Iterable[tuple[T, Token | None]]) -> None:
        for value, sep in pairs:
            self.push_value(value)
            if sep is not None:
                self.push_punct(sep)

    # ── Inspection ───────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._inner) + (1 if self._has_last else 0)

    def __iter__(self) -> Iterator[T]:
        for value, _ in self._inner:
            yield value
        if self._has_last:
            yield self._last  # type: ignore[misc]

    def __getitem__(self, index: int) -> T:
        return list(self)[index]

    def pairs(self) -> Iterator[tuple[T, Token | None]]:
        yield from self._inner
        if self._has_last:
            yield self._last, None  # type: ignore[misc]

    def is_empty(self) -> bool:
        return len(self) == 0

    def first(self) -> T | None:
        return next(iter(self), None)

    def last(self) -> T | None:
        if self._has_last:
            return self._last
        if self._inner:
            return self._inner[-1][0]
        return None

    def trailing_punct(self) -> bool:
        return bool(self._inner) and not self._has_last

    def empty_or_trailing(self) -> bool:
        return not self._has_last

    # ── Structural equality ──────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Punctuated):
            return NotImplemented
        return tuple(self.pairs()) == tuple(other.pairs())

    def __hash__(self) -> int:
        return hash(tuple(self.pairs()))

    def __repr__(self) -> str:
        return f"Punctuated({list(self.pairs())!r})"

    @classmethod
    def of(cls, values: Iterable[T], separator: str = ",") -> Punctuated[T]:
        """Build a list with default separators and no trailing one."""
        result: Punctuated[T] = cls(separator)
        for value in values:
            result.push(value)
        return result


def parse_terminated(input: Cursor, parse: Callable[[Cursor], T], separator: str = ",") -> Punctuated[T]:
    """Parse separated values until the cursor is exhausted.

    A trailing separator is allowed; everything in the cursor must be
    consumed.
    """
    result: Punctuated[T] = Punctuated(separator)
    while not input.is_empty():
        result.push_value(parse(input))
        if input.is_empty():
            break
        result.push_punct(input.expect_punct(separator))
    return result
