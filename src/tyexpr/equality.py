"""Structural equality and hashing for syntax nodes.

Every node compares by class and by the value of its compared fields.
Source positions live on tokens and delimiters as ``compare=False``
fields, so two parses of the same text are equal even when they came
from different offsets, and raw token payloads (verbatim types, macro
bodies) compare by their text and spacing only.

Hashing starts from the node's variant tag, a fixed small integer for
each ``TypeExpr`` variant and the class name for every other node, then
hashes the fields in the same order equality uses them.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, ClassVar


class Structural:
    """Base class for frozen syntax-node dataclasses declared with ``eq=False``."""

    __slots__ = ()

    tag: ClassVar[int | None] = None

    def _key(self) -> tuple[Any, ...]:
        return tuple(getattr(self, f.name) for f in fields(self) if f.compare)  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if other.__class__ is not self.__class__:
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash((variant_tag(type(self)), self._key()))


def variant_tag(cls: type) -> int | str:
    """The hash discriminator for a node class."""
    tag = getattr(cls, "tag", None)
    if tag is None:
        return cls.__qualname__
    return tag
