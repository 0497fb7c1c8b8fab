"""
Value Pair — the three canonical instances of a type.

    red      — the reference instance
    black    — an instance that must not equal red
    red_copy — equal to red, ideally a distinct object

Pairs are created once per TypeTag and cached for the lifetime of the
registry. They are never mutated after creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class ValuePair(Generic[T]):
    """
    Immutable carrier of red, black and red_copy.

    Equality is identity: the contained values may be unhashable or
    have equality semantics that are being tested.
    """
    red: T
    black: T
    red_copy: T

    @classmethod
    def of(cls, red: T, black: T, red_copy: T) -> ValuePair[T]:
        return cls(red=red, black=black, red_copy=red_copy)

    @property
    def is_degenerate(self) -> bool:
        """True when red and black cannot be told apart."""
        return self.red is self.black or self.red == self.black
