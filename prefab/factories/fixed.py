"""Fixed-Value strategy: hand-specified instances, returned verbatim."""

from __future__ import annotations

from typing import TypeVar

from ..pair import ValuePair
from ..typetag import TypeTag
from .base import PrefabValueFactory, TypeStack

T = TypeVar("T")


class FixedValueFactory(PrefabValueFactory[T]):
    """Returns three pre-built instances. Never recurses."""

    def __init__(self, red: T, black: T, red_copy: T):
        self._pair = ValuePair.of(red, black, red_copy)

    def create_values(self, tag: TypeTag, prefab_values, type_stack: TypeStack) -> ValuePair[T]:
        return self._pair

    def __repr__(self) -> str:
        return f"FixedValueFactory({self._pair.red!r}, {self._pair.black!r}, {self._pair.red_copy!r})"
