"""
The factory capability shared by every strategy.

A factory receives the tag to instantiate, the engine (for recursive
sub-resolution) and the current recursion stack, and returns a
ValuePair. It may call back into the engine but must not keep the
stack after the call returns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from ..errors import ReflectiveInvocationError
from ..pair import ValuePair
from ..typetag import TypeTag

if TYPE_CHECKING:
    from ..engine import PrefabValues

T = TypeVar("T")

TypeStack = tuple[TypeTag, ...]


def check_degenerate(pair: ValuePair, tag: TypeTag) -> bool:
    """pair.is_degenerate, with a failing __eq__ reported against tag."""
    try:
        return pair.is_degenerate
    except Exception as exc:
        raise ReflectiveInvocationError(
            tag.qualified_name, "__eq__", str(exc) or type(exc).__name__
        ) from exc


class PrefabValueFactory(ABC, Generic[T]):
    """Creates the red, black and red_copy instances for a family of types."""

    @abstractmethod
    def create_values(
        self,
        tag: TypeTag,
        prefab_values: PrefabValues,
        type_stack: TypeStack,
    ) -> ValuePair[T]:
        """Synthesize the value pair for tag."""


class AbstractGenericFactory(PrefabValueFactory[T]):
    """Base for factories that recurse into the type arguments of a tag."""

    @staticmethod
    def copy_with(type_stack: TypeStack, tag: TypeTag) -> TypeStack:
        """Extend a copy of the stack with tag (ordered, no duplicates)."""
        if tag in type_stack:
            return type_stack
        return type_stack + (tag,)

    @staticmethod
    def parameter_pair(
        index: int,
        tag: TypeTag,
        prefab_values: PrefabValues,
        type_stack: TypeStack,
    ) -> ValuePair:
        """Resolve the index-th type argument of tag through the engine."""
        return prefab_values.realize(tag.generic_type(index), type_stack)

    def parameter_pairs(
        self,
        tag: TypeTag,
        prefab_values: PrefabValues,
        type_stack: TypeStack,
        count: Optional[int] = None,
    ) -> list[ValuePair]:
        """
        Resolve the type parameters of tag, in order.

        count defaults to the number of parameters the class declares.
        """
        if count is None:
            count = tag.type_parameter_count()
        return [
            self.parameter_pair(i, tag, prefab_values, type_stack)
            for i in range(count)
        ]
