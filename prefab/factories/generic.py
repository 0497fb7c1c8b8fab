"""
Generic strategies: values built from resolved type arguments.

GenericFactory is the single arity-N strategy. It resolves every type
parameter of the tag to a red and a black value and hands the ordered
list of values to a construction function. Collections and mappings
are generic factories whose construction function fills a fresh empty
container.

Degenerate case:
    When a parameter's red equals its black (a single-member enum, for
    instance), applying the construction function to the black values
    would produce a black composite equal to red. The factory then uses
    its empty supplier for black instead.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from ..pair import ValuePair
from ..typetag import TypeTag
from .base import AbstractGenericFactory, TypeStack, check_degenerate

logger = logging.getLogger(__name__)

T = TypeVar("T")

Construct = Callable[[list], Any]
Supplier = Callable[[], Any]


class GenericFactory(AbstractGenericFactory[T]):
    """
    Build a value from the ordered list of resolved type-argument values.

    Args:
        construct: Receives the list of argument values, returns an instance
        empty: Optional supplier of a structurally different "empty" value
        arity: Number of type arguments to resolve; defaults to the
            number of parameters the class declares
    """

    def __init__(
        self,
        construct: Construct,
        empty: Optional[Supplier] = None,
        arity: Optional[int] = None,
    ):
        self.construct = construct
        self.empty = empty
        self.arity = arity

    def create_values(
        self,
        tag: TypeTag,
        prefab_values,
        type_stack: TypeStack,
    ) -> ValuePair[T]:
        stack = self.copy_with(type_stack, tag)

        red_values: list = []
        black_values: list = []
        use_empty = False
        pairs = self.parameter_pairs(tag, prefab_values, stack, self.arity)
        for index, pair in enumerate(pairs):
            if check_degenerate(pair, tag.generic_type(index)):
                use_empty = True
            red_values.append(pair.red)
            black_values.append(pair.black)

        red = self.construct(red_values)
        if use_empty and self.empty is not None:
            logger.debug("Degenerate argument for %s, using empty value for black", tag)
            black = self.empty()
        else:
            if use_empty:
                logger.warning(
                    "Degenerate argument for %s and no empty value; red and black may be equal",
                    tag,
                )
            black = self.construct(black_values)
        red_copy = self.construct(red_values)

        return ValuePair.of(red, black, red_copy)


# =============================================================================
# CONSTRUCTION HELPERS
# =============================================================================

def arity1(f: Callable[[Any], Any], empty: Optional[Supplier] = None) -> GenericFactory:
    """Generic factory for a one-parameter type, e.g. ``Box[T]``."""
    return GenericFactory(lambda values: f(values[0]), empty, arity=1)


def arity2(f: Callable[[Any, Any], Any], empty: Optional[Supplier] = None) -> GenericFactory:
    """Generic factory for a two-parameter type, e.g. ``Pair[A, B]``."""
    return GenericFactory(lambda values: f(values[0], values[1]), empty, arity=2)


def insert_element(container: Any, element: Any) -> None:
    """Add one element to a collection, by add or append."""
    # add first: sorted containers define append only to reject it
    if hasattr(container, "add"):
        container.add(element)
    elif hasattr(container, "append"):
        container.append(element)
    else:
        raise TypeError(f"{type(container).__qualname__} supports neither append nor add")


def collection(
    empty: Supplier,
    insert: Callable[[Any, Any], None] = insert_element,
) -> GenericFactory:
    """
    Generic factory for a single-element-parameterized collection.

    Each colour gets its own fresh container holding one element, so
    red and red_copy are equal in content but distinct objects. The
    empty supplier doubles as the degenerate fallback for black.
    """
    def create(element: Any) -> Any:
        container = empty()
        insert(container, element)
        return container

    return arity1(create, empty)


def mapping(empty: Supplier) -> GenericFactory:
    """Generic factory for a key/value mapping holding one association."""
    def create(key: Any, value: Any) -> Any:
        container = empty()
        container[key] = value
        return container

    return arity2(create, empty)
