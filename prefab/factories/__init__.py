# Factory strategies for the prefab value engine
"""
Factory strategies.

Each strategy knows how to synthesize a ValuePair for a family of types:

    FixedValueFactory   — hand-specified instances
    GenericFactory      — values built from resolved type arguments
                          (arity1, arity2, collection, mapping helpers)
    Reflective*Factory  — types located by name, possibly absent
    EnumFactory, ConstructorFactory — fallbacks when nothing is registered
"""

from .base import AbstractGenericFactory, PrefabValueFactory, TypeStack, check_degenerate
from .fallback import ConstructorFactory, EnumFactory, blank_instance
from .fixed import FixedValueFactory
from .generic import GenericFactory, arity1, arity2, collection, insert_element, mapping
from .reflective import (
    OptionalType,
    ReflectiveCollectionFactory,
    ReflectiveConstantFactory,
    ReflectiveGenericFactory,
    locate_type,
)

__all__ = [
    "AbstractGenericFactory",
    "ConstructorFactory",
    "EnumFactory",
    "FixedValueFactory",
    "GenericFactory",
    "OptionalType",
    "PrefabValueFactory",
    "ReflectiveCollectionFactory",
    "ReflectiveConstantFactory",
    "ReflectiveGenericFactory",
    "TypeStack",
    "arity1",
    "arity2",
    "blank_instance",
    "check_degenerate",
    "collection",
    "insert_element",
    "locate_type",
    "mapping",
]
