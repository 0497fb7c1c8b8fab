# Prefab value engine
# Red, black and red-copy instances for equality testing

"""
Synthesizes instances of arbitrary (generic, recursive) types for
equality verification: a red value, a black value that differs from
it, and a red copy that equals it.

The engine only produces instances. It never asserts anything about
them.
"""

import logging

from .engine import DeferredBinding, PrefabValues
from .errors import (
    ErrorKind,
    MissingDependencyError,
    PrefabError,
    RecursionCycleError,
    ReflectiveInvocationError,
    UnregisteredTypeError,
)
from .pair import ValuePair
from .typetag import TypeTag

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DeferredBinding",
    "ErrorKind",
    "MissingDependencyError",
    "PrefabError",
    "PrefabValues",
    "RecursionCycleError",
    "ReflectiveInvocationError",
    "TypeTag",
    "UnregisteredTypeError",
    "ValuePair",
]
