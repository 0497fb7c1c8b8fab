"""
Error taxonomy for the prefab value engine.

Every hard failure names the type that could not be instantiated.
Nothing is silently replaced by None: a missing value would make the
later equality assertions meaningless.

Error kinds:
    UNREGISTERED_TYPE           — No factory bound and no fallback applies
    REFLECTIVE_INVOCATION       — A located constructor or method raised
    MISSING_OPTIONAL_DEPENDENCY — An optional type was explicitly required
    UNRESOLVABLE_RECURSION      — A cycle could not be broken with a stand-in
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """The kinds of construction failure the engine reports."""
    UNREGISTERED_TYPE = "unregistered_type"
    REFLECTIVE_INVOCATION = "reflective_invocation"
    MISSING_OPTIONAL_DEPENDENCY = "missing_optional_dependency"
    UNRESOLVABLE_RECURSION = "unresolvable_recursion"


class PrefabError(Exception):
    """Base class for all construction failures."""

    kind: ErrorKind = ErrorKind.UNREGISTERED_TYPE

    def __init__(self, type_name: str, reason: str):
        self.type_name = type_name
        self.reason = reason
        super().__init__(f"[{self.kind.value}] {type_name}: {reason}")


class UnregisteredTypeError(PrefabError):
    """Raised when no factory is bound and no fallback can build the type."""
    kind = ErrorKind.UNREGISTERED_TYPE


class ReflectiveInvocationError(PrefabError):
    """
    Raised when a located constructor or factory method fails.

    The original exception is chained as ``__cause__``.
    """
    kind = ErrorKind.REFLECTIVE_INVOCATION

    def __init__(self, type_name: str, member: str, reason: str):
        self.member = member
        super().__init__(type_name, f"{member}: {reason}")


class MissingDependencyError(PrefabError):
    """Raised when an absent optional type is explicitly required."""
    kind = ErrorKind.MISSING_OPTIONAL_DEPENDENCY


class RecursionCycleError(PrefabError):
    """Raised when a recursive type cannot be given a stand-in value."""
    kind = ErrorKind.UNRESOLVABLE_RECURSION

    def __init__(self, type_name: str, reason: str, type_stack: Optional[tuple] = None):
        self.type_stack = tuple(type_stack or ())
        super().__init__(type_name, reason)
