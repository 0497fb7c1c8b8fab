"""
Type Descriptor — the lookup and recursion key of the engine.

A TypeTag is a class together with the ordered tags of its type
arguments. Two tags are equal iff both components match, so a tag
identifies ``dict[str, list[int]]`` exactly and can be used both as a
cache key and as a token on the recursion stack.

Anything that cannot be resolved to a concrete class (``typing.Any``,
an unbound TypeVar, an unresolved forward reference, a missing
argument of a raw generic) falls back to DEFAULT_TYPE, so the engine
always has a concrete class to recurse into.
"""

from __future__ import annotations

import collections
import collections.abc
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Implied argument for raw, wildcard and unresolvable type arguments
DEFAULT_TYPE = object

# Declared parameter counts of generics that do not expose __parameters__
BUILTIN_ARITY: dict[type, int] = {
    list: 1,
    set: 1,
    frozenset: 1,
    dict: 2,
    type: 1,
    collections.deque: 1,
    collections.OrderedDict: 2,
    collections.defaultdict: 2,
    collections.Counter: 1,
    collections.ChainMap: 2,
    collections.abc.Iterable: 1,
    collections.abc.Collection: 1,
    collections.abc.Container: 1,
    collections.abc.Reversible: 1,
    collections.abc.Sequence: 1,
    collections.abc.MutableSequence: 1,
    collections.abc.Set: 1,
    collections.abc.MutableSet: 1,
    collections.abc.Mapping: 2,
    collections.abc.MutableMapping: 2,
}

_UNION_ORIGINS = (typing.Union, types.UnionType)
_NONE_TYPE = type(None)


# =============================================================================
# TYPE TAG
# =============================================================================

@dataclass(frozen=True)
class TypeTag:
    """
    An immutable description of a class and its resolved type arguments.

    Invariants enforced:
    1. type must be a class
    2. generic_types is a tuple of TypeTag (empty for non-generic use)
    """
    type: type
    generic_types: tuple[TypeTag, ...] = ()

    def __post_init__(self):
        """Enforce invariants at construction time."""
        if not isinstance(self.type, type):
            raise TypeError(f"TypeTag requires a class, got {self.type!r}")
        generic_types = tuple(self.generic_types)
        for generic_type in generic_types:
            if not isinstance(generic_type, TypeTag):
                raise TypeError(
                    f"generic_types must contain TypeTag, got {generic_type!r}"
                )
        object.__setattr__(self, "generic_types", generic_types)

    @classmethod
    def of(
        cls,
        annotation: Any,
        *generic_types: Any,
        bindings: Optional[Mapping[typing.TypeVar, TypeTag]] = None,
    ) -> TypeTag:
        """
        Build a tag from a class and explicit arguments, or parse an annotation.

        Example:
            TypeTag.of(dict, str, int) == TypeTag.of(dict[str, int])

        Args:
            annotation: A class, a TypeTag, or a ``typing`` annotation
            generic_types: Explicit arguments (classes, annotations or tags)
            bindings: TypeVar substitutions from the enclosing context
        """
        bindings = bindings or {}
        if generic_types:
            base = annotation.type if isinstance(annotation, TypeTag) else annotation
            return cls(base, tuple(_parse(g, bindings) for g in generic_types))
        return _parse(annotation, bindings)

    def generic_type(self, index: int) -> TypeTag:
        """The index-th argument, or the implied default when it is missing."""
        if index < len(self.generic_types):
            return self.generic_types[index]
        return OBJECT_TAG

    def type_parameter_count(self) -> int:
        """Number of type parameters the class declares."""
        parameters = getattr(self.type, "__parameters__", None)
        if isinstance(parameters, tuple) and parameters:
            return len(parameters)
        if self.type is tuple:
            return max(len(self.generic_types), 1)
        return BUILTIN_ARITY.get(self.type, len(self.generic_types))

    @property
    def qualified_name(self) -> str:
        """Fully-qualified name, used in error reports."""
        module = self.type.__module__
        name = self.type.__qualname__
        if module != "builtins":
            name = f"{module}.{name}"
        if self.generic_types:
            inner = ", ".join(g.qualified_name for g in self.generic_types)
            name = f"{name}[{inner}]"
        return name

    def __str__(self) -> str:
        name = self.type.__qualname__
        if self.generic_types:
            name += "[" + ", ".join(str(g) for g in self.generic_types) + "]"
        return name


OBJECT_TAG = TypeTag(DEFAULT_TYPE)


# =============================================================================
# ANNOTATION PARSING
# =============================================================================

def _parse(annotation: Any, bindings: Mapping[typing.TypeVar, TypeTag]) -> TypeTag:
    """Convert a ``typing`` annotation into a TypeTag."""
    if isinstance(annotation, TypeTag):
        return annotation
    if annotation is None or annotation is _NONE_TYPE:
        return TypeTag(_NONE_TYPE)
    if annotation is Any:
        return OBJECT_TAG

    if isinstance(annotation, typing.TypeVar):
        if annotation in bindings:
            return bindings[annotation]
        if annotation.__bound__ is not None:
            return _parse(annotation.__bound__, bindings)
        return OBJECT_TAG

    if isinstance(annotation, (str, typing.ForwardRef)):
        logger.debug("Unresolved forward reference %r, using %s", annotation, DEFAULT_TYPE.__name__)
        return OBJECT_TAG

    if isinstance(annotation, typing.NewType):
        return _parse(annotation.__supertype__, bindings)

    alias_type = getattr(typing, "TypeAliasType", None)
    if alias_type is not None and isinstance(annotation, alias_type):
        return _parse(annotation.__value__, bindings)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return _parse(args[0], bindings)

    if origin in _UNION_ORIGINS:
        # Optional[X] is X; a wider union is described by its first member
        members = [a for a in args if a is not _NONE_TYPE]
        if not members:
            return TypeTag(_NONE_TYPE)
        return _parse(members[0], bindings)

    if origin is typing.Literal:
        return TypeTag(type(args[0])) if args else OBJECT_TAG

    if origin is not None:
        if not isinstance(origin, type):
            # ClassVar, Final and friends wrap a single annotation
            return _parse(args[0], bindings) if args else OBJECT_TAG
        arguments = tuple(
            _parse(a, bindings)
            for a in args
            if a is not Ellipsis and not isinstance(a, list)
        )
        return TypeTag(origin, arguments)

    if isinstance(annotation, type):
        return TypeTag(annotation)

    raise TypeError(f"Cannot describe {annotation!r} as a type")


# =============================================================================
# TYPE VARIABLE BINDING
# =============================================================================

def type_bindings(type_stack: Iterable[TypeTag]) -> dict[typing.TypeVar, TypeTag]:
    """
    Collect TypeVar substitutions from an ordered recursion stack.

    Later (nearer) tags override earlier ones, so a type variable
    resolves to the nearest enclosing concrete binding. Variables that
    a class passes on to its generic bases are bound as well:

        class Labelled(Box[T], Generic[T]) ...   # Box's T is Labelled's T
        class IntBox(Box[int]) ...               # Box's T is int
    """
    bindings: dict[typing.TypeVar, TypeTag] = {}
    for tag in type_stack:
        local: dict[typing.TypeVar, TypeTag] = {}
        parameters = getattr(tag.type, "__parameters__", None) or ()
        for index, parameter in enumerate(parameters):
            if isinstance(parameter, typing.TypeVar):
                local[parameter] = tag.generic_type(index)

        for klass in tag.type.__mro__:
            for base in klass.__dict__.get("__orig_bases__", ()):
                base_origin = typing.get_origin(base)
                base_parameters = getattr(base_origin, "__parameters__", None) or ()
                for parameter, argument in zip(base_parameters, typing.get_args(base)):
                    if isinstance(parameter, typing.TypeVar) and parameter not in local:
                        local[parameter] = _parse(argument, {**bindings, **local})

        bindings.update(local)
    return bindings
