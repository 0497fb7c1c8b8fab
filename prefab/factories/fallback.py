"""
Fallback strategies for types without a registered factory.

    EnumFactory        — members of an enum.Enum subclass
    ConstructorFactory — introspects the constructor (or a classmethod
                         factory) and supplies recursively resolved
                         arguments

blank_instance builds the degenerate stand-in the engine substitutes
when a recursive type refers back to itself.
"""

from __future__ import annotations

import contextlib
import dataclasses
import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable

from ..errors import UnregisteredTypeError
from ..pair import ValuePair
from ..typetag import DEFAULT_TYPE, TypeTag, type_bindings
from .base import AbstractGenericFactory, PrefabValueFactory, TypeStack
from .reflective import invoke

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Classmethods tried, in order, when the constructor cannot be introspected
FACTORY_METHOD_NAMES = ("of", "create")


# =============================================================================
# ENUMS
# =============================================================================

class EnumFactory(PrefabValueFactory):
    """
    First member is red, second member is black.

    A single-member enum has no second value: red and black are the same
    member. Generic factories detect this and fall back to their empty
    value.
    """

    def create_values(self, tag: TypeTag, prefab_values, type_stack: TypeStack) -> ValuePair:
        members = list(tag.type)
        if not members:
            raise UnregisteredTypeError(tag.qualified_name, "enum has no members")
        if len(members) == 1:
            logger.debug("Enum %s has a single member; red and black are equal", tag)
        red = members[0]
        black = members[1] if len(members) > 1 else members[0]
        return ValuePair.of(red, black, red)


# =============================================================================
# CONSTRUCTOR INTROSPECTION
# =============================================================================

@dataclass(frozen=True)
class Constructor:
    """A located way of instantiating a class."""
    member: str
    target: Callable
    parameters: tuple[inspect.Parameter, ...]
    hints: dict[str, Any]


def _type_hints(function: Any, cls: type) -> dict[str, Any]:
    """Evaluated annotations of function; empty if they cannot be evaluated."""
    try:
        return typing.get_type_hints(function, localns={cls.__name__: cls})
    except (NameError, TypeError, AttributeError) as exc:
        logger.debug("Cannot evaluate annotations of %s: %s", cls.__qualname__, exc)
        return {}


def _constructor_hints(cls: type) -> dict[str, Any]:
    """Annotations of the callable that inspect.signature(cls) describes."""
    if cls.__init__ is not object.__init__:
        return _type_hints(cls.__init__, cls)
    # Built by __new__ alone (NamedTuple): annotations may only resolve on the class
    return _type_hints(cls.__new__, cls) or _type_hints(cls, cls)


def locate_constructor(tag: TypeTag) -> Constructor:
    """
    Find the constructor to call for tag.

    Raises:
        UnregisteredTypeError: If the class is abstract, or neither its
            constructor nor any FACTORY_METHOD_NAMES classmethod can be
            introspected
    """
    cls = tag.type
    if inspect.isabstract(cls):
        raise UnregisteredTypeError(tag.qualified_name, "abstract class, register a factory for it")

    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError) as exc:
        logger.debug("Constructor of %s cannot be introspected: %s", tag, exc)
    else:
        return Constructor(
            member="__init__",
            target=cls,
            parameters=tuple(signature.parameters.values()),
            hints=_constructor_hints(cls),
        )

    for name in FACTORY_METHOD_NAMES:
        method = getattr(cls, name, None)
        if not callable(method):
            continue
        try:
            signature = inspect.signature(method)
        except (TypeError, ValueError):
            continue
        return Constructor(
            member=name,
            target=method,
            parameters=tuple(signature.parameters.values()),
            hints=_type_hints(method, cls),
        )

    raise UnregisteredTypeError(
        tag.qualified_name,
        "no factory registered and no introspectable constructor or factory method",
    )


class ConstructorFactory(AbstractGenericFactory):
    """
    Instantiate a class through its constructor.

    Every parameter's annotation is resolved (type variables bound from
    the recursion stack) and realized through the engine. Red arguments
    build red and red_copy, black arguments build black.

    Parameters without an annotation but with a default keep their
    default. So do recursive parameters with a default, which is how
    ``next: Optional[Node] = None`` ends a chain.
    """

    def create_values(self, tag: TypeTag, prefab_values, type_stack: TypeStack) -> ValuePair:
        constructor = locate_constructor(tag)
        stack = self.copy_with(type_stack, tag)
        bindings = type_bindings(stack)

        red_args: list = []
        black_args: list = []
        red_kwargs: dict[str, Any] = {}
        black_kwargs: dict[str, Any] = {}
        positional_closed = False

        for parameter in constructor.parameters:
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                continue
            if parameter.kind is parameter.POSITIONAL_ONLY and positional_closed:
                continue

            has_default = parameter.default is not parameter.empty
            annotation = constructor.hints.get(parameter.name, parameter.annotation)
            if annotation is parameter.empty:
                if has_default:
                    positional_closed = positional_closed or parameter.kind is parameter.POSITIONAL_ONLY
                    continue
                annotation = DEFAULT_TYPE

            parameter_tag = TypeTag.of(annotation, bindings=bindings)
            if has_default and parameter_tag in stack:
                logger.debug("Leaving recursive parameter %s of %s to its default", parameter.name, tag)
                positional_closed = positional_closed or parameter.kind is parameter.POSITIONAL_ONLY
                continue

            pair = prefab_values.realize(parameter_tag, stack)
            if parameter.kind is parameter.POSITIONAL_ONLY:
                red_args.append(pair.red)
                black_args.append(pair.black)
            else:
                red_kwargs[parameter.name] = pair.red
                black_kwargs[parameter.name] = pair.black

        def build(args: list, kwargs: dict) -> Any:
            return invoke(tag.qualified_name, constructor.member, constructor.target, tuple(args), dict(kwargs))

        red = build(red_args, red_kwargs)
        black = build(black_args, black_kwargs)
        red_copy = build(red_args, red_kwargs)
        return ValuePair.of(red, black, red_copy)


# =============================================================================
# RECURSION STAND-IN
# =============================================================================

def _field_names(cls: type) -> tuple[str, ...]:
    if dataclasses.is_dataclass(cls):
        return tuple(f.name for f in dataclasses.fields(cls))
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return ()
    return tuple(
        p.name for p in signature.parameters.values()
        if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    )


def blank_instance(cls: type) -> Any:
    """
    Create an instance of cls without running its constructor.

    Each field (dataclass field or constructor parameter) is set to
    None so that equality, hashing and repr still work on the result.

    Raises:
        TypeError: If cls cannot be allocated without arguments
    """
    instance = cls.__new__(cls)
    for name in _field_names(cls):
        with contextlib.suppress(AttributeError, TypeError):
            object.__setattr__(instance, name, None)
    return instance
