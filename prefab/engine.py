"""
Registry & Resolution Engine.

PrefabValues owns the type -> factory bindings and the cache of
synthesized value pairs. Callers create one instance per verification
context; there is no process-wide registry.

Resolution of a tag:
    1. Cache hit       — return the cached pair
    2. Recursion       — tag is already being resolved further up the
                         stack: reuse the cached pair of an equivalent tag,
                         or substitute a degenerate stand-in
    3. Factory lookup  — exact class binding, enum fallback, constructor
                         fallback
    4. Invocation      — factory.create_values(tag, self, stack + tag)
    5. Cache           — store and return

The recursion stack is an immutable tuple passed down the call graph.
Sibling type arguments each receive the same parent tuple, so they
never see each other's in-progress types.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import PrefabError, RecursionCycleError, ReflectiveInvocationError
from .factories.base import PrefabValueFactory, TypeStack, check_degenerate
from .factories.fallback import ConstructorFactory, EnumFactory, blank_instance
from .factories.fixed import FixedValueFactory
from .factories.reflective import locate_type
from .pair import ValuePair
from .typetag import TypeTag

logger = logging.getLogger(__name__)


# =============================================================================
# DEFERRED BINDINGS
# =============================================================================

@dataclass(frozen=True)
class DeferredBinding:
    """
    The outcome of registering a factory by type name.

    Either available (the class was found and is bound) or unavailable
    (the module or class is absent; the binding is inert).
    """
    type_name: str
    factory: PrefabValueFactory
    resolved_type: Optional[type] = None

    @property
    def available(self) -> bool:
        return self.resolved_type is not None


# =============================================================================
# ENGINE
# =============================================================================

class PrefabValues:
    """
    Supplies red, black and red_copy instances for any TypeTag.

    Example:
        prefab_values = PrefabValues.with_defaults()
        prefab_values.give_red(list[int])      # [1]
        prefab_values.give_black(list[int])    # [2]
    """

    def __init__(self):
        self._factories: dict[type, PrefabValueFactory] = {}
        self._deferred: dict[str, DeferredBinding] = {}
        self._cache: dict[TypeTag, ValuePair] = {}
        self._enum_factory = EnumFactory()
        self._constructor_factory = ConstructorFactory()

    @classmethod
    def with_defaults(cls) -> PrefabValues:
        """A registry pre-populated with the default catalog."""
        from .catalog import add_to
        prefab_values = cls()
        add_to(prefab_values)
        return prefab_values

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_factory(self, cls: type, factory: PrefabValueFactory) -> None:
        """Bind a factory to a class. The last registration wins."""
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {cls!r}")
        if not isinstance(factory, PrefabValueFactory):
            raise TypeError(f"Expected a PrefabValueFactory, got {factory!r}")
        self._factories[cls] = factory

    def register_values(self, cls: type, red: Any, black: Any, red_copy: Any) -> None:
        """Bind three hand-made instances to a class."""
        self.register_factory(cls, FixedValueFactory(red, black, red_copy))

    def register_deferred_factory(self, type_name: str, factory: PrefabValueFactory) -> DeferredBinding:
        """
        Bind a factory to a class given by dotted name.

        The name is located now. If the class is available the factory is
        bound to it; otherwise the binding is recorded as unavailable and
        stays inert. Registration never fails because a module is absent.
        """
        if not isinstance(factory, PrefabValueFactory):
            raise TypeError(f"Expected a PrefabValueFactory, got {factory!r}")

        binding = DeferredBinding(type_name, factory, locate_type(type_name))
        self._deferred[type_name] = binding
        if binding.available:
            self._factories[binding.resolved_type] = factory
        else:
            logger.debug("Deferred factory for %s is inert: type not available", type_name)
        return binding

    def deferred_binding(self, type_name: str) -> Optional[DeferredBinding]:
        return self._deferred.get(type_name)

    def has_factory(self, cls: type) -> bool:
        return cls in self._factories

    def is_cached(self, tag: Any) -> bool:
        return _as_tag(tag) in self._cache

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    def give_red(self, tag: Any) -> Any:
        """The red instance of tag (a TypeTag or a type annotation)."""
        return self.give_pair(tag).red

    def give_black(self, tag: Any) -> Any:
        """The black instance of tag (a TypeTag or a type annotation)."""
        return self.give_pair(tag).black

    def give_red_copy(self, tag: Any) -> Any:
        """An instance equal to the red instance of tag."""
        return self.give_pair(tag).red_copy

    def give_pair(self, tag: Any) -> ValuePair:
        return self.realize(_as_tag(tag), ())

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def realize(self, tag: TypeTag, type_stack: TypeStack = ()) -> ValuePair:
        """
        Return the value pair for tag, synthesizing and caching it if needed.

        Args:
            tag: The type to instantiate
            type_stack: Tags currently being resolved, outermost first

        Raises:
            UnregisteredTypeError: If no factory applies to tag
            ReflectiveInvocationError: If a factory failed while building
            RecursionCycleError: If a cycle through tag cannot be broken
        """
        cached = self._cache.get(tag)
        if cached is not None:
            return cached

        if tag in type_stack:
            return self._break_cycle(tag, type_stack)

        stack = type_stack + (tag,)
        factory = self._factory_for(tag)
        logger.debug("Creating values for %s with %s", tag, type(factory).__name__)

        try:
            pair = factory.create_values(tag, self, stack)
        except PrefabError:
            raise
        except Exception as exc:
            raise ReflectiveInvocationError(
                tag.qualified_name, type(factory).__name__, str(exc) or type(exc).__name__
            ) from exc

        if check_degenerate(pair, tag):
            logger.debug("Red and black of %s are equal", tag)
        self._cache[tag] = pair
        return pair

    def _factory_for(self, tag: TypeTag) -> PrefabValueFactory:
        factory = self._factories.get(tag.type)
        if factory is not None:
            return factory
        if issubclass(tag.type, enum.Enum):
            return self._enum_factory
        return self._constructor_factory

    def _break_cycle(self, tag: TypeTag, type_stack: TypeStack) -> ValuePair:
        """
        Values for a tag that is already being resolved.

        Reuses the cached pair of an equivalent tag: same class, same
        arguments, a missing argument counting as object. Otherwise every
        colour is the same blank instance. Neither substitute is cached
        under tag.
        """
        for candidate, cached in self._cache.items():
            if _equivalent(candidate, tag):
                logger.debug("Recursive %s reuses the values of %s", tag, candidate)
                return cached

        try:
            stand_in = blank_instance(tag.type)
        except TypeError as exc:
            raise RecursionCycleError(
                tag.qualified_name,
                f"recursive type cannot be instantiated without its constructor ({exc})",
                type_stack,
            ) from exc
        logger.debug("Recursive %s replaced by a blank stand-in", tag)
        return ValuePair.of(stand_in, stand_in, stand_in)


def _as_tag(tag: Any) -> TypeTag:
    return tag if isinstance(tag, TypeTag) else TypeTag.of(tag)


def _equivalent(a: TypeTag, b: TypeTag) -> bool:
    if a.type is not b.type:
        return False
    count = max(len(a.generic_types), len(b.generic_types))
    return all(a.generic_type(i) == b.generic_type(i) for i in range(count))
