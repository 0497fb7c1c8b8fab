"""
Reflective strategies for types located by name.

Optional libraries may or may not be installed. Types from them are
referenced by their dotted name and located with importlib only when
needed; an absent module is not an error, it simply makes the type
unavailable.

    OptionalType                — handle to a class that may be absent
    ReflectiveGenericFactory    — generic container built by a named method
    ReflectiveCollectionFactory — collection whose empty instance is
                                  produced reflectively
    ReflectiveConstantFactory   — red and black taken from class constants
"""

from __future__ import annotations

import copy
import importlib
import importlib.util
import logging
import sys
from types import ModuleType
from typing import Any, Callable, Optional

from ..errors import MissingDependencyError, PrefabError, ReflectiveInvocationError
from ..pair import ValuePair
from ..typetag import TypeTag
from .base import PrefabValueFactory, TypeStack
from .generic import GenericFactory, insert_element

logger = logging.getLogger(__name__)


# =============================================================================
# LOCATING TYPES BY NAME
# =============================================================================

def _probe_module(module_name: str) -> Optional[ModuleType]:
    """Import a module if it exists, None otherwise."""
    if module_name in sys.modules:
        return sys.modules[module_name]
    try:
        if importlib.util.find_spec(module_name) is None:
            return None
        return importlib.import_module(module_name)
    except ImportError as exc:
        # Parent package missing, parent is not a package, or import failed
        logger.debug("Module %s not importable: %s", module_name, exc)
        return None


def locate_type(fully_qualified_name: str) -> Optional[type]:
    """
    Find a class by dotted name, e.g. ``"collections.OrderedDict"``.

    Nested classes are supported ("pkg.module.Outer.Inner"): the longest
    importable module prefix is taken and the rest is looked up as
    attributes.

    Returns None if the module or the attribute does not exist.
    """
    parts = fully_qualified_name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module = _probe_module(".".join(parts[:split]))
        if module is None:
            continue

        found: Any = module
        for attribute in parts[split:]:
            found = getattr(found, attribute, None)
            if found is None:
                return None
        return found if isinstance(found, type) else None
    return None


def invoke(type_name: str, member: str, target: Callable, args: tuple, kwargs: dict) -> Any:
    """Call target, reporting any failure against type_name and member."""
    try:
        return target(*args, **kwargs)
    except PrefabError:
        raise
    except Exception as exc:
        raise ReflectiveInvocationError(
            type_name, member, str(exc) or type(exc).__name__
        ) from exc


class OptionalType:
    """
    A class referenced by name that may be absent from the environment.

    When the class is absent, every operation returns None, unless the
    handle is required, in which case MissingDependencyError is raised.
    """

    def __init__(self, fully_qualified_name: str, required: bool = False):
        self.name = fully_qualified_name
        self.required = required

    def resolve(self) -> Optional[type]:
        """The located class, or None."""
        cls = locate_type(self.name)
        if cls is None and self.required:
            raise MissingDependencyError(self.name, "not available in this environment")
        return cls

    def instantiate(self, *args: Any, **kwargs: Any) -> Any:
        """Call the constructor."""
        cls = self.resolve()
        if cls is None:
            return None
        return invoke(self.name, "__init__", cls, args, kwargs)

    def call_factory(
        self,
        method_name: str,
        *args: Any,
        factory_type_name: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Call a factory method of this class.

        If factory_type_name is given, the method is looked up on that
        class instead (a separate factory/helper class).
        """
        cls = self.resolve()
        if cls is None:
            return None
        owner = cls
        if factory_type_name is not None:
            owner = OptionalType(factory_type_name, required=True).resolve()

        method = getattr(owner, method_name, None)
        if not callable(method):
            raise ReflectiveInvocationError(
                self.name, method_name, f"no callable {method_name} on {owner.__qualname__}"
            )
        return invoke(self.name, method_name, method, args, kwargs)

    def return_constant(self, constant_name: str) -> Any:
        """Read a class-level constant."""
        cls = self.resolve()
        if cls is None:
            return None
        if not hasattr(cls, constant_name):
            raise ReflectiveInvocationError(self.name, constant_name, "no such constant")
        return getattr(cls, constant_name)

    def __repr__(self) -> str:
        return f"OptionalType({self.name!r})"


# =============================================================================
# REFLECTIVE FACTORIES
# =============================================================================

class ReflectiveGenericFactory(GenericFactory):
    """
    Generic container created through a named factory method.

    Example:
        ReflectiveGenericFactory("frozendict.frozendict", arity=2,
                                 construct_with=lambda k, v: ({k: v},),
                                 empty_method="__init__")

    Without a method name the constructor is called. The resolved type
    argument values are passed positionally, unless construct_with
    reshapes them into the argument tuple first. An empty_method of
    "__init__" creates the empty value with the no-argument constructor.
    """

    def __init__(
        self,
        type_name: str,
        method_name: Optional[str] = None,
        empty_method: Optional[str] = None,
        arity: Optional[int] = None,
        construct_with: Optional[Callable[..., tuple]] = None,
    ):
        self.type_name = type_name
        self.method_name = method_name
        self.empty_method = empty_method
        self.construct_with = construct_with
        self._type = OptionalType(type_name, required=True)
        empty = self._create_empty if empty_method is not None else None
        super().__init__(self._create, empty, arity)

    def _create(self, values: list) -> Any:
        args = tuple(values) if self.construct_with is None else self.construct_with(*values)
        if self.method_name is None:
            return self._type.instantiate(*args)
        return self._type.call_factory(self.method_name, *args)

    def _create_empty(self) -> Any:
        if self.empty_method == "__init__":
            return self._type.instantiate()
        return self._type.call_factory(self.empty_method)


class ReflectiveCollectionFactory(GenericFactory):
    """
    Single-element collection whose empty instance is created reflectively.

    Use call_constructor or call_factory_method to build one.
    """

    def __init__(self, type_name: str, create_empty: Callable[[], Any]):
        self.type_name = type_name
        self.create_empty = create_empty
        super().__init__(self._create_with, create_empty, arity=1)

    @classmethod
    def call_constructor(cls, type_name: str, *args: Any) -> ReflectiveCollectionFactory:
        located = OptionalType(type_name, required=True)
        return cls(type_name, lambda: located.instantiate(*args))

    @classmethod
    def call_factory_method(
        cls, type_name: str, method_name: str, *args: Any
    ) -> ReflectiveCollectionFactory:
        located = OptionalType(type_name, required=True)
        return cls(type_name, lambda: located.call_factory(method_name, *args))

    def _create_with(self, values: list) -> Any:
        container = self.create_empty()
        invoke(self.type_name, "add", insert_element, (container, values[0]), {})
        return container


class ReflectiveConstantFactory(PrefabValueFactory):
    """
    Red and black are class constants, e.g. ``datetime.min`` and ``datetime.max``.

    red_copy is a shallow copy of red, a distinct object for value
    classes that reconstruct themselves through pickling support.
    """

    def __init__(self, type_name: str, red_name: str, black_name: str):
        self.type_name = type_name
        self.red_name = red_name
        self.black_name = black_name

    def create_values(self, tag: TypeTag, prefab_values, type_stack: TypeStack) -> ValuePair:
        located = OptionalType(self.type_name, required=True)
        red = located.return_constant(self.red_name)
        black = located.return_constant(self.black_name)
        return ValuePair.of(red, black, copy.copy(red))
