"""
Default catalog of prefab values.

Hand-made instances of builtin and standard-library classes that cannot
be built by constructor introspection (builtins expose no signature),
plus deferred bindings for containers from optional libraries.

Red copies are distinct objects wherever Python allows it; small ints,
booleans and None are shared by the interpreter.
"""

from __future__ import annotations

import collections
import collections.abc
import enum
import ipaddress
import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from fractions import Fraction
from pathlib import Path, PurePosixPath
from typing import Any
from uuid import UUID

from .factories import (
    FixedValueFactory,
    GenericFactory,
    PrefabValueFactory,
    ReflectiveCollectionFactory,
    ReflectiveConstantFactory,
    ReflectiveGenericFactory,
    arity1,
    collection,
    mapping,
)

SORTEDCONTAINERS_PACKAGE = "sortedcontainers."


class _Dummy(enum.Enum):
    RED = "red"
    BLACK = "black"


class _Catalog:
    """Registers the default values on one PrefabValues instance."""

    def __init__(self, prefab_values):
        self.prefab_values = prefab_values

    def add_all(self) -> None:
        self.add_primitive_classes()
        self.add_value_classes()
        self.add_date_time_classes()
        self.add_collections()
        self.add_maps()
        self.add_abstract_collections()
        self.add_optional_library_classes()

    def add_primitive_classes(self) -> None:
        self.add_values(bool, True, False, True)
        self.add_values(int, 1, 2, 1)
        self.add_values(float, 0.5, 1.0, float("0.5"))
        self.add_values(complex, 1j, 2j, complex(0, 1))
        self.add_values(str, "one", "two", "".join(("o", "ne")))
        self.add_values(bytes, b"one", b"two", b"".join((b"o", b"ne")))
        self.add_values(bytearray, bytearray(b"one"), bytearray(b"two"), bytearray(b"one"))
        self.add_values(object, object(), object(), object())
        self.add_values(type, type, object, type)
        self.add_values(type(None), None, None, None)
        self.add_values(enum.Enum, _Dummy.RED, _Dummy.BLACK, _Dummy.RED)

    def add_value_classes(self) -> None:
        self.add_values(range, range(1), range(2), range(1))
        self.add_values(slice, slice(1), slice(2), slice(1))
        self.add_values(Decimal, Decimal("0"), Decimal("1"), Decimal("0"))
        self.add_values(Fraction, Fraction(0), Fraction(1), Fraction(0))
        self.add_values(
            UUID,
            UUID(int=0x0000000000000000FFFFFFFFFFFFFFFF),
            UUID(int=0x00000000000000010000000000000000),
            UUID(int=0x0000000000000000FFFFFFFFFFFFFFFF),
        )
        self.add_values(Path, Path(""), Path("/"), Path(""))
        self.add_values(PurePosixPath, PurePosixPath(""), PurePosixPath("/"), PurePosixPath(""))
        self.add_values(re.Pattern, re.compile("one"), re.compile("two"), re.compile("one"))
        self.add_values(
            ipaddress.IPv4Address,
            ipaddress.IPv4Address("127.0.0.1"),
            ipaddress.IPv4Address("127.0.0.42"),
            ipaddress.IPv4Address("127.0.0.1"),
        )
        self.add_values(
            ipaddress.IPv6Address,
            ipaddress.IPv6Address("::1"),
            ipaddress.IPv6Address("::2"),
            ipaddress.IPv6Address("::1"),
        )

    def add_date_time_classes(self) -> None:
        self.add_factory(datetime, ReflectiveConstantFactory("datetime.datetime", "min", "max"))
        self.add_factory(date, ReflectiveConstantFactory("datetime.date", "min", "max"))
        self.add_factory(time, ReflectiveConstantFactory("datetime.time", "min", "max"))
        self.add_values(timedelta, timedelta(0), timedelta(1), timedelta(0))
        self.add_values(
            timezone,
            timezone(timedelta(hours=1)),
            timezone(timedelta(hours=-10)),
            timezone(timedelta(hours=1)),
        )

    def add_collections(self) -> None:
        self.add_factory(list, collection(list))
        self.add_factory(set, collection(set))
        self.add_factory(frozenset, arity1(lambda a: frozenset((a,)), frozenset))
        self.add_factory(tuple, GenericFactory(tuple, tuple))
        self.add_factory(collections.deque, collection(collections.deque))
        self.add_factory(collections.Counter, arity1(lambda a: collections.Counter((a,)), collections.Counter))

    def add_maps(self) -> None:
        self.add_factory(dict, mapping(dict))
        self.add_factory(collections.OrderedDict, mapping(collections.OrderedDict))
        self.add_factory(collections.defaultdict, mapping(collections.defaultdict))
        self.add_factory(collections.ChainMap, mapping(collections.ChainMap))

    def add_abstract_collections(self) -> None:
        for interface in (
            collections.abc.Iterable,
            collections.abc.Collection,
            collections.abc.Container,
            collections.abc.Reversible,
            collections.abc.Sequence,
            collections.abc.MutableSequence,
        ):
            self.add_factory(interface, collection(list))
        for interface in (collections.abc.Set, collections.abc.MutableSet):
            self.add_factory(interface, collection(set))
        for interface in (collections.abc.Mapping, collections.abc.MutableMapping):
            self.add_factory(interface, mapping(dict))

    def add_optional_library_classes(self) -> None:
        for name in ("SortedList", "SortedSet"):
            type_name = SORTEDCONTAINERS_PACKAGE + name
            self.add_deferred(type_name, ReflectiveCollectionFactory.call_constructor(type_name))
        self.add_deferred_map(SORTEDCONTAINERS_PACKAGE + "SortedDict")
        self.add_deferred_map("frozendict.frozendict")

    # -------------------------------------------------------------------------

    def add_values(self, cls: type, red: Any, black: Any, red_copy: Any) -> None:
        self.prefab_values.register_factory(cls, FixedValueFactory(red, black, red_copy))

    def add_factory(self, cls: type, factory: PrefabValueFactory) -> None:
        self.prefab_values.register_factory(cls, factory)

    def add_deferred(self, type_name: str, factory: PrefabValueFactory) -> None:
        self.prefab_values.register_deferred_factory(type_name, factory)

    def add_deferred_map(self, type_name: str) -> None:
        factory = ReflectiveGenericFactory(
            type_name,
            arity=2,
            construct_with=lambda key, value: ({key: value},),
            empty_method="__init__",
        )
        self.add_deferred(type_name, factory)


def add_to(prefab_values) -> None:
    """
    Add the default catalog to prefab_values.

    Existing registrations for the same classes are replaced.
    """
    _Catalog(prefab_values).add_all()
