"""
Tests for the Type Descriptor.

These tests verify:
1. Structural equality and hashing (usable as cache and stack keys)
2. Parsing of typing annotations into tags
3. Fallback to object for anything unresolvable
4. Declared parameter counts
5. TypeVar binding from an enclosing stack
"""

import typing
from decimal import Decimal
from typing import Annotated, Any, Generic, List, Literal, NewType, Optional, TypeVar, Union

import pytest

from prefab.typetag import DEFAULT_TYPE, OBJECT_TAG, TypeTag, type_bindings


T = TypeVar("T")
U = TypeVar("U")
Number = TypeVar("Number", bound=int)
UserId = NewType("UserId", int)


# =============================================================================
# TEST FIXTURES
# =============================================================================

class Box(Generic[T]):
    def __init__(self, value: T):
        self.value = value


class Pair(Generic[T, U]):
    def __init__(self, first: T, second: U):
        self.first = first
        self.second = second


class IntBox(Box[int]):
    pass


class Labelled(Box[T], Generic[T]):
    pass


def tag(cls, *generic_types):
    return TypeTag(cls, tuple(generic_types))


# =============================================================================
# EQUALITY
# =============================================================================

class TestTypeTagEquality:
    """Tests for structural equality of tags."""

    def test_equal_when_class_and_arguments_match(self):
        """Identical descriptions are equal and hash alike."""
        a = tag(list, tag(int))
        b = tag(list, tag(int))

        assert a == b
        assert hash(a) == hash(b)

    def test_argument_order_matters(self):
        """dict[str, int] is not dict[int, str]."""
        assert TypeTag.of(dict, str, int) != TypeTag.of(dict, int, str)

    def test_raw_differs_from_parameterised(self):
        """A raw generic is a different key from a parameterised one."""
        assert TypeTag(list) != TypeTag.of(list[int])

    def test_usable_as_dict_key(self):
        """Tags built separately find the same dict entry."""
        cache = {TypeTag.of(dict[str, list[int]]): "hit"}

        assert cache[TypeTag.of(dict, str, list[int])] == "hit"

    def test_generic_types_stored_as_tuple(self):
        """A list of arguments is frozen into a tuple."""
        t = TypeTag(list, [TypeTag(int)])

        assert t.generic_types == (TypeTag(int),)
        assert hash(t) == hash(tag(list, tag(int)))

    def test_rejects_non_class(self):
        """The described type must be a class."""
        with pytest.raises(TypeError, match="requires a class"):
            TypeTag("list")

    def test_rejects_non_tag_arguments(self):
        """Arguments must already be tags."""
        with pytest.raises(TypeError, match="must contain TypeTag"):
            TypeTag(list, (int,))

    def test_tags_are_immutable(self):
        """A tag cannot be changed after construction."""
        t = TypeTag(int)

        with pytest.raises(AttributeError):
            t.type = str


# =============================================================================
# PARSING
# =============================================================================

class TestTypeTagParsing:
    """Tests for TypeTag.of on typing annotations."""

    def test_plain_class(self):
        """A class becomes a tag without arguments."""
        assert TypeTag.of(int) == tag(int)

    def test_builtin_generic(self):
        """list[int] keeps its argument."""
        assert TypeTag.of(list[int]) == tag(list, tag(int))

    def test_typing_alias_matches_builtin(self):
        """typing.List[int] and list[int] describe the same type."""
        assert TypeTag.of(List[int]) == TypeTag.of(list[int])

    def test_nested_generics(self):
        """Arguments are parsed recursively."""
        assert TypeTag.of(dict[str, list[int]]) == tag(dict, tag(str), tag(list, tag(int)))

    def test_explicit_arguments(self):
        """Arguments passed separately are parsed like annotations."""
        assert TypeTag.of(dict, str, list[int]) == TypeTag.of(dict[str, list[int]])

    def test_user_generic(self):
        """Generic user classes keep their arguments."""
        assert TypeTag.of(Pair[str, int]) == tag(Pair, tag(str), tag(int))

    def test_existing_tag_returned_unchanged(self):
        """Parsing a tag yields the tag."""
        t = tag(set, tag(str))

        assert TypeTag.of(t) is t

    def test_optional_is_its_member(self):
        """Optional[X] describes X."""
        assert TypeTag.of(Optional[int]) == tag(int)

    def test_pipe_union_with_none(self):
        """X | None describes X."""
        assert TypeTag.of(int | None) == tag(int)

    def test_union_uses_first_member(self):
        """A wider union is described by its first member."""
        assert TypeTag.of(Union[str, int]) == tag(str)

    def test_none(self):
        """None describes NoneType."""
        assert TypeTag.of(None) == tag(type(None))

    def test_annotated_is_unwrapped(self):
        """Annotated metadata is ignored."""
        assert TypeTag.of(Annotated[int, "positive"]) == tag(int)

    def test_literal_uses_value_type(self):
        """Literal["a"] describes str."""
        assert TypeTag.of(Literal["a"]) == tag(str)

    def test_new_type_uses_supertype(self):
        """A NewType describes its supertype."""
        assert TypeTag.of(UserId) == tag(int)

    def test_classvar_is_unwrapped(self):
        """ClassVar[int] describes int."""
        assert TypeTag.of(typing.ClassVar[int]) == tag(int)

    def test_variadic_tuple_drops_ellipsis(self):
        """tuple[int, ...] keeps only the element type."""
        assert TypeTag.of(tuple[int, ...]) == tag(tuple, tag(int))

    def test_fixed_tuple(self):
        """A fixed tuple keeps every element type in order."""
        assert TypeTag.of(tuple[int, str, bytes]) == tag(tuple, tag(int), tag(str), tag(bytes))

    def test_callable_argument_list_skipped(self):
        """The parameter list of a Callable is not a type argument."""
        parsed = TypeTag.of(typing.Callable[[int], str])

        assert parsed.generic_types == (tag(str),)

    def test_rejects_non_type(self):
        """A value that is not an annotation cannot be described."""
        with pytest.raises(TypeError, match="Cannot describe"):
            TypeTag.of(42)


# =============================================================================
# FALLBACK TO OBJECT
# =============================================================================

class TestDefaultType:
    """Tests for the object fallback."""

    def test_default_type_is_object(self):
        """The implied argument is object."""
        assert DEFAULT_TYPE is object
        assert OBJECT_TAG == tag(object)

    def test_any(self):
        """Any describes object."""
        assert TypeTag.of(Any) == OBJECT_TAG

    def test_unbound_type_var(self):
        """A TypeVar with no binding describes object."""
        assert TypeTag.of(T) == OBJECT_TAG

    def test_bounded_type_var_uses_bound(self):
        """An unbound TypeVar with a bound describes its bound."""
        assert TypeTag.of(Number) == tag(int)

    def test_forward_reference(self):
        """An unresolved string annotation describes object."""
        assert TypeTag.of("Node") == OBJECT_TAG
        assert TypeTag.of(typing.ForwardRef("Node")) == OBJECT_TAG

    def test_wildcard_argument(self):
        """list[Any] is list[object]."""
        assert TypeTag.of(list[Any]) == tag(list, OBJECT_TAG)

    def test_missing_argument(self):
        """A raw generic's arguments read as object."""
        raw = TypeTag(dict)

        assert raw.generic_type(0) == OBJECT_TAG
        assert raw.generic_type(1) == OBJECT_TAG

    def test_present_argument(self):
        """generic_type returns existing arguments by position."""
        t = TypeTag.of(dict[str, int])

        assert t.generic_type(0) == tag(str)
        assert t.generic_type(1) == tag(int)


# =============================================================================
# ARITY AND NAMES
# =============================================================================

class TestTypeParameterCount:
    """Tests for declared parameter counts."""

    @pytest.mark.parametrize("cls, expected", [
        (list, 1),
        (set, 1),
        (dict, 2),
        (Box, 1),
        (Pair, 2),
        (int, 0),
        (IntBox, 0),
    ])
    def test_declared_count(self, cls, expected):
        """Builtins use the arity table, user generics their parameters."""
        assert TypeTag(cls).type_parameter_count() == expected

    def test_raw_tuple_has_one_parameter(self):
        """A bare tuple is treated as a single-element tuple."""
        assert TypeTag(tuple).type_parameter_count() == 1

    def test_tuple_counts_its_arguments(self):
        """A fixed tuple has one parameter per element."""
        assert TypeTag.of(tuple[int, str, bytes]).type_parameter_count() == 3


class TestNames:
    """Tests for readable names."""

    def test_qualified_name_omits_builtins(self):
        """Builtins appear without their module."""
        assert TypeTag.of(dict[str, Decimal]).qualified_name == "dict[str, decimal.Decimal]"

    def test_str(self):
        """str renders the short form."""
        assert str(TypeTag.of(dict[str, list[int]])) == "dict[str, list[int]]"


# =============================================================================
# TYPE VARIABLE BINDING
# =============================================================================

class TestTypeBindings:
    """Tests for binding TypeVars from a recursion stack."""

    def test_binds_parameters_of_a_tag(self):
        """Box[int] binds T to int."""
        assert type_bindings((TypeTag.of(Box[int]),)) == {T: tag(int)}

    def test_binds_every_parameter(self):
        """Pair[str, bytes] binds T and U."""
        bindings = type_bindings((TypeTag.of(Pair[str, bytes]),))

        assert bindings[T] == tag(str)
        assert bindings[U] == tag(bytes)

    def test_nearest_binding_wins(self):
        """A later stack entry overrides an earlier binding of the same TypeVar."""
        bindings = type_bindings((TypeTag.of(Box[int]), TypeTag.of(Pair[str, bytes])))

        assert bindings[T] == tag(str)

    def test_binds_through_concrete_base(self):
        """IntBox binds Box's T to int."""
        assert type_bindings((TypeTag(IntBox),))[T] == tag(int)

    def test_binds_through_generic_base(self):
        """Labelled[str] passes str on to Box's T."""
        assert type_bindings((TypeTag.of(Labelled[str]),))[T] == tag(str)

    def test_raw_tag_binds_object(self):
        """A raw generic binds its parameters to object."""
        assert type_bindings((TypeTag(Box),))[T] == OBJECT_TAG

    def test_bindings_used_while_parsing(self):
        """TypeTag.of substitutes bound TypeVars."""
        parsed = TypeTag.of(list[T], bindings={T: tag(str)})

        assert parsed == tag(list, tag(str))
