# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for shape derivation: the ordered dispatch rules and error collection."""

import enum
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated, Any, Literal

import pytest

from specimen.engine.derivation import derive_graph, derive_shape
from specimen.engine.errors import (
    EmptyHierarchyError,
    InvalidConstraintError,
    InvalidVariantError,
    UnsupportedTypeError,
)
from specimen.engine.overrides import OverrideRef, OverrideTable
from specimen.introspect import RuntimeTypeQuery
from specimen.markers import Char, Float32, Int32, Range, Size, generatable, provides, sealed, singleton
from specimen.model import (
    Backed,
    BooleanShape,
    CharShape,
    Constraint,
    ConstructibleShape,
    EnumShape,
    FloatingShape,
    FunctionShape,
    IntegerShape,
    ListShape,
    MapShape,
    OpaqueNullable,
    OptionalShape,
    PairShape,
    SetShape,
    SingletonShape,
    SumShape,
    TextShape,
    Unsupported,
    WrapperShape,
)

# ###############
# Test Types
# ###############


class Opaque:
    def __init__(self, handle: int) -> None:
        self.handle = handle


class Clock:
    pass


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Nothing(enum.Enum):
    pass


@singleton
class Origin:
    pass


@generatable
@dataclass
class Address:
    street: str


@generatable
@dataclass(frozen=True)
class Label:
    text: str


@generatable
class Token:
    pass


@singleton
@generatable
class Marker:
    pass


@generatable
class Tags(list[str]):
    pass


@sealed
@dataclass
class Animal:
    pass


@generatable
@dataclass
class Cat(Animal):
    lives: int


@singleton
class Fish(Animal):
    pass


@sealed
class Vacant:
    pass


@sealed
class Vehicle:
    pass


@generatable
@dataclass
class Car(Vehicle):
    wheels: int


@generatable
@dataclass
class Boat(Vehicle):
    hull: Opaque


@sealed
class Mixed:
    pass


@dataclass
class Loose(Mixed):
    weight: int


@dataclass
class Person:
    age: Annotated[Int32, Range(0, 100)]
    tag: Annotated[str, Size(5)]


@dataclass
class Household:
    home: Address
    second_home: Address | None
    pets: list[Animal]
    nickname: str = "home"


@dataclass
class Broken:
    first: Opaque
    second: Any
    third: Annotated[int, Range(5, 5)]


@generatable
@dataclass
class Node:
    value: int
    next: "Node | None"


@provides(int)
class IntSource:
    values = [1, 2, 3]


@provides(Address)
class AddressSource:
    values = [Address(street="Main")]


# ###############
# Helpers
# ###############

_query = RuntimeTypeQuery()


def _tid(tp: Any) -> str:
    return _query.type_id(tp)


def _shape(annotation: Any, **kwargs: Any) -> Any:
    """Derive *annotation*, asserting that no problem is reported."""
    shape, errors = derive_shape(annotation, **kwargs)
    assert errors == []
    return shape


def _overrides(target: Any, source: type) -> OverrideTable:
    return OverrideTable([OverrideRef(target=target, source=source)])


# ###############
# Rules, in dispatch order
# ###############


class TestOverrideRule:
    def test_override_produces_backed(self) -> None:
        assert _shape(int, overrides=_overrides(int, IntSource)) == Backed(provider_id="builtins:int")

    def test_override_beats_primitive(self) -> None:
        shape = _shape(Annotated[int, Range(0, 5)], overrides=_overrides(int, IntSource))
        assert isinstance(shape, Backed)

    def test_override_beats_generatable(self) -> None:
        graph = derive_graph(Household, overrides=_overrides(Address, AddressSource))
        provider = graph.providers[_tid(Address)]
        assert provider.external
        assert provider.source_id == _tid(AddressSource)
        assert _tid(Address) not in graph.records


class TestPrimitiveRule:
    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (bool, BooleanShape()),
            (int, IntegerShape(width=64, range=Constraint(lower=0, upper=100_000))),
            (Int32, IntegerShape(width=32, range=Constraint(lower=0, upper=100))),
            (float, FloatingShape(width=64, range=Constraint(lower=0.0, upper=100.0))),
            (Float32, FloatingShape(width=32, range=Constraint(lower=0.0, upper=100.0))),
            (Char, CharShape()),
            (str, TextShape(size=Constraint(lower=0, upper=50, fixed=30))),
        ],
    )
    def test_primitive(self, annotation: Any, expected: Any) -> None:
        assert _shape(annotation) == expected

    def test_range_marker_applies(self) -> None:
        shape = _shape(Annotated[Int32, Range(18, 65)])
        assert shape.range == Constraint(lower=18, upper=65)

    def test_metadata_argument_applies(self) -> None:
        shape = _shape(str, metadata=[Size(min=1, max=4)])
        assert shape.size == Constraint(lower=1, upper=4)

    def test_empty_range_is_reported(self) -> None:
        shape, errors = derive_shape(Annotated[int, Range(5, 5)], location="pkg:R.f")
        assert isinstance(shape, Unsupported)
        assert errors == [InvalidConstraintError(type="int", location="pkg:R.f", detail="empty range [5, 5)")]

    def test_fractional_range_is_narrowed_to_integers(self) -> None:
        shape = _shape(Annotated[int, Range(0.5, 3.5)])
        assert shape.range == Constraint(lower=1, upper=4)

    def test_fractional_range_without_integers_is_reported(self) -> None:
        shape, errors = derive_shape(Annotated[int, Range(0.2, 0.8)], location="pkg:R.f")
        assert isinstance(shape, Unsupported)
        assert errors == [InvalidConstraintError(type="int", location="pkg:R.f", detail="empty range [1, 1)")]


class TestWrapperRule:
    def test_awaitable(self) -> None:
        assert _shape(Awaitable[bool]) == WrapperShape(wrapper="awaitable", inner=BooleanShape())

    def test_stream(self) -> None:
        assert _shape(AsyncIterator[Char]) == WrapperShape(wrapper="stream", inner=CharShape())


class TestCollectionRule:
    def test_list(self) -> None:
        shape = _shape(list[bool])
        assert shape == ListShape(size=Constraint(lower=5, upper=10, fixed=5), element=BooleanShape())

    def test_set_and_map(self) -> None:
        assert isinstance(_shape(frozenset[int]), SetShape)
        assert _shape(frozenset[int]).container == "builtins:frozenset"
        shape = _shape(dict[Char, bool])
        assert isinstance(shape, MapShape)
        assert (shape.key, shape.value) == (CharShape(), BooleanShape())

    def test_each_level_has_its_own_size(self) -> None:
        shape = _shape(Annotated[list[Annotated[list[bool], Size(2)]], Size(min=1, max=3)])
        assert shape.size == Constraint(lower=1, upper=3)
        assert shape.element.size == Constraint(lower=5, upper=10, fixed=2)

    def test_collection_beats_generatable(self) -> None:
        shape = _shape(Tags)
        assert isinstance(shape, ListShape)
        assert shape.container == _tid(Tags)

    def test_unsupported_element_is_reported_with_location(self) -> None:
        _, errors = derive_shape(list[Opaque], location="pkg:R.items")
        assert errors == [UnsupportedTypeError(type="Opaque", location="pkg:R.items[element]")]

    def test_unhashable_set_element_is_reported(self) -> None:
        shape, errors = derive_shape(set[Address], location="pkg:R.homes")
        assert isinstance(shape, Unsupported)
        assert errors == [UnsupportedTypeError(type="Address", location="pkg:R.homes[element]")]

    def test_unhashable_map_key_is_reported(self) -> None:
        shape, errors = derive_shape(dict[list[int], bool], location="pkg:R.index")
        assert isinstance(shape, Unsupported)
        assert errors == [UnsupportedTypeError(type="list[int]", location="pkg:R.index[key]")]

    def test_unhashable_list_element_is_allowed(self) -> None:
        assert _shape(list[Address]).element == Backed(provider_id=_tid(Address))

    def test_hashable_record_can_be_set_element_and_map_key(self) -> None:
        assert _shape(frozenset[Label]).element == Backed(provider_id=_tid(Label))
        assert _shape(dict[Label, bool]).key == Backed(provider_id=_tid(Label))


class TestPairAndFunctionRules:
    def test_pair(self) -> None:
        assert _shape(tuple[bool, Char]) == PairShape(left=BooleanShape(), right=CharShape())

    def test_longer_tuple_is_unsupported(self) -> None:
        shape, errors = derive_shape(tuple[bool, bool, bool])
        assert isinstance(shape, Unsupported)
        assert len(errors) == 1

    def test_function(self) -> None:
        assert _shape(Callable[[int, str], None]) == FunctionShape(arity=2, returns_void=True)

    def test_function_with_result(self) -> None:
        shape = _shape(Callable[..., int])
        assert shape == FunctionShape(arity=0, returns_void=False, variadic=True)


class TestSumRule:
    def test_sealed_hierarchy(self) -> None:
        shape = _shape(Animal)
        assert shape == SumShape(
            type_id=_tid(Animal),
            variants=[Backed(provider_id=_tid(Cat)), SingletonShape(type_id=_tid(Fish), name="Fish")],
        )

    def test_union(self) -> None:
        assert _shape(bool | Char) == SumShape(variants=[BooleanShape(), CharShape()])

    def test_nullable_union(self) -> None:
        assert _shape(bool | Char | None) == OptionalShape(inner=SumShape(variants=[BooleanShape(), CharShape()]))

    def test_hierarchy_without_leaves(self) -> None:
        shape, errors = derive_shape(Vacant)
        assert isinstance(shape, Unsupported)
        assert errors == [EmptyHierarchyError(type="Vacant")]

    def test_leaf_that_is_not_generatable(self) -> None:
        shape, errors = derive_shape(Mixed)
        assert isinstance(shape, Unsupported)
        assert InvalidVariantError(type="Mixed", variant="Loose") in errors
        assert UnsupportedTypeError(type="Loose", location=_tid(Loose)) in errors

    def test_failing_leaf_fails_whole_hierarchy(self) -> None:
        """A leaf whose record has an unsupported field fails the hierarchy."""
        _, errors = derive_shape(Vehicle)
        assert InvalidVariantError(type="Vehicle", variant="Boat") in errors
        assert UnsupportedTypeError(type="Opaque", location=f"{_tid(Boat)}.hull") in errors
        assert InvalidVariantError(type="Vehicle", variant="Car") not in errors


class TestEnumRule:
    def test_enum(self) -> None:
        assert _shape(Color) == EnumShape(type_id=_tid(Color), cases=["RED", "GREEN"])

    def test_literal(self) -> None:
        assert _shape(Literal["a", "b"]) == EnumShape(cases=["a", "b"])

    def test_enum_without_members(self) -> None:
        shape, errors = derive_shape(Nothing)
        assert isinstance(shape, Unsupported)
        assert errors == [EmptyHierarchyError(type="Nothing")]


class TestSingletonRule:
    def test_singleton(self) -> None:
        assert _shape(Origin) == SingletonShape(type_id=_tid(Origin), name="Origin")

    def test_singleton_beats_generatable(self) -> None:
        assert isinstance(_shape(Marker), SingletonShape)


class TestGeneratableRule:
    def test_generatable_registers_provider(self) -> None:
        graph = derive_graph(Household)
        assert graph.record.field("home").shape == Backed(provider_id=_tid(Address))
        assert list(graph.providers) == [_tid(Address), _tid(Cat)]
        assert graph.providers[_tid(Address)].pool_size == 5

    def test_generatable_beats_zero_arg_constructor(self) -> None:
        assert _shape(Token) == Backed(provider_id=_tid(Token))


class TestFallbackRules:
    def test_zero_arg_constructor(self) -> None:
        assert _shape(Clock) == ConstructibleShape(type_id=_tid(Clock))

    def test_nullable_unsupported_is_opaque(self) -> None:
        assert _shape(Opaque | None) == OptionalShape(inner=OpaqueNullable())

    def test_non_nullable_unsupported_is_reported(self) -> None:
        shape, errors = derive_shape(Opaque, location="pkg:R.f")
        assert isinstance(shape, Unsupported)
        assert errors == [UnsupportedTypeError(type="Opaque", location="pkg:R.f")]


# ###############
# Graphs
# ###############


class TestGraph:
    def test_scenario_record_fields(self) -> None:
        graph = derive_graph(Person)
        assert not graph.has_errors
        assert graph.record.field("age").shape == IntegerShape(width=32, range=Constraint(lower=0, upper=100))
        assert graph.record.field("tag").shape.size.fixed == 5

    def test_defaulted_field_is_not_derived(self) -> None:
        field = derive_graph(Household).record.field("nickname")
        assert field.has_default
        assert field.shape is None

    def test_nullable_field_flag(self) -> None:
        record = derive_graph(Household).record
        assert record.field("second_home").is_nullable
        assert not record.field("home").is_nullable

    def test_repeated_reference_registers_one_provider(self) -> None:
        graph = derive_graph(Household)
        assert graph.record.field("second_home").shape == OptionalShape(inner=Backed(provider_id=_tid(Address)))
        assert len([p for p in graph.providers if p == _tid(Address)]) == 1

    def test_self_reference_terminates(self) -> None:
        graph = derive_graph(Node, pooled_root=True)
        assert not graph.has_errors
        assert list(graph.providers) == [_tid(Node)]
        assert graph.record.field("next").shape == OptionalShape(inner=Backed(provider_id=_tid(Node)))

    def test_all_errors_are_collected(self) -> None:
        graph = derive_graph(Broken)
        location = _tid(Broken)
        assert graph.errors == [
            UnsupportedTypeError(type="Opaque", location=f"{location}.first"),
            UnsupportedTypeError(type="Any", location=f"{location}.second"),
            InvalidConstraintError(type="int", location=f"{location}.third", detail="empty range [5, 5)"),
        ]

    def test_types_are_recorded(self) -> None:
        graph = derive_graph(Household)
        assert graph.types[_tid(Address)] is Address
        assert graph.types[graph.root] is Household
