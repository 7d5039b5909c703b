# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the backing-provider registry and pool materialization order."""

import random
from dataclasses import dataclass
from typing import Annotated, Any

import pytest

from specimen.engine.derivation import derive_graph
from specimen.engine.errors import GenerationError, ProviderPoolEmptyError, RecursiveTypeError
from specimen.engine.overrides import OverrideRef, OverrideTable
from specimen.engine.registry import ProviderRegistry, _detect_cycle
from specimen.introspect import RuntimeTypeQuery
from specimen.markers import Size, generatable, provides
from specimen.model import ExternalValue, ListValue, NullValue, PoolValue

# ###############
# Test Types
# ###############


@generatable(count=3)
@dataclass
class Loop:
    next: "Loop"


@generatable
@dataclass
class Left:
    right: "Right"


@generatable
@dataclass
class Right:
    left: Left


@generatable
@dataclass
class Parent:
    child: "Child"


@generatable
@dataclass
class Child:
    parent: Parent | None


@generatable(count=6)
@dataclass
class Tree:
    children: "Annotated[list[Tree], Size(min=0, max=3)]"


@generatable(count=0)
@dataclass
class Hollow:
    value: int


@dataclass
class Color:
    name: str


@provides(Color)
class ColorSource:
    values = [Color("red"), Color("blue")]


@dataclass
class Palette:
    primary: Color
    secondary: Color


# ###############
# Helpers
# ###############

_query = RuntimeTypeQuery()


def _tid(tp: Any) -> str:
    return _query.type_id(tp)


def _materialize(root: Any, overrides: OverrideTable | None = None, **kwargs: Any) -> list:
    graph = derive_graph(root, overrides=overrides, pooled_root=True)
    assert not graph.has_errors
    return ProviderRegistry(graph, **kwargs).materialize(random.Random(3))


# ###############
# Ordering
# ###############


class TestOrdering:
    def test_required_dependency_is_built_first(self) -> None:
        providers = _materialize(Parent)
        assert [p.provider_id for p in providers] == [_tid(Child), _tid(Parent)]

    def test_optional_back_reference_is_null_while_pending(self) -> None:
        providers = _materialize(Parent)
        child_pool = providers[0].pool
        assert all(value.field("parent") == NullValue() for value in child_pool)

    def test_parent_draws_from_built_child_pool(self) -> None:
        parent = _materialize(Parent)[1]
        for value in parent.pool:
            reference = value.field("child")
            assert isinstance(reference, PoolValue)
            assert reference.provider_id == _tid(Child)
            assert 0 <= reference.index < 5

    def test_pool_sizes_match_declarations(self) -> None:
        tree = _materialize(Tree)[0]
        assert tree.pool_size == 6
        assert len(tree.pool) == 6


class TestSelfReference:
    def test_elements_only_reference_earlier_elements(self) -> None:
        tree = _materialize(Tree)[0]
        assert tree.pool[0].field("children") == ListValue(items=[])
        for position, value in enumerate(tree.pool):
            for reference in value.field("children").items:
                assert reference.provider_id == _tid(Tree)
                assert reference.index < position


# ###############
# Failures
# ###############


class TestFailures:
    def test_required_self_reference(self) -> None:
        graph = derive_graph(Loop, pooled_root=True)
        with pytest.raises(GenerationError) as exc_info:
            ProviderRegistry(graph).materialize(random.Random(0))
        assert exc_info.value.diagnostics == [RecursiveTypeError(type=_tid(Loop), cycle=(_tid(Loop), _tid(Loop)))]

    def test_required_mutual_reference_reports_each_type(self) -> None:
        graph = derive_graph(Left, pooled_root=True)
        with pytest.raises(GenerationError) as exc_info:
            ProviderRegistry(graph).materialize(random.Random(0))
        left, right = _tid(Left), _tid(Right)
        assert exc_info.value.diagnostics == [
            RecursiveTypeError(type=right, cycle=(right, left, right)),
            RecursiveTypeError(type=left, cycle=(left, right, left)),
        ]
        assert "cycle" in str(exc_info.value)

    def test_zero_pool_size(self) -> None:
        graph = derive_graph(Hollow, pooled_root=True)
        with pytest.raises(ProviderPoolEmptyError) as exc_info:
            ProviderRegistry(graph).materialize(random.Random(0))
        assert exc_info.value.provider_id == _tid(Hollow)


# ###############
# External providers
# ###############


class TestExternalProviders:
    def _overrides(self) -> OverrideTable:
        return OverrideTable([OverrideRef(target=Color, source=ColorSource)])

    def test_external_pool_indexes_source_values(self) -> None:
        graph = derive_graph(Palette, overrides=self._overrides())
        registry = ProviderRegistry(graph)
        (provider,) = registry.materialize(random.Random(0))
        assert provider.external
        assert provider.pool_size == 2
        assert provider.pool == [
            ExternalValue(source_id=_tid(ColorSource), index=0),
            ExternalValue(source_id=_tid(ColorSource), index=1),
        ]
        assert registry.external_values[_tid(ColorSource)] == [Color("red"), Color("blue")]

    def test_source_reader_is_used(self) -> None:
        graph = derive_graph(Palette, overrides=self._overrides())
        registry = ProviderRegistry(graph, source_reader=lambda source: [Color("green")])
        (provider,) = registry.materialize(random.Random(0))
        assert provider.pool_size == 1

    def test_empty_source(self) -> None:
        graph = derive_graph(Palette, overrides=self._overrides())
        registry = ProviderRegistry(graph, source_reader=lambda source: [])
        with pytest.raises(ProviderPoolEmptyError):
            registry.materialize(random.Random(0))


# ###############
# Cycle detection
# ###############


class TestDetectCycle:
    def test_acyclic(self) -> None:
        assert _detect_cycle({"a": ["b"], "b": []}) is None

    def test_self_loop(self) -> None:
        assert _detect_cycle({"a": ["a"]}) == ["a", "a"]

    def test_cycle_path(self) -> None:
        assert _detect_cycle({"a": ["b"], "b": ["c"], "c": ["b"]}) == ["b", "c", "b"]
