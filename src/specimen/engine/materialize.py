# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Turn construction values into live Python objects."""

from __future__ import annotations

from typing import Any

from specimen.engine.build import InstanceSet
from specimen.model.values import (
    ConstructValue,
    EnumValue,
    ExternalValue,
    ListValue,
    LiteralValue,
    MapValue,
    NoArgValue,
    NullValue,
    PairValue,
    PoolValue,
    SetValue,
    SingletonValue,
    SourceValue,
    StubValue,
    Value,
    WrapValue,
)
from specimen.runtime import noop, ready, singleton_of, stream_of, unreachable

# ###############
# Public Interface
# ###############


def materialize(instance_set: InstanceSet) -> list[Any]:
    """Build the root instances of *instance_set* as live objects.

    Every provider pool is built once, so two root instances that picked the
    same pool element share the same object.
    """
    return _Materializer(instance_set).build()


def materialize_pools(instance_set: InstanceSet) -> dict[str, list[Any]]:
    """Build every provider pool of *instance_set*, keyed by provider id."""
    materializer = _Materializer(instance_set)
    materializer.build_pools()
    return materializer.pools


# ################
# Implementation
# ################


class _Materializer:
    def __init__(self, instance_set: InstanceSet) -> None:
        self._set = instance_set
        self._types = instance_set.graph.types if instance_set.graph is not None else {}
        self.pools: dict[str, list[Any]] = {}

    def build(self) -> list[Any]:
        self.build_pools()
        return [self._resolve(value) for value in self._set.values]

    def build_pools(self) -> None:
        for provider in self._set.providers:
            pool: list[Any] = []
            self.pools[provider.provider_id] = pool
            for value in provider.pool:
                pool.append(self._resolve(value))

    def _resolve(self, value: Value) -> Any:
        if isinstance(value, LiteralValue):
            return value.value
        if isinstance(value, NullValue):
            return None
        if isinstance(value, ListValue):
            items = [self._resolve(item) for item in value.items]
            return self._container(value.container, list)(items)
        if isinstance(value, SetValue):
            items = [self._resolve(item) for item in value.items]
            return self._container(value.container, set)(items)
        if isinstance(value, MapValue):
            entries = {self._resolve(entry.key): self._resolve(entry.value) for entry in value.entries}
            return self._container(value.container, dict)(entries)
        if isinstance(value, PairValue):
            return (self._resolve(value.left), self._resolve(value.right))
        if isinstance(value, WrapValue):
            inner = self._resolve(value.inner)
            return ready(inner) if value.wrapper == "awaitable" else stream_of(inner)
        if isinstance(value, StubValue):
            return noop if value.returns_void else unreachable
        if isinstance(value, EnumValue):
            if value.type_id is None:
                return value.case
            return getattr(self._types[value.type_id], str(value.case))
        if isinstance(value, SingletonValue):
            return singleton_of(self._types[value.type_id])
        if isinstance(value, PoolValue):
            return self.pools[value.provider_id][value.index]
        if isinstance(value, ExternalValue):
            return self._set.external_values[value.source_id][value.index]
        if isinstance(value, SourceValue):
            return list(self._set.external_values[value.source_id])
        if isinstance(value, NoArgValue):
            return self._types[value.type_id]()
        assert isinstance(value, ConstructValue)
        kwargs = {f.name: self._resolve(f.value) for f in value.fields}
        return self._types[value.type_id](**kwargs)

    def _container(self, container: str | None, default: type) -> Any:
        return default if container is None else self._types[container]
