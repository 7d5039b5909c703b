# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The backing-provider registry: one shared pool per pooled type.

Pools are materialized once, in dependency order. A provider is ready to be
materialized when every reference it *requires* points at a provider whose
pool already has elements. A reference is not required when it sits under an
optional, inside a collection that may be empty, or in a sum with another
ready variant. Self-references of a provider under construction draw from
the elements built so far.

A provider that can never become ready needs an instance of itself in every
instance; it is reported as a :class:`RecursiveTypeError`.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Any

from specimen.engine.derivation import ShapeGraph
from specimen.engine.errors import GenerationError, ProviderPoolEmptyError, RecursiveTypeError
from specimen.engine.synthesis import GenerationPolicy, Synthesizer
from specimen.model.records import Provider, Record
from specimen.model.shapes import (
    Backed,
    ListShape,
    MapShape,
    OptionalShape,
    PairShape,
    SetShape,
    Shape,
    SumShape,
    WrapperShape,
    walk_shapes,
)
from specimen.model.values import ExternalValue, Value
from specimen.runtime import values_of

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ProviderRegistry:
    """Holds the providers of one shape graph and materializes their pools.

    Args:
        graph: A shape graph derived without errors.
        source_reader: Reads the values of a ``@provides`` source class.
            Defaults to :func:`specimen.runtime.values_of`.
    """

    def __init__(self, graph: ShapeGraph, source_reader: Callable[[type], list[Any]] | None = None) -> None:
        self._graph = graph
        self._read_source = source_reader or values_of
        self._pools: dict[str, list[Value]] = {}
        self._external: dict[str, list[Any]] = {}
        self._order: list[str] = []

    def available(self, provider_id: str) -> int:
        """Return how many elements of *provider_id*'s pool exist so far."""
        return len(self._pools.get(provider_id, ()))

    @property
    def external_values(self) -> dict[str, list[Any]]:
        """Live values read from each ``@provides`` source, keyed by source id."""
        return self._external

    def materialize(self, rng: random.Random, policy: GenerationPolicy | None = None) -> list[Provider]:
        """Build every pool once, in dependency order.

        Args:
            rng: Random generator shared by every pool.
            policy: Synthesis policy.

        Returns:
            The providers with their pools, in materialization order.

        Raises:
            ProviderPoolEmptyError: If a provider declares or yields no instances.
            GenerationError: If some providers require instances of themselves.
        """
        providers = self._graph.providers
        synthesizer = Synthesizer(rng, policy, pools=self)

        for provider in providers.values():
            if provider.external:
                self._materialize_external(provider)

        pending = [pid for pid, provider in providers.items() if not provider.external]
        while pending:
            ready = [pid for pid in pending if self._is_ready(pid)]
            if not ready:
                break
            # Prefer a provider whose every reference, required or not, is already built.
            provider_id = next((pid for pid in ready if self._all_built(pid)), ready[0])
            self._materialize_record_pool(providers[provider_id], synthesizer)
            pending.remove(provider_id)

        if pending:
            raise GenerationError([self._recursion_error(pid, set(pending)) for pid in pending])

        return [
            providers[pid].model_copy(update={"pool": self._pools[pid], "pool_size": len(self._pools[pid])})
            for pid in self._order
        ]

    def _materialize_external(self, provider: Provider) -> None:
        source = self._graph.types[provider.source_id]
        values = self._read_source(source)
        if not values:
            raise ProviderPoolEmptyError(provider.provider_id)
        self._external[provider.source_id] = values
        self._pools[provider.provider_id] = [
            ExternalValue(source_id=provider.source_id, index=index) for index in range(len(values))
        ]
        self._order.append(provider.provider_id)
        logger.info("Read %d value(s) for %s from %s", len(values), provider.type_id, provider.source_id)

    def _materialize_record_pool(self, provider: Provider, synthesizer: Synthesizer) -> None:
        if provider.pool_size <= 0:
            raise ProviderPoolEmptyError(provider.provider_id)
        record = self._graph.records[provider.type_id]
        pool: list[Value] = []
        self._pools[provider.provider_id] = pool
        for _ in range(provider.pool_size):
            pool.append(synthesizer.synthesize_record(record))
        self._order.append(provider.provider_id)
        logger.info("Materialized pool of %d %s instance(s)", len(pool), provider.type_id)

    def _record(self, provider_id: str) -> Record:
        return self._graph.records[self._graph.providers[provider_id].type_id]

    def _is_ready(self, provider_id: str) -> bool:
        built = {pid for pid in self._pools if self.available(pid) > 0}
        return all(_satisfiable(f.shape, built) for f in self._record(provider_id).generated_fields)

    def _all_built(self, provider_id: str) -> bool:
        references = _references(self._record(provider_id))
        return all(ref == provider_id or self.available(ref) > 0 for ref in references)

    def _recursion_error(self, provider_id: str, unresolved: set[str]) -> RecursiveTypeError:
        graph: dict[str, list[str]] = {
            pid: sorted(ref for ref in _required_references(self._record(pid)) if ref in unresolved)
            for pid in unresolved
        }
        cycle = _detect_cycle({provider_id: graph[provider_id], **graph})
        return RecursiveTypeError(type=provider_id, cycle=tuple(cycle) if cycle else ())


# ################
# Implementation
# ################


def _satisfiable(shape: Shape | None, built: set[str]) -> bool:
    """Return True if *shape* can be synthesized using only pools in *built*."""
    if shape is None or isinstance(shape, OptionalShape):
        return True
    if isinstance(shape, Backed):
        return shape.provider_id in built
    if isinstance(shape, WrapperShape):
        return _satisfiable(shape.inner, built)
    if isinstance(shape, ListShape | SetShape):
        return shape.size.admits_zero or _satisfiable(shape.element, built)
    if isinstance(shape, MapShape):
        return shape.size.admits_zero or (_satisfiable(shape.key, built) and _satisfiable(shape.value, built))
    if isinstance(shape, PairShape):
        return _satisfiable(shape.left, built) and _satisfiable(shape.right, built)
    if isinstance(shape, SumShape):
        return any(_satisfiable(variant, built) for variant in shape.variants)
    return True


def _required_shape_references(shape: Shape) -> list[str]:
    """Providers *shape* may need, ignoring positions that never need one."""
    if isinstance(shape, OptionalShape):
        return []
    if isinstance(shape, Backed):
        return [shape.provider_id]
    if isinstance(shape, WrapperShape):
        return _required_shape_references(shape.inner)
    if isinstance(shape, ListShape | SetShape):
        return [] if shape.size.admits_zero else _required_shape_references(shape.element)
    if isinstance(shape, MapShape):
        if shape.size.admits_zero:
            return []
        return _required_shape_references(shape.key) + _required_shape_references(shape.value)
    if isinstance(shape, PairShape):
        return _required_shape_references(shape.left) + _required_shape_references(shape.right)
    if isinstance(shape, SumShape):
        return [ref for variant in shape.variants for ref in _required_shape_references(variant)]
    return []


def _required_references(record: Record) -> set[str]:
    return {ref for f in record.generated_fields for ref in _required_shape_references(f.shape)}


def _references(record: Record) -> set[str]:
    return {
        node.provider_id
        for f in record.generated_fields
        for node in walk_shapes(f.shape)
        if isinstance(node, Backed)
    }


def _detect_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Detect a cycle in a directed graph using DFS.

    Uses a three-colour marking scheme (white/grey/black) to distinguish
    unvisited, in-progress, and fully-explored nodes.

    Args:
        graph: Adjacency list mapping each node to its direct neighbours.
            Nodes are explored in key order.

    Returns:
        The nodes forming the first cycle found, with the start node repeated
        at the end (e.g. ``["A", "B", "A"]``), or ``None`` if the graph is acyclic.
    """
    white, grey, black = 0, 1, 2
    color: dict[str, int] = {}
    path: list[str] = []

    def _dfs(node: str) -> list[str] | None:
        color[node] = grey
        path.append(node)
        for neighbor in graph.get(node, []):
            state = color.get(neighbor, white)
            if state == grey:
                return path[path.index(neighbor) :] + [neighbor]
            if state == white:
                result = _dfs(neighbor)
                if result is not None:
                    return result
        path.pop()
        color[node] = black
        return None

    for node in graph:
        if color.get(node, white) == white:
            result = _dfs(node)
            if result is not None:
                return result
    return None
