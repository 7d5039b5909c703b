# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Instance-set building: derive, materialize pools, then synthesize the root.

A build runs in four steps:

1. Derive the root record and every record reachable through generatable
   types, collecting all problems (:mod:`specimen.engine.derivation`).
2. Register one provider per distinct pooled type, each derived once.
3. Materialize every provider's pool once, in dependency order
   (:mod:`specimen.engine.registry`).
4. Synthesize the requested number of root instances, each drawing from the
   already-built pools.

Total synthesis work is bounded by the pool sizes of the reachable types
plus the requested count, however deeply the types reference each other.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any

from specimen.engine.derivation import ShapeGraph, derive_graph
from specimen.engine.errors import GenerationError
from specimen.engine.overrides import OverrideTable
from specimen.engine.registry import ProviderRegistry
from specimen.engine.synthesis import GenerationPolicy, Synthesizer
from specimen.introspect.query import TypeQuery
from specimen.markers.declarations import DEFAULT_LIST_COUNT, generatable_list_spec, generatable_spec
from specimen.model.records import ConstructionPlan, PlanBinding, Provider
from specimen.model.values import ListValue, PoolValue, SourceValue, Value
from specimen.validation.checks import validate

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass
class InstanceSet:
    """The result of one build.

    Attributes:
        root: Type id of the generated root type.
        values: The root instances, in order.
        providers: Every provider with its materialized pool, in dependency order.
        graph: The shape graph the values were synthesized from.
        external_values: Live values read from each ``@provides`` source, keyed by source id.
    """

    root: str
    values: list[Value]
    providers: list[Provider] = field(default_factory=list)
    graph: ShapeGraph | None = None
    external_values: dict[str, list[Any]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.values)

    def provider(self, provider_id: str) -> Provider:
        """Return the provider registered as *provider_id*.

        Raises:
            KeyError: If no such provider was materialized.
        """
        for provider in self.providers:
            if provider.provider_id == provider_id:
                return provider
        raise KeyError(provider_id)

    def plan(self) -> ConstructionPlan:
        """Return the construction plan renderers consume."""
        bindings = [
            PlanBinding(
                name=provider.provider_id,
                value=SourceValue(source_id=provider.source_id)
                if provider.external
                else ListValue(items=provider.pool),
            )
            for provider in self.providers
        ]
        return ConstructionPlan(type_id=self.root, pool=self.values, fields=bindings)


def build_instance_set(
    root: Any,
    count: int,
    *,
    overrides: OverrideTable | None = None,
    rng: random.Random | None = None,
    policy: GenerationPolicy | None = None,
    query: TypeQuery | None = None,
) -> InstanceSet:
    """Build *count* synthetic instances of the record type *root*.

    Args:
        root: The record type to generate.
        count: Number of root instances. Must be positive.
        overrides: User overrides, consulted before any built-in strategy.
        rng: Random generator. An unseeded one is created when omitted.
        policy: Synthesis policy.
        query: Type query implementation.

    Returns:
        The built :class:`InstanceSet`.

    Raises:
        ValueError: If *count* is not positive.
        GenerationError: If any type cannot be generated or a declaration is invalid.
            Every problem is reported.
        ProviderPoolEmptyError: If a provider has no instances to draw from.
    """
    if count < 1:
        raise ValueError(f"count must be a positive integer, got {count}")
    rng = rng or random.Random()

    graph = derive_graph(root, overrides=overrides, query=query)
    registry, providers = _materialize(graph, rng, policy)

    synthesizer = Synthesizer(rng, policy, pools=registry)
    values: list[Value] = [synthesizer.synthesize_record(graph.record) for _ in range(count)]
    logger.info("Built %d %s instance(s) using %d provider(s)", count, graph.root, len(providers))
    return InstanceSet(
        root=graph.root,
        values=values,
        providers=providers,
        graph=graph,
        external_values=registry.external_values,
    )


def build_list_instance_set(
    root: Any,
    count: int | None = None,
    *,
    overrides: OverrideTable | None = None,
    rng: random.Random | None = None,
    policy: GenerationPolicy | None = None,
    query: TypeQuery | None = None,
) -> InstanceSet:
    """Build *count* random sub-lists of the pool of the generatable type *root*.

    Each sub-list is a random selection of ``k`` distinct pool elements in
    random order, with ``k`` drawn uniformly from ``[0, pool size)``.

    Args:
        root: A ``@generatable`` record type.
        count: Number of sub-lists. Defaults to the ``@generatable_list``
            count, or 5 when the type is not so decorated.

    Raises:
        ValueError: If *root* is not generatable or *count* is not positive.
        GenerationError: If any type cannot be generated or a declaration is invalid.
        ProviderPoolEmptyError: If a provider has no instances to draw from.
    """
    if generatable_spec(root) is None:
        raise ValueError(f"'{getattr(root, '__qualname__', root)}' is not decorated with @generatable")
    if count is None:
        list_spec = generatable_list_spec(root)
        count = list_spec.count if list_spec is not None else DEFAULT_LIST_COUNT
    if count < 1:
        raise ValueError(f"count must be a positive integer, got {count}")
    rng = rng or random.Random()

    graph = derive_graph(root, overrides=overrides, query=query, pooled_root=True)
    registry, providers = _materialize(graph, rng, policy)

    pool_size = registry.available(graph.root)
    values: list[Value] = []
    for _ in range(count):
        indexes = rng.sample(range(pool_size), rng.randrange(pool_size))
        values.append(ListValue(items=[PoolValue(provider_id=graph.root, index=i) for i in indexes]))
    logger.info("Built %d sub-list(s) of %s", count, graph.root)
    return InstanceSet(
        root=graph.root,
        values=values,
        providers=providers,
        graph=graph,
        external_values=registry.external_values,
    )


# ################
# Implementation
# ################


def _materialize(
    graph: ShapeGraph,
    rng: random.Random,
    policy: GenerationPolicy | None,
) -> tuple[ProviderRegistry, list[Provider]]:
    if graph.has_errors:
        raise GenerationError(graph.errors)
    validation = validate(graph)
    if validation.has_errors:
        raise GenerationError(validation.errors)
    registry = ProviderRegistry(graph)
    return registry, registry.materialize(rng, policy)
