# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Synthesis of construction values from derived shapes.

Every random choice is drawn from an explicit :class:`random.Random`, so a
seeded generator reproduces the same values. Synthesis never derives shapes
and never builds pools: a :class:`~specimen.model.shapes.Backed` shape picks
an element of a pool that the registry has already materialized.
"""

from __future__ import annotations

import math
import random
import string
from dataclasses import dataclass
from typing import Protocol

from specimen.model.records import Record
from specimen.model.shapes import (
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
    Shape,
    SingletonShape,
    SumShape,
    TextShape,
    Unsupported,
    WrapperShape,
)
from specimen.model.values import (
    ConstructValue,
    EnumValue,
    FieldValue,
    ListValue,
    LiteralValue,
    MapEntry,
    MapValue,
    NoArgValue,
    NullValue,
    PairValue,
    PoolValue,
    SetValue,
    SingletonValue,
    StubValue,
    Value,
    WrapValue,
)

# ###############
# Public Interface
# ###############

DEFAULT_NULL_PROBABILITY = 0.25
MAX_GENERATED_TEXT_LENGTH = 600
MAX_GENERATED_COLLECTION_SIZE = 600

WORDS: tuple[str, ...] = tuple(
    (
        "Lorem ipsum dolor sit amet consectetur adipiscing elit Donec dui ante suscipit sed neque ut rhoncus "
        "condimentum nunc Phasellus malesuada congue magna non congue In commodo massa ac purus lobortis "
        "scelerisque Proin a sapien consequat bibendum sapien nec mollis turpis Cras est nisi accumsan et mattis "
        "eu tempus ac purus Proin ultricies metus et libero malesuada posuere Duis est metus bibendum sed "
        "ultrices quis luctus in ex Sed a lectus at metus iaculis euismod Praesent pretium hendrerit lacus a "
        "tincidunt mi aliquet malesuada Duis congue finibus nisi vel dapibus Nam imperdiet porttitor enim et "
        "lacinia"
    ).split()
)


@dataclass(frozen=True)
class GenerationPolicy:
    """Tunable probabilities and ceilings applied during synthesis.

    Attributes:
        null_probability: Chance that a nullable field is None, checked once per field per instance.
        max_text_length: Ceiling applied to ranged text lengths.
        max_collection_size: Ceiling applied to ranged collection sizes.
    """

    null_probability: float = DEFAULT_NULL_PROBABILITY
    max_text_length: int = MAX_GENERATED_TEXT_LENGTH
    max_collection_size: int = MAX_GENERATED_COLLECTION_SIZE

    def __post_init__(self) -> None:
        if not 0.0 <= self.null_probability <= 1.0:
            raise ValueError(f"null_probability must be within [0, 1], got {self.null_probability}")


class PoolView(Protocol):
    """Read access to pools that are materialized or being materialized."""

    def available(self, provider_id: str) -> int:
        """Return how many elements of the provider's pool can be picked now."""
        ...


class PendingPoolError(Exception):
    """Raised when a pick targets a provider with no materialized element yet.

    Optional fields, sums with other variants and collections that may be
    empty absorb this condition; the registry orders materialization so that
    it never escapes a required position.
    """

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Provider '{provider_id}' has no materialized element yet")


class Synthesizer:
    """Produces one construction value per call from a shape."""

    def __init__(
        self,
        rng: random.Random,
        policy: GenerationPolicy | None = None,
        pools: PoolView | None = None,
    ) -> None:
        self._rng = rng
        self._policy = policy or GenerationPolicy()
        self._pools = pools

    def synthesize_record(self, record: Record) -> ConstructValue:
        """Synthesize one instance of *record*. Defaulted fields are left out."""
        return ConstructValue(
            type_id=record.type_id,
            fields=[FieldValue(name=f.name, value=self.synthesize(f.shape)) for f in record.generated_fields],
        )

    def synthesize(self, shape: Shape) -> Value:
        """Synthesize one value of *shape*.

        Raises:
            PendingPoolError: If a required pick targets a pool with no element yet.
            ValueError: If *shape* is :class:`Unsupported`.
        """
        rng = self._rng
        if isinstance(shape, IntegerShape):
            return LiteralValue(value=rng.randrange(int(shape.range.lower), int(shape.range.upper)))
        if isinstance(shape, FloatingShape):
            return LiteralValue(value=_uniform(shape.range.lower, shape.range.upper, rng))
        if isinstance(shape, BooleanShape):
            return LiteralValue(value=rng.random() < 0.5)
        if isinstance(shape, CharShape):
            return LiteralValue(value=rng.choice(string.ascii_lowercase))
        if isinstance(shape, TextShape):
            return LiteralValue(value=self.text(self._count(shape.size, self._policy.max_text_length)))
        if isinstance(shape, OptionalShape):
            return self._optional(shape)
        if isinstance(shape, WrapperShape):
            return WrapValue(wrapper=shape.wrapper, inner=self.synthesize(shape.inner))
        if isinstance(shape, ListShape | SetShape):
            return self._sequence(shape)
        if isinstance(shape, MapShape):
            return self._map(shape)
        if isinstance(shape, PairShape):
            return PairValue(left=self.synthesize(shape.left), right=self.synthesize(shape.right))
        if isinstance(shape, FunctionShape):
            return StubValue(arity=shape.arity, returns_void=shape.returns_void)
        if isinstance(shape, EnumShape):
            return EnumValue(type_id=shape.type_id, case=rng.choice(shape.cases))
        if isinstance(shape, SumShape):
            return self._sum(shape)
        if isinstance(shape, SingletonShape):
            return SingletonValue(type_id=shape.type_id)
        if isinstance(shape, Backed):
            return self._pick(shape.provider_id)
        if isinstance(shape, ConstructibleShape):
            return NoArgValue(type_id=shape.type_id)
        if isinstance(shape, OpaqueNullable):
            return NullValue()
        assert isinstance(shape, Unsupported)
        raise ValueError("cannot synthesize a value for an unsupported shape")

    def text(self, length: int) -> str:
        """Assemble text of exactly *length* characters from whole corpus words.

        The first word is capitalized and words are separated by single spaces.
        """
        if length <= 0:
            return ""
        words = [self._rng.choice(WORDS).capitalize()]
        total = len(words[0])
        while total < length:
            word = self._rng.choice(WORDS)
            words.append(word)
            total += len(word) + 1
        return " ".join(words)[:length]

    def _count(self, size: Constraint, ceiling: int) -> int:
        """Resolve a length or element count: the fixed value, else a draw from the range."""
        if size.fixed is not None:
            return max(size.fixed, 0)
        lower = max(int(size.lower), 0)
        upper = int(size.upper)
        if upper <= lower:
            return min(lower, ceiling)
        return min(self._rng.randrange(lower, upper), ceiling)

    def _optional(self, shape: OptionalShape) -> Value:
        if self._rng.random() < self._policy.null_probability:
            return NullValue()
        try:
            return self.synthesize(shape.inner)
        except PendingPoolError:
            return NullValue()

    def _sequence(self, shape: ListShape | SetShape) -> Value:
        count = self._count(shape.size, self._policy.max_collection_size)
        try:
            items = [self.synthesize(shape.element) for _ in range(count)]
        except PendingPoolError:
            if not shape.size.admits_zero:
                raise
            items = []
        if isinstance(shape, SetShape):
            return SetValue(items=items, container=shape.container)
        return ListValue(items=items, container=shape.container)

    def _map(self, shape: MapShape) -> Value:
        count = self._count(shape.size, self._policy.max_collection_size)
        try:
            entries = [
                MapEntry(key=self.synthesize(shape.key), value=self.synthesize(shape.value)) for _ in range(count)
            ]
        except PendingPoolError:
            if not shape.size.admits_zero:
                raise
            entries = []
        return MapValue(entries=entries, container=shape.container)

    def _sum(self, shape: SumShape) -> Value:
        """Pick a variant uniformly, falling back to the others while pools are pending."""
        remaining = list(shape.variants)
        while True:
            variant = remaining.pop(self._rng.randrange(len(remaining)))
            try:
                return self.synthesize(variant)
            except PendingPoolError:
                if not remaining:
                    raise

    def _pick(self, provider_id: str) -> PoolValue:
        available = self._pools.available(provider_id) if self._pools is not None else 0
        if available <= 0:
            raise PendingPoolError(provider_id)
        return PoolValue(provider_id=provider_id, index=self._rng.randrange(available))


def synthesize(shape: Shape, rng: random.Random, policy: GenerationPolicy | None = None) -> Value:
    """Synthesize one value of *shape* outside of any instance-set build.

    Shapes containing :class:`~specimen.model.shapes.Backed` references need
    materialized pools; use :func:`specimen.engine.build.build_instance_set` for those.
    """
    return Synthesizer(rng, policy).synthesize(shape)


# ################
# Implementation
# ################


def _uniform(lower: float, upper: float, rng: random.Random) -> float:
    """Draw a finite float from ``[lower, upper)``.

    ``upper - lower`` overflows to infinity for ranges wider than the largest
    float, so those draws interpolate between the bounds instead.
    """
    u = rng.random()
    value = lower + (upper - lower) * u
    if not math.isfinite(value):
        value = lower * (1.0 - u) + upper * u
    return min(max(value, lower), math.nextafter(upper, lower))
