# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the shape model, including a completeness check over every variant.

The completeness tests fail when a new shape variant is added without being
handled by synthesis and the JSON form used by plan artifacts.
"""

import random
import typing

import pytest
from pydantic import TypeAdapter

from specimen.engine.synthesis import Synthesizer
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
    Record,
    SetShape,
    Shape,
    SingletonShape,
    SumShape,
    TextShape,
    Unsupported,
    WrapperShape,
    is_supported,
    walk_shapes,
)
from specimen.model.records import Field

# ###############
# Samples
# ###############

_RANGE = Constraint(lower=0, upper=10)
_SIZE = Constraint(lower=1, upper=3)

SAMPLES: list[Shape] = [
    IntegerShape(range=_RANGE),
    FloatingShape(range=Constraint(lower=0.0, upper=1.0)),
    BooleanShape(),
    CharShape(),
    TextShape(size=Constraint(lower=0, upper=50, fixed=4)),
    OptionalShape(inner=BooleanShape()),
    WrapperShape(wrapper="awaitable", inner=CharShape()),
    ListShape(size=_SIZE, element=BooleanShape()),
    SetShape(size=_SIZE, element=IntegerShape(range=_RANGE)),
    MapShape(size=_SIZE, key=CharShape(), value=BooleanShape()),
    PairShape(left=BooleanShape(), right=CharShape()),
    FunctionShape(arity=1, returns_void=True),
    EnumShape(cases=["a", "b"]),
    SingletonShape(type_id="pkg:Origin", name="Origin"),
    SumShape(variants=[BooleanShape(), CharShape()]),
    Backed(provider_id="pkg:Address"),
    ConstructibleShape(type_id="pkg:Clock"),
    OpaqueNullable(),
    Unsupported(),
]

_VARIANTS = typing.get_args(typing.get_args(Shape)[0])


class _OnePerPool:
    def available(self, provider_id: str) -> int:
        return 1


# ###############
# Completeness
# ###############


def test_every_variant_has_a_sample() -> None:
    """Fail fast when a shape variant is added without a sample here."""
    assert {type(s) for s in SAMPLES} == set(_VARIANTS)


@pytest.mark.parametrize("shape", [s for s in SAMPLES if not isinstance(s, Unsupported)], ids=lambda s: s.kind)
def test_synthesis_handles_every_supported_variant(shape: Shape) -> None:
    synthesizer = Synthesizer(random.Random(0), pools=_OnePerPool())
    synthesizer.synthesize(shape)


def test_synthesis_rejects_unsupported() -> None:
    with pytest.raises(ValueError, match="unsupported"):
        Synthesizer(random.Random(0)).synthesize(Unsupported())


@pytest.mark.parametrize("shape", SAMPLES, ids=lambda s: s.kind)
def test_discriminated_json_form(shape: Shape) -> None:
    adapter = TypeAdapter(Shape)
    assert adapter.validate_json(adapter.dump_json(shape)) == shape


def test_kinds_are_unique() -> None:
    kinds = [s.kind for s in SAMPLES]
    assert len(kinds) == len(set(kinds))


# ###############
# Traversal
# ###############


class TestWalk:
    def test_walk_visits_nested_shapes_depth_first(self) -> None:
        shape = OptionalShape(inner=MapShape(size=_SIZE, key=CharShape(), value=Backed(provider_id="p")))
        assert [s.kind for s in walk_shapes(shape)] == ["optional", "map", "char", "backed"]

    def test_unsupported_anywhere_makes_shape_unsupported(self) -> None:
        assert is_supported(ListShape(size=_SIZE, element=BooleanShape()))
        assert not is_supported(PairShape(left=BooleanShape(), right=Unsupported()))

    def test_shapes_are_frozen(self) -> None:
        shape = BooleanShape()
        with pytest.raises(ValueError):
            shape.kind = "char"  # type: ignore[assignment]


# ###############
# Constraints and records
# ###############


class TestConstraint:
    @pytest.mark.parametrize(
        ("constraint", "expected"),
        [
            (Constraint(lower=0, upper=5), True),
            (Constraint(lower=1, upper=5), False),
            (Constraint(lower=5, upper=10, fixed=0), True),
            (Constraint(lower=0, upper=10, fixed=3), False),
        ],
    )
    def test_admits_zero(self, constraint: Constraint, expected: bool) -> None:
        assert constraint.admits_zero is expected


class TestRecord:
    def test_generated_fields_skip_defaults(self) -> None:
        record = Record(
            type_id="pkg:Person",
            fields=[
                Field(name="name", shape=BooleanShape()),
                Field(name="nickname", has_default=True),
            ],
        )
        assert [f.name for f in record.generated_fields] == ["name"]
        assert record.field("nickname").has_default
