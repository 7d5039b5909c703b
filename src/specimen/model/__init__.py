# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model: shapes, records, providers and construction values."""

from specimen.model.records import ConstructionPlan, Field, PlanBinding, Provider, Record
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
    is_supported,
    walk_shapes,
)
from specimen.model.values import (
    ConstructValue,
    EnumValue,
    ExternalValue,
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
    SourceValue,
    StubValue,
    Value,
    WrapValue,
)

__all__ = [
    "Backed",
    "BooleanShape",
    "CharShape",
    "Constraint",
    "ConstructValue",
    "ConstructibleShape",
    "ConstructionPlan",
    "EnumShape",
    "EnumValue",
    "ExternalValue",
    "Field",
    "FieldValue",
    "FloatingShape",
    "FunctionShape",
    "IntegerShape",
    "ListShape",
    "ListValue",
    "LiteralValue",
    "MapEntry",
    "MapShape",
    "MapValue",
    "NoArgValue",
    "NullValue",
    "OpaqueNullable",
    "OptionalShape",
    "PairShape",
    "PairValue",
    "PlanBinding",
    "PoolValue",
    "Provider",
    "Record",
    "SetShape",
    "SetValue",
    "Shape",
    "SingletonShape",
    "SingletonValue",
    "SourceValue",
    "StubValue",
    "SumShape",
    "TextShape",
    "Unsupported",
    "Value",
    "WrapValue",
    "WrapperShape",
    "is_supported",
    "walk_shapes",
]
