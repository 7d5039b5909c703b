# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The closed set of shapes a declared type is classified into.

Every shape is finite in depth: references to pooled types are represented
by :class:`Backed` indirections into the provider registry, never inlined.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class Constraint(BaseModel):
    """A resolved numeric range or size constraint.

    Attributes:
        lower: Inclusive lower bound.
        upper: Exclusive upper bound.
        fixed: Exact value that overrides the bounds when set.
    """

    model_config = ConfigDict(frozen=True)

    lower: int | float
    upper: int | float
    fixed: int | None = None

    @property
    def admits_zero(self) -> bool:
        """Return True if a size drawn from this constraint can be zero."""
        if self.fixed is not None:
            return self.fixed <= 0
        return self.lower <= 0


class _ShapeBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class IntegerShape(_ShapeBase):
    """A signed integer drawn uniformly from ``[range.lower, range.upper)``."""

    kind: Literal["integer"] = "integer"
    width: Literal[32, 64] = 64
    range: Constraint


class FloatingShape(_ShapeBase):
    """A floating-point number drawn uniformly from ``[range.lower, range.upper)``."""

    kind: Literal["floating"] = "floating"
    width: Literal[32, 64] = 64
    range: Constraint


class BooleanShape(_ShapeBase):
    kind: Literal["boolean"] = "boolean"


class CharShape(_ShapeBase):
    kind: Literal["char"] = "char"


class TextShape(_ShapeBase):
    """A string assembled from whole words and truncated to the drawn length."""

    kind: Literal["text"] = "text"
    size: Constraint


class OptionalShape(_ShapeBase):
    """A nullable declared type. Carries the shape of the unwrapped type."""

    kind: Literal["optional"] = "optional"
    inner: Shape


class WrapperShape(_ShapeBase):
    """A single-argument holder: an awaitable cell or an async stream."""

    kind: Literal["wrapper"] = "wrapper"
    wrapper: Literal["awaitable", "stream"]
    inner: Shape


class ListShape(_ShapeBase):
    """An ordered homogeneous collection.

    Attributes:
        size: Element-count constraint.
        element: Shape of each element.
        container: Type id of the concrete collection to build, or None for ``list``.
    """

    kind: Literal["list"] = "list"
    size: Constraint
    element: Shape
    container: str | None = None


class SetShape(_ShapeBase):
    """A unique-element collection. Duplicate draws collapse when built."""

    kind: Literal["set"] = "set"
    size: Constraint
    element: Shape
    container: str | None = None


class MapShape(_ShapeBase):
    """A key-value collection. Colliding keys shrink the built mapping."""

    kind: Literal["map"] = "map"
    size: Constraint
    key: Shape
    value: Shape
    container: str | None = None


class PairShape(_ShapeBase):
    kind: Literal["pair"] = "pair"
    left: Shape
    right: Shape


class FunctionShape(_ShapeBase):
    """A callable, synthesized as a stub that ignores its arguments."""

    kind: Literal["function"] = "function"
    arity: int
    returns_void: bool
    variadic: bool = False


class EnumShape(_ShapeBase):
    """A closed finite choice.

    Attributes:
        type_id: The enum class, or None for a ``Literal`` choice.
        cases: Member names of the enum, or the literal values themselves.
    """

    kind: Literal["enum"] = "enum"
    type_id: str | None = None
    cases: list[bool | int | float | str]


class SingletonShape(_ShapeBase):
    kind: Literal["singleton"] = "singleton"
    type_id: str
    name: str


class SumShape(_ShapeBase):
    """A closed hierarchy or union; one variant is picked per draw."""

    kind: Literal["sum"] = "sum"
    type_id: str | None = None
    variants: list[Shape]


class Backed(_ShapeBase):
    """An indirection to the shared pool of a provider."""

    kind: Literal["backed"] = "backed"
    provider_id: str


class ConstructibleShape(_ShapeBase):
    """A type built by calling it without arguments."""

    kind: Literal["constructible"] = "constructible"
    type_id: str


class OpaqueNullable(_ShapeBase):
    """An unsupported nullable type; always resolves to None."""

    kind: Literal["opaque_nullable"] = "opaque_nullable"


class Unsupported(_ShapeBase):
    """Failure marker. Never part of a successfully derived graph."""

    kind: Literal["unsupported"] = "unsupported"


Shape = Annotated[
    IntegerShape
    | FloatingShape
    | BooleanShape
    | CharShape
    | TextShape
    | OptionalShape
    | WrapperShape
    | ListShape
    | SetShape
    | MapShape
    | PairShape
    | FunctionShape
    | EnumShape
    | SingletonShape
    | SumShape
    | Backed
    | ConstructibleShape
    | OpaqueNullable
    | Unsupported,
    _Field(discriminator="kind"),
]


def walk_shapes(shape: Shape) -> Iterator[Shape]:
    """Yield *shape* and every shape nested inside it, depth first.

    Backed indirections are yielded but not followed.
    """
    yield shape
    for child in _children(shape):
        yield from walk_shapes(child)


def is_supported(shape: Shape) -> bool:
    """Return True if no Unsupported marker appears anywhere in *shape*."""
    return not any(isinstance(node, Unsupported) for node in walk_shapes(shape))


# ################
# Implementation
# ################


def _children(shape: Shape) -> list[Shape]:
    if isinstance(shape, OptionalShape | WrapperShape):
        return [shape.inner]
    if isinstance(shape, ListShape | SetShape):
        return [shape.element]
    if isinstance(shape, MapShape):
        return [shape.key, shape.value]
    if isinstance(shape, PairShape):
        return [shape.left, shape.right]
    if isinstance(shape, SumShape):
        return list(shape.variants)
    return []


# Resolve forward references for shapes that nest other shapes.
OptionalShape.model_rebuild()
WrapperShape.model_rebuild()
ListShape.model_rebuild()
SetShape.model_rebuild()
MapShape.model_rebuild()
PairShape.model_rebuild()
SumShape.model_rebuild()
