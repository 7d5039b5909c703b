# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Constraint metadata attached to field annotations via ``typing.Annotated``.

Example::

    @dataclass
    class Person:
        age: Annotated[Int32, Range(18, 65)]
        nickname: Annotated[str, Size(8)]
        tags: Annotated[list[str], Size(min=1, max=4)]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

# ###############
# Public Interface
# ###############

# A signed 32-bit integer. Plain ``int`` fields are treated as 64-bit.
Int32 = NewType("Int32", int)

# A single-precision float. Plain ``float`` fields are treated as 64-bit.
Float32 = NewType("Float32", float)

# A single lowercase character.
Char = NewType("Char", str)


@dataclass(frozen=True)
class Range:
    """Numeric bounds for an integer or floating-point field.

    The lower bound is inclusive and the upper bound exclusive. A bound left
    as ``None`` falls back to the default for the field's numeric kind.

    Attributes:
        min: Inclusive lower bound.
        max: Exclusive upper bound.
    """

    min: int | float | None = None
    max: int | float | None = None

    @property
    def fixed(self) -> None:
        """Numeric ranges never pin an exact value."""
        return None


@dataclass(frozen=True)
class Size:
    """Length bounds for a text field or element-count bounds for a collection.

    A ``fixed`` size takes precedence over ``min``/``max``. When only
    ``min``/``max`` are given the length is drawn uniformly from
    ``[min, max)``; an omitted bound falls back to the field kind's default.

    Attributes:
        fixed: Exact length or element count.
        min: Inclusive lower bound.
        max: Exclusive upper bound.
    """

    fixed: int | None = None
    min: int | None = None
    max: int | None = None


ConstraintMarker = Range | Size
