# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of numeric range and size constraints from annotation metadata.

Every function here is pure. When a field carries no relevant marker the
caller-supplied defaults are returned unchanged; bounds are silently clamped
into the representable range of the field's numeric width.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable
from typing import Any, Literal

from specimen.markers.constraints import Range, Size
from specimen.model.shapes import Constraint

# ###############
# Public Interface
# ###############

INT32_BOUNDS = (-(2**31), 2**31 - 1)
INT64_BOUNDS = (-(2**63), 2**63 - 1)
FLOAT32_BOUNDS = (-3.4028234663852886e38, 3.4028234663852886e38)
FLOAT64_BOUNDS = (-sys.float_info.max, sys.float_info.max)

DEFAULT_INT32_RANGE = (0, 100)
DEFAULT_INT64_RANGE = (0, 100_000)
DEFAULT_FLOAT_RANGE = (0.0, 100.0)

DEFAULT_TEXT_LENGTH = 30
DEFAULT_TEXT_MIN_LENGTH = 0
DEFAULT_TEXT_MAX_LENGTH = 50

DEFAULT_COLLECTION_SIZE = 5
DEFAULT_COLLECTION_MIN_SIZE = 5
DEFAULT_COLLECTION_MAX_SIZE = 10

NumericKind = Literal["integer", "floating"]


def resolve(
    metadata: Iterable[Any],
    default_min: int | float,
    default_max: int | float,
    default_fixed: int | None = None,
    *,
    marker: type[Range] | type[Size] = Size,
    bounds: tuple[int | float, int | float] | None = None,
) -> Constraint:
    """Resolve a constraint from the first marker of type *marker* in *metadata*.

    Args:
        metadata: ``Annotated`` extras attached to the declared type.
        default_min: Lower bound used when the marker omits one, or when no marker is present.
        default_max: Upper bound used when the marker omits one, or when no marker is present.
        default_fixed: Exact value used only when no marker is present.
        marker: The marker class that applies to this kind of field.
        bounds: Representable range every resolved value is clamped into.

    Returns:
        The resolved :class:`Constraint`. A fixed value, when present, takes
        precedence over the bounds during synthesis.
    """
    found = next((m for m in metadata if isinstance(m, marker)), None)
    if found is None:
        lower, upper, fixed = default_min, default_max, default_fixed
    else:
        lower = default_min if found.min is None else found.min
        upper = default_max if found.max is None else found.max
        fixed = found.fixed

    if bounds is not None:
        lower = _clamp(lower, bounds)
        upper = _clamp(upper, bounds)
        if fixed is not None:
            fixed = _clamp(fixed, bounds)
    return Constraint(lower=lower, upper=upper, fixed=fixed)


def resolve_range(metadata: Iterable[Any], kind: NumericKind, width: Literal[32, 64]) -> Constraint:
    """Resolve the value range of an integer or floating-point field."""
    if kind == "integer":
        default = DEFAULT_INT32_RANGE if width == 32 else DEFAULT_INT64_RANGE
        bounds = INT32_BOUNDS if width == 32 else INT64_BOUNDS
        constraint = resolve(metadata, *default, marker=Range, bounds=bounds)
        # Integer range [ceil(lower), ceil(upper)) holds exactly the integers in [lower, upper).
        lower, upper = math.ceil(constraint.lower), math.ceil(constraint.upper)
        return constraint.model_copy(update={"lower": lower, "upper": upper})
    bounds = FLOAT32_BOUNDS if width == 32 else FLOAT64_BOUNDS
    constraint = resolve(metadata, *DEFAULT_FLOAT_RANGE, marker=Range, bounds=bounds)
    return constraint.model_copy(update={"lower": float(constraint.lower), "upper": float(constraint.upper)})


def resolve_text_size(metadata: Iterable[Any]) -> Constraint:
    """Resolve the length constraint of a text field."""
    return resolve(
        metadata,
        DEFAULT_TEXT_MIN_LENGTH,
        DEFAULT_TEXT_MAX_LENGTH,
        DEFAULT_TEXT_LENGTH,
        marker=Size,
        bounds=INT32_BOUNDS,
    )


def resolve_collection_size(metadata: Iterable[Any]) -> Constraint:
    """Resolve the element-count constraint of a list, set or map field."""
    return resolve(
        metadata,
        DEFAULT_COLLECTION_MIN_SIZE,
        DEFAULT_COLLECTION_MAX_SIZE,
        DEFAULT_COLLECTION_SIZE,
        marker=Size,
        bounds=INT32_BOUNDS,
    )


def constraint_problem(constraint: Constraint) -> str | None:
    """Return why no value can satisfy *constraint*, or None if one can."""
    if constraint.fixed is not None:
        return None
    if constraint.lower >= constraint.upper:
        return f"empty range [{constraint.lower}, {constraint.upper})"
    return None


# ################
# Implementation
# ################


def _clamp(value: int | float, bounds: tuple[int | float, int | float]) -> int | float:
    low, high = bounds
    return max(low, min(high, value))
