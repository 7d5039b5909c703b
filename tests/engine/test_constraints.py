# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for range and size constraint resolution."""

import pytest

from specimen.engine.constraints import (
    FLOAT32_BOUNDS,
    INT32_BOUNDS,
    constraint_problem,
    resolve,
    resolve_collection_size,
    resolve_range,
    resolve_text_size,
)
from specimen.markers import Range, Size
from specimen.model import Constraint

# ###############
# resolve
# ###############


class TestResolve:
    def test_no_marker_returns_defaults(self) -> None:
        assert resolve([], 1, 9, 4) == Constraint(lower=1, upper=9, fixed=4)

    def test_marker_bounds_replace_defaults(self) -> None:
        assert resolve([Size(min=2, max=3)], 1, 9, 4) == Constraint(lower=2, upper=3)

    def test_missing_marker_bound_falls_back_to_default(self) -> None:
        assert resolve([Size(max=3)], 1, 9) == Constraint(lower=1, upper=3)

    def test_default_fixed_ignored_when_marker_present(self) -> None:
        assert resolve([Size(min=2)], 1, 9, 4).fixed is None

    def test_first_matching_marker_wins(self) -> None:
        assert resolve([Size(fixed=1), Size(fixed=2)], 0, 9).fixed == 1

    def test_other_marker_types_are_ignored(self) -> None:
        assert resolve(["doc", Range(5, 6)], 0, 9, marker=Size) == Constraint(lower=0, upper=9)

    def test_values_are_clamped_to_bounds(self) -> None:
        resolved = resolve([Range(-(2**40), 2**40)], 0, 1, marker=Range, bounds=INT32_BOUNDS)
        assert (resolved.lower, resolved.upper) == INT32_BOUNDS


# ###############
# Field kinds
# ###############


class TestFieldKinds:
    def test_int64_default(self) -> None:
        assert resolve_range([], "integer", 64) == Constraint(lower=0, upper=100_000)

    def test_int32_default(self) -> None:
        assert resolve_range([], "integer", 32) == Constraint(lower=0, upper=100)

    def test_float_default(self) -> None:
        constraint = resolve_range([], "floating", 64)
        assert (constraint.lower, constraint.upper) == (0.0, 100.0)
        assert isinstance(constraint.lower, float)

    def test_float32_clamped(self) -> None:
        constraint = resolve_range([Range(max=1e300)], "floating", 32)
        assert constraint.upper == FLOAT32_BOUNDS[1]

    def test_integer_range_marker(self) -> None:
        assert resolve_range([Range(18, 65)], "integer", 32) == Constraint(lower=18, upper=65)

    @pytest.mark.parametrize(
        ("marker", "expected"),
        [
            (Range(0.5, 3.5), Constraint(lower=1, upper=4)),
            (Range(-2.5, -0.5), Constraint(lower=-2, upper=0)),
            (Range(1.0, 3.0), Constraint(lower=1, upper=3)),
        ],
    )
    def test_fractional_integer_bounds_keep_only_integers_inside(self, marker: Range, expected: Constraint) -> None:
        constraint = resolve_range([marker], "integer", 64)
        assert constraint == expected
        assert isinstance(constraint.lower, int)
        assert isinstance(constraint.upper, int)

    def test_fractional_bounds_without_integer_inside_are_empty(self) -> None:
        constraint = resolve_range([Range(0.2, 0.8)], "integer", 32)
        assert constraint_problem(constraint) == "empty range [1, 1)"

    def test_text_default_is_fixed(self) -> None:
        assert resolve_text_size([]) == Constraint(lower=0, upper=50, fixed=30)

    def test_text_size_marker(self) -> None:
        assert resolve_text_size([Size(8)]).fixed == 8

    def test_collection_default_is_fixed(self) -> None:
        assert resolve_collection_size([]) == Constraint(lower=5, upper=10, fixed=5)


# ###############
# Problems
# ###############


class TestConstraintProblem:
    def test_valid_range(self) -> None:
        assert constraint_problem(Constraint(lower=0, upper=1)) is None

    @pytest.mark.parametrize(("lower", "upper"), [(5, 5), (6, 5)])
    def test_empty_range(self, lower: int, upper: int) -> None:
        assert constraint_problem(Constraint(lower=lower, upper=upper)) == f"empty range [{lower}, {upper})"

    def test_fixed_value_makes_bounds_irrelevant(self) -> None:
        assert constraint_problem(Constraint(lower=9, upper=1, fixed=3)) is None

    def test_negative_fixed_size_is_not_a_problem(self) -> None:
        assert constraint_problem(Constraint(lower=0, upper=1, fixed=-1)) is None
