# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarations users attach to their types to steer generation."""

from specimen.markers.constraints import Char, ConstraintMarker, Float32, Int32, Range, Size
from specimen.markers.declarations import (
    DEFAULT_LIST_COUNT,
    DEFAULT_POOL_SIZE,
    GeneratableListSpec,
    GeneratableSpec,
    generatable,
    generatable_list,
    generatable_list_spec,
    generatable_spec,
    is_sealed,
    is_singleton,
    provided_type,
    provides,
    sealed,
    singleton,
    singleton_instance,
)

__all__ = [
    "Char",
    "ConstraintMarker",
    "DEFAULT_LIST_COUNT",
    "DEFAULT_POOL_SIZE",
    "Float32",
    "GeneratableListSpec",
    "GeneratableSpec",
    "Int32",
    "Range",
    "Size",
    "generatable",
    "generatable_list",
    "generatable_list_spec",
    "generatable_spec",
    "is_sealed",
    "is_singleton",
    "provided_type",
    "provides",
    "sealed",
    "singleton",
    "singleton_instance",
]
