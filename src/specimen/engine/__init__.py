# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generation pipeline: constraint resolution, shape derivation, synthesis and pooling."""

from specimen.engine.artifact import ARTIFACT_SUFFIX, deserialize, read_artifact, serialize, write_artifact
from specimen.engine.build import InstanceSet, build_instance_set, build_list_instance_set
from specimen.engine.constraints import resolve, resolve_collection_size, resolve_range, resolve_text_size
from specimen.engine.derivation import ShapeGraph, derive_graph, derive_shape
from specimen.engine.errors import (
    Diagnostic,
    EmptyHierarchyError,
    GenerationError,
    InvalidConstraintError,
    InvalidVariantError,
    OverrideError,
    ProviderPoolEmptyError,
    RecursiveTypeError,
    UnsupportedTypeError,
)
from specimen.engine.materialize import materialize, materialize_pools
from specimen.engine.overrides import OverrideRef, OverrideTable, check_overrides, collect_overrides
from specimen.engine.registry import ProviderRegistry
from specimen.engine.render import RenderError, binding_name, render_module
from specimen.engine.synthesis import GenerationPolicy, Synthesizer, synthesize

__all__ = [
    "ARTIFACT_SUFFIX",
    "Diagnostic",
    "EmptyHierarchyError",
    "GenerationError",
    "GenerationPolicy",
    "InstanceSet",
    "InvalidConstraintError",
    "InvalidVariantError",
    "OverrideError",
    "OverrideRef",
    "OverrideTable",
    "ProviderPoolEmptyError",
    "ProviderRegistry",
    "RecursiveTypeError",
    "RenderError",
    "ShapeGraph",
    "Synthesizer",
    "UnsupportedTypeError",
    "binding_name",
    "build_instance_set",
    "build_list_instance_set",
    "check_overrides",
    "collect_overrides",
    "derive_graph",
    "derive_shape",
    "deserialize",
    "materialize",
    "materialize_pools",
    "read_artifact",
    "render_module",
    "resolve",
    "resolve_collection_size",
    "resolve_range",
    "resolve_text_size",
    "serialize",
    "synthesize",
    "write_artifact",
]
