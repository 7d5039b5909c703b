# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declaration checks over a derived shape graph.

These checks operate on a shape graph after derivation and flag
declarations that derive successfully but are likely mistakes, or that
would fail later when pools are built.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from specimen.markers.declarations import generatable_list_spec, generatable_spec, is_sealed
from specimen.model.records import Record
from specimen.model.shapes import ConstructibleShape, OpaqueNullable, walk_shapes

if TYPE_CHECKING:
    from specimen.engine.derivation import ShapeGraph

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ValidationWarning:
    """A declaration that generates, but probably not as intended.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A declaration that cannot be generated as written.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running declaration checks.

    Attributes:
        warnings: Non-fatal issues found during validation.
        errors: Fatal errors that indicate invalid declarations.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(graph: ShapeGraph) -> ValidationResult:
    """Run all declaration checks on a derived shape graph.

    Checks performed:

    1. **Always-None fields** (warning): a field whose type, or part of it,
       is nullable but otherwise unsupported always receives ``None``.

    2. **Default-constructed fields** (warning): a field whose type is only
       constructible without arguments always receives the same value.

    3. **Generatable declarations** (error): ``@generatable`` types must be
       concrete, non-generic, not ``@sealed``, and declare a positive pool size.

    4. **List declarations** (error): ``@generatable_list`` requires
       ``@generatable`` on the same class and a positive count.

    Args:
        graph: The derived shape graph to check.

    Returns:
        A :class:`ValidationResult` containing any warnings and errors found.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []

    for record in graph.records.values():
        warnings.extend(_check_field_shapes(record))

    checked: set[str] = set()
    for type_id in [graph.root, *graph.providers]:
        provider = graph.providers.get(type_id)
        if type_id in checked or (provider is not None and provider.external):
            continue
        checked.add(type_id)
        tp = graph.types.get(type_id)
        errors.extend(_check_generatable(tp, type_id, required=provider is not None))
        errors.extend(_check_generatable_list(tp, type_id))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################


def _label(type_id: str) -> str:
    return type_id.split(":", 1)[-1]


def _check_field_shapes(record: Record) -> list[ValidationWarning]:
    """Return warnings for fields that always receive the same value."""
    warnings: list[ValidationWarning] = []
    for f in record.generated_fields:
        nodes = list(walk_shapes(f.shape))
        location = f"{_label(record.type_id)}.{f.name}"
        if any(isinstance(node, OpaqueNullable) for node in nodes):
            warnings.append(
                ValidationWarning(message=f"Field '{location}' has an unsupported nullable type and is always None.")
            )
        for node in nodes:
            if isinstance(node, ConstructibleShape):
                warnings.append(
                    ValidationWarning(
                        message=(
                            f"Field '{location}' always receives a default-constructed "
                            f"'{_label(node.type_id)}' instance."
                        )
                    )
                )
    return warnings


def _check_generatable(tp: Any, type_id: str, required: bool) -> list[ValidationError]:
    spec = generatable_spec(tp)
    if spec is None:
        return []
    errors: list[ValidationError] = []
    label = _label(type_id)
    if inspect.isabstract(tp):
        errors.append(ValidationError(message=f"@generatable class '{label}' is abstract."))
    if getattr(tp, "__parameters__", ()):
        errors.append(ValidationError(message=f"@generatable class '{label}' is generic."))
    if is_sealed(tp):
        errors.append(
            ValidationError(message=f"@generatable class '{label}' is @sealed; decorate its subclasses instead.")
        )
    if required and spec.count < 1:
        errors.append(ValidationError(message=f"@generatable class '{label}' declares a pool size of {spec.count}."))
    return errors


def _check_generatable_list(tp: Any, type_id: str) -> list[ValidationError]:
    spec = generatable_list_spec(tp)
    if spec is None:
        return []
    errors: list[ValidationError] = []
    label = _label(type_id)
    if generatable_spec(tp) is None:
        errors.append(ValidationError(message=f"@generatable_list class '{label}' is not @generatable."))
    if spec.count < 1:
        errors.append(ValidationError(message=f"@generatable_list class '{label}' declares a count of {spec.count}."))
    return errors
