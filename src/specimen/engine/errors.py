# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Diagnostics and exceptions raised while deriving shapes and building instances.

Diagnostics describe user-correctable problems. They are collected over a
whole run and reported together. Exceptions abort a run.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from specimen.validation.checks import ValidationError

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class UnsupportedTypeError:
    """A non-nullable field whose type matches no generation strategy.

    Attributes:
        type: Readable name of the offending type.
        location: The field, as ``module:Record.field`` plus any nested position.
    """

    type: str
    location: str

    @property
    def message(self) -> str:
        return f"Unsupported type '{self.type}' at '{self.location}'."


@dataclass(frozen=True)
class EmptyHierarchyError:
    """A closed hierarchy or enum with no concrete cases."""

    type: str

    @property
    def message(self) -> str:
        return f"Closed type '{self.type}' has no concrete cases to generate."


@dataclass(frozen=True)
class InvalidVariantError:
    """One variant of a closed hierarchy or union cannot be generated."""

    type: str
    variant: str

    @property
    def message(self) -> str:
        return f"Variant '{self.variant}' of '{self.type}' cannot be generated."


@dataclass(frozen=True)
class InvalidConstraintError:
    """A range or size constraint that no value can satisfy."""

    type: str
    location: str
    detail: str

    @property
    def message(self) -> str:
        return f"Invalid constraint on '{self.type}' at '{self.location}': {self.detail}."


@dataclass(frozen=True)
class RecursiveTypeError:
    """A provider whose every instance needs an instance of itself.

    Attributes:
        type: The provider that can never be built.
        cycle: The chain of required references, ending where it started.
    """

    type: str
    cycle: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        if not self.cycle:
            return f"Type '{self.type}' cannot be built: it requires values that can never be built."
        return f"Type '{self.type}' cannot be built: required references form a cycle {' -> '.join(self.cycle)}."


@dataclass(frozen=True)
class OverrideError:
    """An invalid ``@provides`` source."""

    source: str
    detail: str

    @property
    def message(self) -> str:
        return f"Invalid value source '{self.source}': {self.detail}."


Diagnostic = (
    UnsupportedTypeError
    | EmptyHierarchyError
    | InvalidVariantError
    | InvalidConstraintError
    | RecursiveTypeError
    | OverrideError
)


class GenerationError(Exception):
    """Raised when a run cannot produce instances.

    Attributes:
        diagnostics: Every problem found, in discovery order. Builds also
            report declaration errors found by :func:`specimen.validation.validate`.
    """

    def __init__(self, diagnostics: Sequence[Diagnostic | ValidationError]) -> None:
        self.diagnostics = list(diagnostics)
        lines = [d.message for d in self.diagnostics]
        super().__init__("\n".join(lines) if lines else "Generation failed.")


class ProviderPoolEmptyError(Exception):
    """Raised when a provider has no instances to draw from."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Provider '{provider_id}' has an empty pool.")
