# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declaration checks for derived shape graphs."""

from specimen.validation.checks import ValidationError, ValidationResult, ValidationWarning, validate

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate",
]
