# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of ``module:Qualname`` references to Python objects."""

from __future__ import annotations

import importlib
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

# ###############
# Public Interface
# ###############


class TypeReferenceError(Exception):
    """Raised when a ``module:Qualname`` reference cannot be resolved."""


def resolve_reference(reference: str) -> Any:
    """Import the module named in *reference* and look up the qualified name.

    Args:
        reference: A reference such as ``"myapp.models:Person"`` or
            ``"myapp.models:Outer.Inner"``.

    Returns:
        The referenced object.

    Raises:
        TypeReferenceError: If the reference is malformed, the module cannot
            be imported, or the name does not exist.
    """
    module_name, sep, qualname = reference.partition(":")
    if not sep or not module_name or not qualname:
        raise TypeReferenceError(f"Invalid reference '{reference}': expected 'module:Qualname'")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise TypeReferenceError(f"Cannot import module '{module_name}' for '{reference}': {exc}") from exc
    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise TypeReferenceError(f"Module '{module_name}' has no attribute '{qualname}'") from None
    return target


@contextmanager
def importable_from(directory: Path) -> Iterator[None]:
    """Make modules under *directory* importable for the duration of the block."""
    entry = str(directory)
    added = entry not in sys.path
    if added:
        sys.path.insert(0, entry)
    try:
        yield
    finally:
        if added and entry in sys.path:
            sys.path.remove(entry)
