# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The user-override table: ``@provides`` sources keyed by the type they supply."""

from __future__ import annotations

import inspect
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from specimen.engine.errors import GenerationError, OverrideError
from specimen.markers.declarations import provided_type

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class OverrideRef:
    """A user source of values for one exact type.

    Attributes:
        target: The type whose values are supplied.
        source: The ``@provides`` class supplying them.
    """

    target: Any
    source: type


class OverrideTable:
    """Lookup from exact type identity to the user source overriding it."""

    def __init__(self, refs: Iterable[OverrideRef] = ()) -> None:
        self._by_target: dict[Any, OverrideRef] = {}
        for ref in refs:
            self._by_target[ref.target] = ref

    def lookup(self, tp: Any) -> OverrideRef | None:
        """Return the override for exactly *tp*, or None."""
        if not isinstance(tp, Hashable):
            return None
        return self._by_target.get(tp)

    def __iter__(self) -> Iterator[OverrideRef]:
        return iter(self._by_target.values())

    def __len__(self) -> int:
        return len(self._by_target)


def check_overrides(sources: Iterable[Any]) -> list[OverrideError]:
    """Check a collection of candidate ``@provides`` sources.

    Checks performed:
    - Every source is a class decorated with ``@provides``.
    - Every source is concrete and constructible without arguments.
    - Every source defines ``values``.
    - No two sources supply the same type.

    Returns:
        Every problem found. An empty list means the sources are valid.
    """
    errors: list[OverrideError] = []
    owners: dict[Any, str] = {}
    for source in sources:
        name = getattr(source, "__qualname__", repr(source))
        if not isinstance(source, type):
            errors.append(OverrideError(source=name, detail="a value source must be a class"))
            continue
        target = provided_type(source)
        if target is None:
            errors.append(OverrideError(source=name, detail="class is not decorated with @provides"))
            continue
        if inspect.isabstract(source):
            errors.append(OverrideError(source=name, detail="a value source must be a concrete class"))
        elif not _constructible_without_arguments(source):
            errors.append(OverrideError(source=name, detail="a value source must be constructible without arguments"))
        if not hasattr(source, "values"):
            errors.append(OverrideError(source=name, detail="a value source must define 'values'"))
        target_name = getattr(target, "__qualname__", repr(target))
        if target in owners:
            errors.append(
                OverrideError(
                    source=name,
                    detail=f"'{target_name}' already has a value source '{owners[target]}'",
                )
            )
        else:
            owners[target] = name
    return errors


def collect_overrides(sources: Iterable[Any]) -> OverrideTable:
    """Validate *sources* and build the override table from them.

    Raises:
        GenerationError: If any source is invalid. Every problem is reported.
    """
    sources = list(sources)
    errors = check_overrides(sources)
    if errors:
        raise GenerationError(errors)
    return OverrideTable(OverrideRef(target=provided_type(s), source=s) for s in sources)


# ################
# Implementation
# ################


def _constructible_without_arguments(cls: type) -> bool:
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in signature.parameters.values()
    )
