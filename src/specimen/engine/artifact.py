# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of construction plans.

Plans are stored as compact JSON files for portability and tooling that
renders them outside of Python. The format is versioned so future schema
changes can be detected.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from specimen.model.records import ConstructionPlan

# ###############
# Public Interface
# ###############

ARTIFACT_FORMAT_VERSION = "1"
ARTIFACT_SUFFIX = ".plan.json"


def serialize(plan: ConstructionPlan) -> str:
    """Serialize a ConstructionPlan to a compact JSON string."""
    return json.dumps({"v": ARTIFACT_FORMAT_VERSION, **plan.model_dump(mode="json")}, separators=(",", ":"))


def deserialize(data: str) -> ConstructionPlan:
    """Deserialize a ConstructionPlan from a JSON string.

    Args:
        data: JSON string produced by :func:`serialize`.

    Returns:
        The reconstructed :class:`ConstructionPlan`.

    Raises:
        ValueError: If the artifact format version is not recognised or the
            content does not describe a plan.
    """
    obj = json.loads(data)
    version = obj.pop("v", None) if isinstance(obj, dict) else None
    if version != ARTIFACT_FORMAT_VERSION:
        raise ValueError(f"Unsupported artifact format version: {version!r}")
    try:
        return ConstructionPlan.model_validate(obj)
    except ValidationError as exc:
        raise ValueError(f"Malformed construction plan: {exc}") from exc


def write_artifact(plan: ConstructionPlan, path: Path) -> None:
    """Write a plan to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(plan), encoding="utf-8")


def read_artifact(path: Path) -> ConstructionPlan:
    """Read and deserialize a plan from *path*."""
    return deserialize(path.read_text(encoding="utf-8"))
