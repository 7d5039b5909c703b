# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the Specimen workspace configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".specimen.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


@dataclass
class TargetConfig:
    """One type to generate fixtures for.

    Attributes:
        type: Reference to the record type, as ``module:Qualname``.
        count: Number of instances. None defers to the type's declared pool size.
        list_count: Number of random sub-lists to generate as well, if any.
    """

    type: str
    count: int | None = None
    list_count: int | None = None


@dataclass
class WorkspaceConfig:
    """The parsed configuration for a Specimen workspace.

    Attributes:
        output_directory: Relative path (from the workspace root) for generated fixtures.
        seed: Seed for the random generator. None draws fresh values on every run.
        null_probability: Chance that a nullable field is None.
        targets: Types to generate, in order.
        overrides: References to ``@provides`` source classes, as ``module:Qualname``.
    """

    output_directory: str
    seed: int | None = None
    null_probability: float | None = None
    targets: list[TargetConfig] = field(default_factory=list)
    overrides: list[str] = field(default_factory=list)


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and parse a Specimen workspace configuration file.

    Args:
        path: Path to the ``.specimen.yaml`` file.

    Returns:
        A WorkspaceConfig instance populated from the file.

    Raises:
        WorkspaceConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file: {exc}") from exc

    return parse_workspace_config(text, source_label=str(path))


def parse_workspace_config(text: str, source_label: str = "<string>") -> WorkspaceConfig:
    """Parse workspace config YAML text into a WorkspaceConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Returns:
        A WorkspaceConfig instance.

    Raises:
        WorkspaceConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: workspace config must be a YAML mapping")

    output_directory = _require_string(data, "output-directory", source_label)
    seed = _optional_int(data, "seed", source_label)

    null_probability = None
    if "null-probability" in data:
        value = data["null-probability"]
        if isinstance(value, bool) or not isinstance(value, int | float) or not 0.0 <= value <= 1.0:
            raise WorkspaceConfigError(f"{source_label}: 'null-probability' must be a number between 0 and 1")
        null_probability = float(value)

    targets: list[TargetConfig] = []
    for index, entry in enumerate(_optional_list(data, "targets", source_label)):
        targets.append(_parse_target(entry, index, source_label))

    overrides: list[str] = []
    for index, entry in enumerate(_optional_list(data, "overrides", source_label)):
        if not isinstance(entry, str):
            raise WorkspaceConfigError(f"{source_label}: overrides[{index}] must be a string")
        overrides.append(entry)

    return WorkspaceConfig(
        output_directory=output_directory,
        seed=seed,
        null_probability=null_probability,
        targets=targets,
        overrides=overrides,
    )


def default_config_text() -> str:
    """Return the content written by ``specimen init``."""
    return (
        "# Specimen workspace configuration\n"
        "output-directory: fixtures\n"
        "seed: 0\n"
        "null-probability: 0.25\n"
        "targets: []\n"
        "#  - type: mypackage.models:Person\n"
        "#    count: 10\n"
        "overrides: []\n"
        "#  - mypackage.fixtures:LocationSource\n"
    )


# ################
# Implementation
# ################


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising WorkspaceConfigError if missing."""
    if key not in mapping:
        raise WorkspaceConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a string")
    return value


def _optional_int(mapping: dict[str, object], key: str, source_label: str, positive: bool = False) -> int | None:
    if key not in mapping:
        return None
    value = mapping[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be an integer")
    if positive and value < 1:
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a positive integer")
    return value


def _optional_list(mapping: dict[str, object], key: str, source_label: str) -> list[object]:
    value = mapping.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a list")
    return value


def _parse_target(entry: object, index: int, source_label: str) -> TargetConfig:
    """Parse a single target entry from the YAML list."""
    location = f"{source_label}: targets[{index}]"
    if isinstance(entry, str):
        return TargetConfig(type=entry)
    if not isinstance(entry, dict):
        raise WorkspaceConfigError(f"{location} must be a string or a YAML mapping")
    return TargetConfig(
        type=_require_string(entry, "type", location),
        count=_optional_int(entry, "count", location, positive=True),
        list_count=_optional_int(entry, "list-count", location, positive=True),
    )
