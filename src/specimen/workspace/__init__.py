# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration for Specimen."""

from specimen.workspace.config import (
    CONFIG_FILE_NAME,
    TargetConfig,
    WorkspaceConfig,
    WorkspaceConfigError,
    default_config_text,
    load_workspace_config,
    parse_workspace_config,
)
from specimen.workspace.imports import TypeReferenceError, importable_from, resolve_reference
from specimen.workspace.logs import ContextFormatter, configure_logging

__all__ = [
    "CONFIG_FILE_NAME",
    "ContextFormatter",
    "TargetConfig",
    "TypeReferenceError",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "configure_logging",
    "default_config_text",
    "importable_from",
    "load_workspace_config",
    "parse_workspace_config",
    "resolve_reference",
]
