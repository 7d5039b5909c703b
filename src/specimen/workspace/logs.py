# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Logging setup for the command-line interface."""

from __future__ import annotations

import logging
import sys

# ###############
# Public Interface
# ###############

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [target=%(target)s] - %(message)s"


class ContextFormatter(logging.Formatter):
    """Formatter that tolerates records without a ``target`` field."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "target"):
            record.target = "-"
        return super().format(record)


def configure_logging(verbose: bool = False) -> None:
    """Send specimen log records to stderr.

    Args:
        verbose: Log debug records instead of warnings and above.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ContextFormatter(LOG_FORMAT))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        handlers=[handler],
        force=True,
    )
