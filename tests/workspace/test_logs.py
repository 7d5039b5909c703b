# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the CLI logging setup."""

import logging
from collections.abc import Iterator

import pytest

from specimen.workspace import ContextFormatter, configure_logging
from specimen.workspace.logs import LOG_FORMAT

# ###############
# Helpers
# ###############


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("specimen.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    """Yield the root logger and remove the handler configure_logging() installs."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, ContextFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


# ###############
# ContextFormatter
# ###############


class TestContextFormatter:
    def test_missing_target_defaults(self) -> None:
        line = ContextFormatter(LOG_FORMAT).format(_record())
        assert "[target=-] - hello world" in line

    def test_target_is_included(self) -> None:
        line = ContextFormatter(LOG_FORMAT).format(_record(target="shop:Order"))
        assert "INFO specimen.test [target=shop:Order] - hello world" in line


# ###############
# configure_logging
# ###############


@pytest.mark.parametrize(("verbose", "level"), [(False, logging.WARNING), (True, logging.DEBUG)])
def test_configure_logging_level(root_logger: logging.Logger, verbose: bool, level: int) -> None:
    configure_logging(verbose)
    assert root_logger.level == level
    assert any(isinstance(h.formatter, ContextFormatter) for h in root_logger.handlers)
