"""Shared fixtures for CLI module tests."""

from __future__ import annotations

import logging

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_pixiquant_logger():
    """The CLI installs a Rich handler; restore the logger after each test."""
    logger = logging.getLogger("pixiquant")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
