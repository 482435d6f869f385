"""Shared fixtures for CLI tests.

CLI commands install a Rich log handler on the ``lslocator`` logger; this
restores the logger after each test so handlers and levels do not leak.
"""

from __future__ import annotations

import logging
from typing import Iterator

import pytest


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    """Undo configure_logging after each CLI test."""
    logger = logging.getLogger("lslocator")
    level, handlers = logger.level, list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
