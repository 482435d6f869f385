"""Logging configuration for CLI runs.

The library itself only emits through module loggers; handlers are
installed here, once, when a command starts.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Route ``lslocator`` log records to stderr through Rich."""
    root = logging.getLogger("lslocator")
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=True,
        ))
