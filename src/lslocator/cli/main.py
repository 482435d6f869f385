"""lslocator CLI — Find the local Antigravity language server.

Entry point for the ``lslocator`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    detect — Locate and verify the running language server.
    probe  — Probe a host/port/token triple directly.
    env    — Show platform, WSL and tooling details.

Usage::

    lslocator detect
    lslocator detect --format json --show-token
    lslocator probe 127.0.0.1 42100 3359564e-c314-41ee-b610-6902aff18f3c
    lslocator env
"""

from __future__ import annotations

import click

from lslocator import __version__
from lslocator.cli.detect_cmd import detect_command
from lslocator.cli.env_cmd import env_command
from lslocator.cli.probe_cmd import probe_command


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """lslocator: Find and verify the local Antigravity language server.

    Reads the server's port and CSRF token from its process arguments and
    confirms them with an authenticated probe, on Windows, macOS, Linux
    and WSL.
    """


# Register all subcommands
cli.add_command(detect_command)
cli.add_command(probe_command)
cli.add_command(env_command)
