"""``lslocator env`` — Show what discovery will see on this machine.

Prints the OS description, the platform strategy in use, the expected
language server executable name, WSL status and the WSL bridge address.
"""

from __future__ import annotations

import asyncio
import json

import click

from lslocator.osinfo import describe_os
from lslocator.strategies import UnixStrategy, current_platform, default_process_name, get_strategy
from lslocator.wsl import host_bridge_address, is_wsl


def _port_tool(strategy: object) -> str:
    """Name the port-listing tool the strategy will use."""
    if not isinstance(strategy, UnixStrategy):
        return "Get-NetTCPConnection"
    if strategy.platform == "darwin":
        return "lsof"
    tool = asyncio.run(strategy.port_tools.resolve())
    return tool or "none (ss || lsof || netstat)"


def collect_environment() -> list[tuple[str, str]]:
    """Gather environment diagnostics as ``(label, value)`` rows."""
    strategy = get_strategy()
    wsl = is_wsl()
    bridge = host_bridge_address() if wsl else None
    return [
        ("OS", describe_os()),
        ("Platform", current_platform()),
        ("Strategy", strategy.name),
        ("Process name", default_process_name()),
        ("Port tool", _port_tool(strategy)),
        ("WSL", "yes" if wsl else "no"),
        ("Bridge address", bridge or "-"),
    ]


@click.command("env")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def env_command(output_format: str) -> None:
    """Show platform details relevant to discovery."""
    rows = collect_environment()
    if output_format == "json":
        click.echo(json.dumps(dict(rows), indent=2))
    else:
        from lslocator.cli.output import print_environment
        print_environment(rows)
