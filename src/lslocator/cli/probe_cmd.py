"""``lslocator probe HOST PORT TOKEN`` — Issue one authenticated gateway probe.

Useful for checking credentials copied from a process listing by hand.

Exit Codes:
    0 — The gateway accepted the token.
    1 — Transport error, timeout, or non-2xx response.
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict

import click

from lslocator.cli.logging_setup import configure_logging
from lslocator.gateway import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, verify_gateway


@click.command("probe")
@click.argument("host")
@click.argument("port", type=click.IntRange(1, 65535))
@click.argument("token")
@click.option("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds.")
@click.option("--endpoint", default=DEFAULT_ENDPOINT, help="RPC path to probe.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def probe_command(
    host: str,
    port: int,
    token: str,
    timeout: float,
    endpoint: str,
    output_format: str,
    verbose: bool,
) -> None:
    """Probe HOST:PORT with TOKEN and report whether it authenticates."""
    configure_logging(verbose)
    result = asyncio.run(
        verify_gateway(host, port, token, endpoint=endpoint, timeout=timeout)
    )

    if output_format == "json":
        click.echo(json.dumps({"host": host, "port": port, **asdict(result)}, indent=2))
    else:
        from lslocator.cli.output import print_probe_result
        print_probe_result(host, port, result)

    sys.exit(0 if result.success else 1)
