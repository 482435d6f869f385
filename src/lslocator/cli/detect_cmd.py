"""``lslocator detect`` — Find and verify the running language server.

Runs the strict, name-based finder with retries and, unless
``--no-ambient`` is given, a signature-based fallback pass.

Exit Codes:
    0 — Language server found and verified.
    1 — Invalid settings or options.
    2 — Language server not found.
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

import click

from lslocator.cli.logging_setup import configure_logging
from lslocator.config import LocatorSettings, load_settings
from lslocator.discovery import run_discovery
from lslocator.exceptions import ConfigError
from lslocator.models import DiscoveryConfig


def _build_settings(
    config_path: str | None,
    attempts: int | None,
    base_delay: int | None,
    process_name: str | None,
    no_ambient: bool,
) -> LocatorSettings:
    settings = load_settings(Path(config_path) if config_path else None)
    retry = settings.retry
    if attempts is not None or base_delay is not None:
        retry = DiscoveryConfig(
            attempts=attempts if attempts is not None else retry.attempts,
            base_delay_ms=base_delay if base_delay is not None else retry.base_delay_ms,
            max_delay_ms=retry.max_delay_ms,
        )
    return settings.with_overrides(
        retry=retry,
        process_name=process_name,
        ambient_fallback=False if no_ambient else None,
    )


@click.command("detect")
@click.option("--attempts", type=int, default=None, help="Strict discovery attempts (default 3).")
@click.option(
    "--base-delay", type=int, default=None,
    help="Initial backoff delay in milliseconds (default 1000).",
)
@click.option("--process-name", default=None, help="Override the language server executable name.")
@click.option("--no-ambient", is_flag=True, default=False, help="Skip the signature-based fallback.")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False), default=None,
    help="YAML settings file.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.option("--show-token", is_flag=True, default=False, help="Print the CSRF token unmasked.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def detect_command(
    attempts: int | None,
    base_delay: int | None,
    process_name: str | None,
    no_ambient: bool,
    config_path: str | None,
    output_format: str,
    show_token: bool,
    verbose: bool,
) -> None:
    """Locate the language server and verify its credentials.

    Examples:

        lslocator detect

        lslocator detect --attempts 5 --base-delay 500 --format json
    """
    configure_logging(verbose)
    try:
        settings = _build_settings(
            config_path, attempts, base_delay, process_name, no_ambient,
        )
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    outcome = asyncio.run(run_discovery(settings))
    endpoint, report = outcome.endpoint, outcome.report

    if output_format == "json":
        click.echo(json.dumps({
            "found": endpoint is not None,
            "stage": outcome.stage,
            "endpoint": asdict(endpoint) if endpoint else None,
            "attempts": report.attempts_made,
            "candidates": len(report.candidates),
            "probes": len(report.probes),
        }, indent=2))
    else:
        from lslocator.cli.output import print_endpoint, print_not_found, print_report
        if endpoint is not None:
            print_endpoint(endpoint, show_token=show_token)
        else:
            print_not_found(report)
        if verbose:
            print_report(report)

    sys.exit(0 if endpoint is not None else 2)
