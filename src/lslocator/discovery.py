"""Top-level entry points: strict discovery, then ambient fallback."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from lslocator.ambient import AmbientDiscovery
from lslocator.config import LocatorSettings
from lslocator.finder import ProcessFinder, Sleeper
from lslocator.models import DiscoveryConfig, DiscoveryReport, VerifiedEndpoint
from lslocator.probing import Prober
from lslocator.shell import ShellRunner, run_command
from lslocator.strategies import PlatformStrategy, get_strategy
from lslocator.wsl import bridge_hosts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveryOutcome:
    """Result of ``run_discovery``.

    Attributes:
        endpoint: The verified endpoint, or None.
        stage: ``"strict"`` or ``"ambient"``: the last pass that ran.
        report: Diagnostics from that pass.
    """

    endpoint: VerifiedEndpoint | None
    stage: str
    report: DiscoveryReport


async def run_discovery(
    settings: LocatorSettings | None = None,
    config: DiscoveryConfig | None = None,
    *,
    runner: ShellRunner = run_command,
    strategy: PlatformStrategy | None = None,
    probe: Prober | None = None,
    extra_hosts: Callable[[], list[str]] = bridge_hosts,
    sleep: Sleeper = asyncio.sleep,
) -> DiscoveryOutcome:
    """Run ``ProcessFinder`` and, if needed, one ``AmbientDiscovery`` pass.

    Unless ``strategy`` is given, each call owns a fresh platform strategy,
    so concurrent calls never share a port-tool cache.
    """
    settings = settings or LocatorSettings()
    strategy = strategy or get_strategy(runner=runner)

    finder = ProcessFinder(
        settings, strategy=strategy, runner=runner, probe=probe,
        extra_hosts=extra_hosts, sleep=sleep,
    )
    endpoint = await finder.detect(config)
    if endpoint is not None or not settings.ambient_fallback:
        return DiscoveryOutcome(endpoint, "strict", finder.last_report)

    logger.info("Strict discovery failed; falling back to signature search")
    ambient = AmbientDiscovery(
        settings, strategy=strategy, runner=runner, probe=probe,
        extra_hosts=extra_hosts,
    )
    endpoint = await ambient.execute()
    return DiscoveryOutcome(endpoint, "ambient", ambient.last_report)


async def discover_server(
    settings: LocatorSettings | None = None,
    config: DiscoveryConfig | None = None,
    *,
    runner: ShellRunner = run_command,
    **overrides,
) -> VerifiedEndpoint | None:
    """Locate and verify the language server.

    Args:
        settings: Discovery settings (defaults if omitted).
        config: Retry policy override for the strict finder.
        runner: Shell runner for every OS command.
        **overrides: Passed through to ``run_discovery`` (``strategy``,
            ``probe``, ``extra_hosts``, ``sleep``).

    Returns:
        The verified endpoint, or None if the server could not be found.
    """
    outcome = await run_discovery(settings, config, runner=runner, **overrides)
    return outcome.endpoint
