"""Signature-based fallback discovery over every running process.

The strict finder depends on the language server's executable name, which
the IDE has changed between releases. Its argument shape has been stable,
so ``AmbientDiscovery`` ignores process names entirely: it lists every
process, keeps those whose command line contains the generic signature
(``csrf_token``), and feeds them through the same signature extraction,
port resolution and gateway verification as the strict finder.

It makes a single pass with no retries and is meant to run once after the
strict finder has given up.
"""

from __future__ import annotations

import logging
from typing import Callable

from lslocator.config import LocatorSettings
from lslocator.exceptions import CommandExecutionError
from lslocator.models import DiscoveryReport, ServerCandidate, VerifiedEndpoint
from lslocator.probing import EndpointProber, Prober
from lslocator.shell import ShellRunner, run_command
from lslocator.signature import extract_candidates, matches_signature
from lslocator.strategies import PlatformStrategy, get_strategy
from lslocator.wsl import bridge_hosts

logger = logging.getLogger(__name__)


class AmbientDiscovery:
    """Finds the language server by argument signature alone.

    Args:
        settings: Discovery settings (defaults if omitted).
        strategy: Platform strategy; a fresh one for the current OS if omitted.
        runner: Shell runner for process and port commands.
        probe: Gateway probe; built from ``settings`` if omitted.
        extra_hosts: Source of WSL bridge hosts.
    """

    def __init__(
        self,
        settings: LocatorSettings | None = None,
        *,
        strategy: PlatformStrategy | None = None,
        runner: ShellRunner = run_command,
        probe: Prober | None = None,
        extra_hosts: Callable[[], list[str]] = bridge_hosts,
    ) -> None:
        self.settings = settings or LocatorSettings()
        self.strategy = strategy or get_strategy(runner=runner)
        self.runner = runner
        self.probe = probe
        self.extra_hosts = extra_hosts
        self.last_report = DiscoveryReport()

    async def locate_by_signature(self) -> list[ServerCandidate]:
        """List all processes and keep those carrying the signature."""
        command = self.strategy.list_all_processes_command()
        try:
            raw = await self.runner(command, self.settings.command_timeout)
        except CommandExecutionError as exc:
            logger.debug("Full process listing failed: %s", exc)
            return []

        records = self.strategy.parse_candidates(raw) or []
        matching = [
            r for r in records
            if matches_signature(r.command_line, self.settings.signature)
        ]
        return extract_candidates(
            matching, strict=False, product_name=self.settings.product_name,
        )

    async def execute(self) -> VerifiedEndpoint | None:
        """Run one signature-based discovery pass.

        Returns:
            The first verified endpoint, or None.
        """
        logger.info("Starting signature-based discovery")
        report = DiscoveryReport(attempts_made=1)
        self.last_report = report
        prober = EndpointProber.from_settings(
            self.settings,
            self.strategy,
            runner=self.runner,
            probe=self.probe,
            extra_hosts=self.extra_hosts,
            report=report,
        )

        try:
            candidates = await self.locate_by_signature()
            report.candidates.extend(candidates)
            for candidate in candidates:
                endpoint = await prober.establish(candidate)
                if endpoint is not None:
                    report.endpoint = endpoint
                    return endpoint
        except Exception:
            logger.error("Signature-based discovery failed", exc_info=True)

        return None
