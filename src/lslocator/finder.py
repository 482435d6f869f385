"""Strict, name-based language server discovery with retry and backoff.

Discovery Algorithm:
    1. Enumerate processes whose name matches the language server binary.
    2. Keep those whose arguments carry the port/token signature *and* an
       ``--app_data_dir`` naming the product.
    3. Resolve each candidate's listening ports.
    4. Probe each port on loopback, then on the WSL bridge address.
    5. If nothing verifies, wait ``base_delay_ms * 2**(attempt-1)`` (capped)
       and start over, up to ``attempts`` times.

Enumeration, port and probe failures never raise; they only shrink the set
of things left to try. Running out of attempts returns None.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from lslocator.config import LocatorSettings
from lslocator.exceptions import CommandExecutionError
from lslocator.models import (
    DiscoveryConfig,
    DiscoveryReport,
    ServerCandidate,
    VerifiedEndpoint,
)
from lslocator.probing import EndpointProber, Prober
from lslocator.shell import ShellRunner, run_command
from lslocator.signature import extract_candidates
from lslocator.strategies import PlatformStrategy, default_process_name, get_strategy
from lslocator.wsl import bridge_hosts

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class ProcessFinder:
    """Finds the language server by process name and verifies it.

    Usage::

        finder = ProcessFinder()
        endpoint = await finder.detect(DiscoveryConfig(attempts=3, base_delay_ms=1000))
        if endpoint:
            print(endpoint.host, endpoint.port)

    Args:
        settings: Discovery settings (defaults if omitted).
        strategy: Platform strategy; a fresh one for the current OS if omitted.
        runner: Shell runner for process and port commands.
        probe: Gateway probe; built from ``settings`` if omitted.
        extra_hosts: Source of WSL bridge hosts.
        sleep: Coroutine used for backoff delays (seconds).
    """

    def __init__(
        self,
        settings: LocatorSettings | None = None,
        *,
        strategy: PlatformStrategy | None = None,
        runner: ShellRunner = run_command,
        probe: Prober | None = None,
        extra_hosts: Callable[[], list[str]] = bridge_hosts,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.settings = settings or LocatorSettings()
        self.strategy = strategy or get_strategy(runner=runner)
        self.runner = runner
        self.probe = probe
        self.extra_hosts = extra_hosts
        self._sleep = sleep
        self.last_report = DiscoveryReport()

    @property
    def process_name(self) -> str:
        return self.settings.process_name or default_process_name()

    async def find_candidates(self) -> list[ServerCandidate]:
        """Enumerate and signature-filter processes; never raises."""
        command = self.strategy.list_candidates_command(self.process_name)
        try:
            raw = await self.runner(command, self.settings.command_timeout)
        except CommandExecutionError as exc:
            logger.debug("Process listing found nothing: %s", exc)
            return []

        records = self.strategy.parse_candidates(raw)
        if records is None:
            logger.warning("Unrecognised %s process listing output", self.strategy.name)
            return []

        candidates = extract_candidates(
            records, strict=True, product_name=self.settings.product_name,
        )
        logger.debug(
            "%d process(es) named %s, %d with a valid signature",
            len(records), self.process_name, len(candidates),
        )
        return candidates

    async def _try_candidates(
        self, prober: EndpointProber, candidates: list[ServerCandidate],
    ) -> VerifiedEndpoint | None:
        for candidate in candidates:
            try:
                endpoint = await prober.establish(candidate)
            except Exception:
                logger.warning(
                    "Failed to verify candidate pid %d", candidate.pid, exc_info=True,
                )
                continue
            if endpoint is not None:
                return endpoint
        return None

    async def detect(self, config: DiscoveryConfig | None = None) -> VerifiedEndpoint | None:
        """Run discovery with retries.

        Args:
            config: Retry policy; ``settings.retry`` if omitted.

        Returns:
            The first verified endpoint, or None once attempts run out.
            Details are kept on ``last_report``.
        """
        config = config or self.settings.retry
        report = DiscoveryReport()
        self.last_report = report
        prober = EndpointProber.from_settings(
            self.settings,
            self.strategy,
            runner=self.runner,
            probe=self.probe,
            extra_hosts=self.extra_hosts,
            report=report,
        )

        for attempt in range(1, config.attempts + 1):
            report.attempts_made = attempt
            candidates = await self.find_candidates()
            report.candidates.extend(candidates)

            endpoint = await self._try_candidates(prober, candidates)
            if endpoint is not None:
                report.endpoint = endpoint
                return endpoint

            if attempt < config.attempts:
                delay_ms = config.delay_for(attempt)
                logger.debug(
                    "Attempt %d/%d found no server; retrying in %d ms",
                    attempt, config.attempts, delay_ms,
                )
                await self._sleep(delay_ms / 1000)

        logger.info("Language server not found after %d attempt(s)", config.attempts)
        return None
