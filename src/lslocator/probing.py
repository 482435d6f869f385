"""Port resolution and endpoint verification shared by both finders.

Given a ``ServerCandidate``, ``EndpointProber`` works out which ports to try
(by listing the process's listening sockets through the platform strategy)
and probes each one, first on loopback and then on any WSL bridge address,
until the gateway accepts the token. Every probe is recorded on the
attached ``DiscoveryReport``.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Awaitable, Callable

from lslocator.exceptions import CommandExecutionError
from lslocator.gateway import verify_gateway
from lslocator.models import (
    DiscoveryReport,
    ProbeAttempt,
    ProbeResult,
    ServerCandidate,
    VerifiedEndpoint,
)
from lslocator.shell import ShellRunner, run_command
from lslocator.strategies.base import PlatformStrategy
from lslocator.wsl import bridge_hosts

if TYPE_CHECKING:
    from lslocator.config import LocatorSettings

logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"

# Timeout for port listing commands (seconds).
PORT_COMMAND_TIMEOUT: float = 5.0

Prober = Callable[[str, int, str], Awaitable[ProbeResult]]


class EndpointProber:
    """Resolves candidate ports and verifies them against the gateway.

    Args:
        strategy: Platform strategy supplying the port commands.
        runner: Shell runner for port listing.
        probe: Gateway probe coroutine ``(host, port, token)``.
        host: Primary host to probe.
        extra_hosts: Returns additional hosts to try after ``host`` fails
            (WSL bridge by default). Called at most once.
        confirm_known_port: Check that a port taken from the command line
            is really listening before trusting it.
        port_timeout: Timeout for each port listing command.
        report: Diagnostics sink; a fresh one is created if omitted.
    """

    def __init__(
        self,
        strategy: PlatformStrategy,
        *,
        runner: ShellRunner = run_command,
        probe: Prober = verify_gateway,
        host: str = LOOPBACK,
        extra_hosts: Callable[[], list[str]] = bridge_hosts,
        confirm_known_port: bool = True,
        port_timeout: float = PORT_COMMAND_TIMEOUT,
        report: DiscoveryReport | None = None,
    ) -> None:
        self.strategy = strategy
        self.runner = runner
        self.probe = probe
        self.host = host
        self._extra_hosts_fn = extra_hosts
        self._extra_hosts: list[str] | None = None
        self.confirm_known_port = confirm_known_port
        self.port_timeout = port_timeout
        self.report = report if report is not None else DiscoveryReport()

    @classmethod
    def from_settings(
        cls,
        settings: LocatorSettings,
        strategy: PlatformStrategy,
        *,
        runner: ShellRunner = run_command,
        probe: Prober | None = None,
        extra_hosts: Callable[[], list[str]] = bridge_hosts,
        report: DiscoveryReport | None = None,
    ) -> EndpointProber:
        """Build a prober whose host, timeouts and endpoint come from settings."""
        if probe is None:
            probe = partial(
                verify_gateway,
                endpoint=settings.endpoint,
                timeout=settings.probe_timeout,
            )
        return cls(
            strategy,
            runner=runner,
            probe=probe,
            host=settings.host,
            extra_hosts=extra_hosts,
            confirm_known_port=settings.confirm_known_port,
            port_timeout=settings.port_command_timeout,
            report=report,
        )

    async def list_ports(self, pid: int) -> list[int]:
        """Listening ports of ``pid``; empty on any command failure."""
        await self.strategy.prepare_port_listing()
        command = self.strategy.list_ports_command(pid)
        try:
            raw = await self.runner(command, self.port_timeout)
        except CommandExecutionError as exc:
            logger.debug("Port listing failed for pid %d: %s", pid, exc)
            return []
        return self.strategy.parse_ports(raw, pid)

    async def resolve_ports(self, candidate: ServerCandidate) -> list[int]:
        """Ports worth probing for a candidate, in probe order."""
        if candidate.has_known_port and not self.confirm_known_port:
            return [candidate.port]

        listed = await self.list_ports(candidate.pid)
        if not candidate.has_known_port:
            return listed
        if candidate.port in listed or not listed:
            return [candidate.port]
        logger.debug(
            "Port %d from pid %d's arguments is not listening; trying %s",
            candidate.port, candidate.pid, listed,
        )
        return listed

    def _bridge_hosts(self) -> list[str]:
        if self._extra_hosts is None:
            hosts = self._extra_hosts_fn()
            self._extra_hosts = [h for h in hosts if h != self.host]
        return self._extra_hosts

    async def _probe(
        self, candidate: ServerCandidate, host: str, port: int,
    ) -> ProbeResult:
        result = await self.probe(host, port, candidate.token)
        self.report.probes.append(ProbeAttempt(
            candidate=candidate, host=host, port=port, result=result,
        ))
        return result

    async def verify(
        self, candidate: ServerCandidate, ports: list[int],
    ) -> VerifiedEndpoint | None:
        """Probe each port on loopback, then on bridge hosts; first hit wins."""
        for port in ports:
            result = await self._probe(candidate, self.host, port)
            if result.success:
                return VerifiedEndpoint(host=self.host, port=port, token=candidate.token)

            for bridge in self._bridge_hosts():
                result = await self._probe(candidate, bridge, port)
                if result.success:
                    return VerifiedEndpoint(host=bridge, port=port, token=candidate.token)
        return None

    async def establish(self, candidate: ServerCandidate) -> VerifiedEndpoint | None:
        """Resolve ports for a candidate and verify them."""
        ports = await self.resolve_ports(candidate)
        if not ports:
            logger.debug("No listening ports for pid %d; skipping", candidate.pid)
            return None
        endpoint = await self.verify(candidate, ports)
        if endpoint is not None:
            logger.info(
                "Verified language server at %s:%d (pid %d)",
                endpoint.host, endpoint.port, candidate.pid,
            )
        return endpoint
