"""Data models for language server discovery.

Contains the value objects passed between the discovery stages: raw
process records, signature-matched candidates, probe results, and the
final verified endpoint. All of them live for a single discovery call;
only ``VerifiedEndpoint`` is meant to be held by the caller afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from lslocator.exceptions import ConfigError

Protocol = Literal["http", "https"]


# ---------------------------------------------------------------------------
# Process-level records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessRecord:
    """Raw OS process metadata produced by a process listing command.

    Attributes:
        pid: Process id.
        ppid: Parent process id (0 when the OS did not report one).
        command_line: Full argument string of the process.
    """

    pid: int
    ppid: int
    command_line: str


@dataclass(frozen=True)
class ServerCandidate:
    """A process whose command line carries the language server signature.

    Attributes:
        pid: Process id.
        ppid: Parent process id.
        port: Port from ``--extension_server_port``; 0 means unknown and
            must be resolved by listing the process's listening sockets.
        token: CSRF token from ``--csrf_token``. Never empty.
        workspace_id: Value of ``--workspace_id`` if present.
    """

    pid: int
    ppid: int
    port: int
    token: str
    workspace_id: str | None = None

    @property
    def has_known_port(self) -> bool:
        """True when the command line supplied a usable port."""
        return self.port > 0


# ---------------------------------------------------------------------------
# Verification results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one authenticated gateway probe.

    Attributes:
        success: True iff the server answered with a 2xx status.
        status_code: HTTP status, or 0 when no response was received.
        protocol: Scheme of the last request attempted.
        error: Transport error message, if any.
    """

    success: bool
    status_code: int
    protocol: Protocol
    error: str | None = None


@dataclass(frozen=True)
class VerifiedEndpoint:
    """A ``(host, port, token)`` triple confirmed by a successful probe."""

    host: str
    port: int
    token: str


@dataclass(frozen=True)
class ProbeAttempt:
    """One probe issued during discovery, kept for diagnostics."""

    candidate: ServerCandidate
    host: str
    port: int
    result: ProbeResult


@dataclass
class DiscoveryReport:
    """Everything observed during one discovery call.

    Attributes:
        attempts_made: Number of enumerate/verify cycles executed.
        candidates: Every candidate seen, across all attempts.
        probes: Every probe issued, in order.
        endpoint: The verified endpoint, or None.
    """

    attempts_made: int = 0
    candidates: list[ServerCandidate] = field(default_factory=list)
    probes: list[ProbeAttempt] = field(default_factory=list)
    endpoint: VerifiedEndpoint | None = None

    @property
    def found(self) -> bool:
        """True when discovery produced a verified endpoint."""
        return self.endpoint is not None


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DiscoveryConfig:
    """Retry policy for one discovery call.

    Attributes:
        attempts: Number of enumerate/verify cycles (>= 1).
        base_delay_ms: Delay before the second attempt; doubles each time.
        max_delay_ms: Upper bound for any single delay.
    """

    attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10_000

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ConfigError(f"attempts must be >= 1, got {self.attempts}")
        if self.base_delay_ms < 0:
            raise ConfigError(
                f"base_delay_ms must be >= 0, got {self.base_delay_ms}"
            )
        if self.max_delay_ms < 0:
            raise ConfigError(
                f"max_delay_ms must be >= 0, got {self.max_delay_ms}"
            )

    def delay_for(self, attempt: int) -> int:
        """Milliseconds to wait after the given (1-based) failed attempt."""
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)
