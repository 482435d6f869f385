"""Authenticated liveness probe for the language server gateway.

Provides a thin wrapper around ``httpx.AsyncClient`` that POSTs a minimal
request to the server's user-status RPC with the CSRF token attached. A
2xx answer proves that the ``(host, port, token)`` triple is real; the
response body is never read.

The server may listen with TLS (self-signed) or in plain HTTP, so the probe
tries ``https`` first and falls back to ``http`` only when the TLS attempt
fails at the transport level. Nothing here raises: every failure is
reported through ``ProbeResult``.
"""

from __future__ import annotations

import logging

import httpx

from lslocator.models import ProbeResult, Protocol

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT: str = "/exa.language_server_pb.LanguageServerService/GetUserStatus"

# Timeout for each probe request (seconds).
DEFAULT_TIMEOUT: float = 3.0

CSRF_HEADER: str = "X-Codeium-Csrf-Token"

PROBE_BODY: dict = {"wrapper_data": {}}

SCHEMES: tuple[Protocol, ...] = ("https", "http")


def _format_host(host: str) -> str:
    """Bracket bare IPv6 literals for use in a URL."""
    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


def build_headers(token: str) -> dict[str, str]:
    """Request headers carrying the CSRF token."""
    return {
        CSRF_HEADER: token,
        "Connect-Protocol-Version": "1",
        "Content-Type": "application/json",
    }


async def verify_gateway(
    host: str,
    port: int,
    token: str,
    *,
    endpoint: str = DEFAULT_ENDPOINT,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ProbeResult:
    """Probe ``host:port`` and report whether it is the authenticated server.

    Args:
        host: Address to connect to.
        port: TCP port.
        token: CSRF token to present.
        endpoint: RPC path to POST to.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (used by tests).

    Returns:
        ``ProbeResult`` with ``success`` set iff the status code is 2xx.
    """
    result = ProbeResult(success=False, status_code=0, protocol=SCHEMES[0])
    async with httpx.AsyncClient(
        timeout=timeout, verify=False, transport=transport,
    ) as client:
        for scheme in SCHEMES:
            url = f"{scheme}://{_format_host(host)}:{port}{endpoint}"
            try:
                resp = await client.post(
                    url, json=PROBE_BODY, headers=build_headers(token),
                )
            except httpx.TimeoutException:
                logger.debug("Timeout probing %s", url)
                result = ProbeResult(
                    success=False, status_code=0, protocol=scheme,
                    error=f"Timed out after {timeout:.1f}s",
                )
                continue
            except httpx.HTTPError as exc:
                logger.debug("Request error for %s: %s", url, exc)
                result = ProbeResult(
                    success=False, status_code=0, protocol=scheme,
                    error=str(exc) or type(exc).__name__,
                )
                continue

            ok = 200 <= resp.status_code < 300
            if not ok:
                logger.debug("HTTP %d from %s", resp.status_code, url)
            return ProbeResult(
                success=ok,
                status_code=resp.status_code,
                protocol=scheme,
                error=None if ok else f"HTTP {resp.status_code}",
            )
    return result
