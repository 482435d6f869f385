"""WSL detection and Windows-host address resolution.

Under WSL's default NAT networking, a server started by the Windows-side
IDE is not reachable on the guest's loopback. The Windows host is reachable
at the address WSL writes into the guest's ``/etc/resolv.conf`` as its
nameserver, so that address is tried as a second host after ``127.0.0.1``.
"""

from __future__ import annotations

import logging
import platform
import re
from pathlib import Path

logger = logging.getLogger(__name__)

PROC_VERSION_PATH = Path("/proc/version")
RESOLV_CONF_PATH = Path("/etc/resolv.conf")

_WSL_MARKERS = ("microsoft", "wsl")
_NAMESERVER_RE = re.compile(
    r"^\s*nameserver\s+((?:\d{1,3}\.){3}\d{1,3})\b", re.MULTILINE
)


def is_wsl(
    *,
    system: str | None = None,
    version_path: Path = PROC_VERSION_PATH,
) -> bool:
    """True when running on Linux under a Microsoft (WSL) kernel.

    Args:
        system: Platform name override (defaults to ``platform.system()``).
        version_path: Kernel version file to inspect.
    """
    system = (system or platform.system()).lower()
    if system != "linux":
        return False
    try:
        version = Path(version_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False
    lowered = version.lower()
    return any(marker in lowered for marker in _WSL_MARKERS)


def host_bridge_address(*, resolv_path: Path = RESOLV_CONF_PATH) -> str | None:
    """First IPv4 nameserver in the resolver configuration, or None."""
    try:
        content = Path(resolv_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        logger.debug("Cannot read %s", resolv_path)
        return None
    match = _NAMESERVER_RE.search(content)
    return match.group(1) if match else None


def bridge_hosts(loopback: str = "127.0.0.1") -> list[str]:
    """Extra hosts to probe after loopback; empty outside WSL."""
    if not is_wsl():
        return []
    address = host_bridge_address()
    if not address or address == loopback:
        return []
    logger.debug("WSL detected; will also probe Windows host at %s", address)
    return [address]
