"""lslocator: Find and verify the local Antigravity language server.

Public API::

    import asyncio
    from lslocator import discover_server

    endpoint = asyncio.run(discover_server())
    if endpoint:
        print(endpoint.host, endpoint.port, endpoint.token)
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Varun Pratap Bhardwaj"
__author_email__ = "varun.pratap.bhardwaj@gmail.com"
__license__ = "MIT"

from lslocator.ambient import AmbientDiscovery  # noqa: E402
from lslocator.config import LocatorSettings, load_settings  # noqa: E402
from lslocator.discovery import (  # noqa: E402
    DiscoveryOutcome,
    discover_server,
    run_discovery,
)
from lslocator.finder import ProcessFinder  # noqa: E402
from lslocator.models import (  # noqa: E402
    DiscoveryConfig,
    ProbeResult,
    VerifiedEndpoint,
)

__all__ = [
    "AmbientDiscovery",
    "DiscoveryConfig",
    "DiscoveryOutcome",
    "LocatorSettings",
    "ProbeResult",
    "ProcessFinder",
    "VerifiedEndpoint",
    "discover_server",
    "load_settings",
    "run_discovery",
]
