"""Detection and memoisation of the Unix socket-listing tool.

Linux distributions ship different subsets of ``lsof``, ``ss`` and
``netstat``. ``PortToolCache`` probes for them once per strategy instance,
in priority order, and remembers the answer (including "none found") so
that repeated port lookups within a discovery session cost nothing.

The cache lives on the strategy instance, not in module state:
concurrent discovery sessions each own one.
"""

from __future__ import annotations

import logging

from lslocator.shell import ShellRunner, command_exists, run_command

logger = logging.getLogger(__name__)

# Probe order: first available wins.
PORT_TOOLS: tuple[str, ...] = ("lsof", "ss", "netstat")

# Timeout for each ``command -v`` existence check (seconds).
EXISTENCE_TIMEOUT: float = 2.0


class PortToolCache:
    """Per-session memo of which port-listing tool is installed.

    Usage::

        cache = PortToolCache()
        tool = await cache.resolve()   # "lsof", "ss", "netstat" or None
    """

    def __init__(
        self,
        runner: ShellRunner = run_command,
        tools: tuple[str, ...] = PORT_TOOLS,
    ) -> None:
        self._runner = runner
        self._tools = tools
        self._probed = False
        self._selected: str | None = None

    @property
    def probed(self) -> bool:
        """True once ``resolve`` has run."""
        return self._probed

    @property
    def selected(self) -> str | None:
        """The memoised tool name, or None if none was found (or not probed)."""
        return self._selected

    async def resolve(self) -> str | None:
        """Return the first available tool, probing only on first call."""
        if self._probed:
            return self._selected

        for tool in self._tools:
            if await command_exists(
                tool, runner=self._runner, timeout=EXISTENCE_TIMEOUT,
            ):
                self._selected = tool
                break
        self._probed = True

        if self._selected is None:
            logger.warning(
                "None of %s found; port lookups will try each in turn",
                ", ".join(self._tools),
            )
        else:
            logger.debug("Using %s for port listing", self._selected)
        return self._selected
