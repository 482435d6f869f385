"""macOS and Linux discovery strategy (``ps`` plus lsof/ss/netstat).

macOS always has ``lsof``. On Linux the port-listing tool is chosen by a
``PortToolCache`` on first use; when none of the tools can be found the
port command chains all of them with ``||`` and lets the shell sort it out.
"""

from __future__ import annotations

import logging

from lslocator.models import ProcessRecord
from lslocator.shell import ShellRunner, run_command
from lslocator.strategies.base import PlatformStrategy
from lslocator.strategies.parsing import parse_ps_output
from lslocator.strategies.port_tools import PortToolCache

logger = logging.getLogger(__name__)

_PS_ALL = "ps -A -ww -o pid,ppid,command"


def grep_self_excluding(pattern: str) -> str:
    """Bracket the first character so grep never matches its own command.

    ``language_server`` becomes ``[l]anguage_server``: the regex still
    matches the target, but the literal text in grep's own argv does not.
    """
    if not pattern:
        return pattern
    return f"[{pattern[0]}]{pattern[1:]}"


def lsof_ports_command(pid: int) -> str:
    return (
        f"lsof -nP -a -iTCP -sTCP:LISTEN -p {pid} 2>/dev/null "
        f'| grep -E "^\\S+\\s+{pid}\\s"'
    )


def ss_ports_command(pid: int) -> str:
    return f'ss -tlnp 2>/dev/null | grep "pid={pid},"'


def netstat_ports_command(pid: int) -> str:
    return f'netstat -tlnp 2>/dev/null | grep " {pid}/"'


_TOOL_COMMANDS = {
    "lsof": lsof_ports_command,
    "ss": ss_ports_command,
    "netstat": netstat_ports_command,
}


class UnixStrategy(PlatformStrategy):
    """Process and port discovery for ``darwin`` and ``linux``.

    Args:
        platform: ``"darwin"`` or ``"linux"``.
        runner: Shell runner for the port-tool existence checks.
    """

    def __init__(self, platform: str = "linux", runner: ShellRunner = run_command) -> None:
        if platform not in ("darwin", "linux"):
            raise ValueError(f"Unsupported Unix platform: {platform!r}")
        self.platform = platform
        self.port_tools = PortToolCache(runner=runner)

    @property
    def name(self) -> str:
        return "macos" if self.platform == "darwin" else "linux"

    def list_candidates_command(self, process_name: str) -> str:
        return f'{_PS_ALL} | grep "{grep_self_excluding(process_name)}"'

    def list_all_processes_command(self) -> str:
        return _PS_ALL

    def parse_candidates(self, raw: str) -> list[ProcessRecord] | None:
        return parse_ps_output(raw)

    async def prepare_port_listing(self) -> None:
        if self.platform == "darwin":
            return
        await self.port_tools.resolve()

    def list_ports_command(self, pid: int) -> str:
        pid = int(pid)
        if self.platform == "darwin":
            return lsof_ports_command(pid)

        tool = self.port_tools.selected
        if tool in _TOOL_COMMANDS:
            return _TOOL_COMMANDS[tool](pid)

        return " || ".join(
            build(pid) for build in (ss_ports_command, lsof_ports_command, netstat_ports_command)
        )
