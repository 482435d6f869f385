"""Async shell command execution for process and port listing.

Provides a thin wrapper around ``asyncio.create_subprocess_shell`` with a
per-command timeout. Every discovery component runs its OS tools through
a ``ShellRunner`` so that tests can substitute canned output.

Raises ``CommandExecutionError`` (a subclass of ``LocatorError``) on
timeouts, start failures and non-zero exit codes.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
from typing import Awaitable, Callable

from lslocator.exceptions import CommandExecutionError

logger = logging.getLogger(__name__)

# Timeout for process listing commands (seconds).
DEFAULT_TIMEOUT: float = 15.0

# Signature shared by ``run_command`` and test doubles.
ShellRunner = Callable[[str, float], Awaitable[str]]

_POSIX = os.name == "posix"


def _kill_tree(proc: asyncio.subprocess.Process) -> None:
    """Kill a timed-out shell and, on POSIX, every command in its pipeline.

    The child may already have exited on its own.
    """
    with contextlib.suppress(ProcessLookupError):
        if _POSIX:
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()


async def run_command(command: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Run a shell command and return its decoded stdout.

    Args:
        command: Full command line, interpreted by the platform shell.
        timeout: Seconds to wait before the child is killed.

    Returns:
        Captured standard output (UTF-8, undecodable bytes replaced).

    Raises:
        CommandExecutionError: On timeout, start failure or non-zero exit.
    """
    logger.debug("Running: %s", command)
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=_POSIX,
        )
    except OSError as exc:
        raise CommandExecutionError(command, f"Failed to start: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        _kill_tree(proc)
        await proc.wait()
        raise CommandExecutionError(
            command, f"Timed out after {timeout:.1f}s",
        ) from None

    if proc.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()
        raise CommandExecutionError(
            command,
            f"Exited with status {proc.returncode}: {detail[:200]}",
            returncode=proc.returncode,
        )
    return stdout.decode("utf-8", errors="replace")


async def command_exists(
    name: str,
    *,
    runner: ShellRunner = run_command,
    timeout: float = 2.0,
) -> bool:
    """Check whether an executable is available on ``PATH``.

    Args:
        name: Executable name (e.g. ``"lsof"``).
        runner: Shell runner used for the ``command -v`` lookup.
        timeout: Seconds allowed for the lookup.

    Returns:
        True if the shell can resolve the command.
    """
    try:
        output = await runner(f"command -v {name}", timeout)
    except CommandExecutionError:
        return False
    return bool(output.strip())
