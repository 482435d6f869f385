"""Shared test helpers: a scripted shell runner and a scripted prober.

``FakeRunner`` stands in for ``lslocator.shell.run_command``: each rule maps
a substring of the command to canned output (or an exception), and every
call is recorded. Process listings piped through ``grep`` are filtered by
the grep pattern. ``FakeProber`` succeeds only for the configured
``(host, port, token)`` triples. Used by the finder, ambient and probing
tests.
"""

from __future__ import annotations

import re

from lslocator.exceptions import CommandExecutionError
from lslocator.models import ProbeResult

LS_CMD = (
    "/opt/Antigravity/resources/bin/language_server_linux_x64 "
    "--extension_server_port=45000 --csrf_token=abc123 "
    "--app_data_dir=/home/u/.antigravity"
)

_PS_GREP_RE = re.compile(r'^ps .*\| grep "([^"]+)"$')

SS_45000 = (
    'LISTEN 0 4096 127.0.0.1:45000 0.0.0.0:* '
    'users:(("language_server",pid=4242,fd=9))\n'
)


def ps_line(pid: int, ppid: int, command: str) -> str:
    """Format one line the way ``ps -o pid,ppid,command`` prints it."""
    return f"{pid:>7} {ppid:>7} {command}\n"


class FakeRunner:
    """Scripted replacement for the shell runner.

    Args:
        rules: ``(substring, output)`` pairs; the first rule whose substring
            occurs in the command wins. ``output`` may be an exception
            instance, which is raised instead.
    """

    def __init__(self, rules: list[tuple[str, object]] | None = None) -> None:
        self.rules = list(rules or [])
        self.calls: list[tuple[str, float]] = []

    def calls_matching(self, needle: str) -> list[str]:
        return [cmd for cmd, _ in self.calls if needle in cmd]

    async def __call__(self, command: str, timeout: float) -> str:
        self.calls.append((command, timeout))
        for needle, output in self.rules:
            if needle in command:
                if isinstance(output, BaseException):
                    raise output
                return _apply_grep(command, str(output))
        raise CommandExecutionError(command, "exit status 1", returncode=1)


def _apply_grep(command: str, output: str) -> str:
    """Filter a canned ``ps ... | grep "<pattern>"`` listing like grep would.

    Other commands return their output untouched. grep exits 1 when no
    line matches, which the real runner reports as an error.
    """
    match = _PS_GREP_RE.match(command)
    if match is None:
        return output
    pattern = re.compile(match.group(1))
    kept = [line for line in output.splitlines(keepends=True) if pattern.search(line)]
    if not kept:
        raise CommandExecutionError(command, "exit status 1", returncode=1)
    return "".join(kept)


class FakeProber:
    """Scripted gateway probe; succeeds only for the given triples."""

    def __init__(self, accepted: set[tuple[str, int, str]] | None = None) -> None:
        self.accepted = accepted or set()
        self.calls: list[tuple[str, int, str]] = []

    async def __call__(self, host: str, port: int, token: str) -> ProbeResult:
        self.calls.append((host, port, token))
        if (host, port, token) in self.accepted:
            return ProbeResult(success=True, status_code=200, protocol="https")
        return ProbeResult(
            success=False, status_code=0, protocol="http", error="Connection refused",
        )


class RecordingSleep:
    """Async sleep double that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def no_bridge() -> list[str]:
    """``extra_hosts`` stand-in for a non-WSL machine."""
    return []


def linux_runner(ps_output: object, ss_output: object = SS_45000) -> FakeRunner:
    """Runner for a Linux host with ``ss`` installed (``lsof`` missing)."""
    return FakeRunner([
        ("command -v ss", "/usr/bin/ss\n"),
        ("ss -tlnp", ss_output),
        ("ps -A", ps_output),
    ])
