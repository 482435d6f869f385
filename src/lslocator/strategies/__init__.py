"""OS-specific process and port discovery strategies.

One ``PlatformStrategy`` implementation per OS family, selected once from
the runtime platform so that call sites never branch on the OS themselves.

Public API::

    from lslocator.strategies import get_strategy, default_process_name

    strategy = get_strategy()
    command = strategy.list_candidates_command(default_process_name())
"""

from __future__ import annotations

import platform

from lslocator.shell import ShellRunner, run_command
from lslocator.strategies.base import PlatformStrategy
from lslocator.strategies.port_tools import PortToolCache
from lslocator.strategies.unix import UnixStrategy
from lslocator.strategies.windows import WindowsStrategy


def current_platform() -> str:
    """Return ``'windows'``, ``'darwin'`` or ``'linux'``."""
    system = platform.system().lower()
    if system == "darwin":
        return "darwin"
    return "windows" if system == "windows" else "linux"


def default_process_name(system: str | None = None, machine: str | None = None) -> str:
    """Executable name of the language server for an OS and CPU architecture."""
    system = system or current_platform()
    machine = (machine if machine is not None else platform.machine()).lower()
    is_arm = machine.startswith(("arm", "aarch64"))

    if system == "windows":
        return "language_server_windows_x64.exe"
    if system == "darwin":
        return "language_server_macos_arm" if is_arm else "language_server_macos"
    return "language_server_linux_arm" if is_arm else "language_server_linux_x64"


def get_strategy(
    system: str | None = None, runner: ShellRunner = run_command,
) -> PlatformStrategy:
    """Build a fresh strategy for the given (or current) platform.

    Each call returns a new instance with its own port-tool cache.
    """
    system = system or current_platform()
    if system == "windows":
        return WindowsStrategy()
    return UnixStrategy(system, runner=runner)


__all__ = [
    "PlatformStrategy",
    "PortToolCache",
    "UnixStrategy",
    "WindowsStrategy",
    "current_platform",
    "default_process_name",
    "get_strategy",
]
