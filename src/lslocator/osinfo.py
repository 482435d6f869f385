"""Human-readable OS description for diagnostics output."""

from __future__ import annotations

import platform
import re
from pathlib import Path

OS_RELEASE_PATH = Path("/etc/os-release")

# Darwin kernel major version -> macOS marketing name.
_MACOS_NAMES: dict[int, str] = {
    24: "macOS 15 Sequoia",
    23: "macOS 14 Sonoma",
    22: "macOS 13 Ventura",
    21: "macOS 12 Monterey",
    20: "macOS 11 Big Sur",
    19: "macOS 10.15 Catalina",
    18: "macOS 10.14 Mojave",
}

_PRETTY_NAME_RE = re.compile(r'^PRETTY_NAME="?([^"\n]+)"?', re.MULTILINE)


def _leading_int(text: str) -> int | None:
    match = re.match(r"\d+", text)
    return int(match.group(0)) if match else None


def _windows_name(release: str, version: str) -> str:
    # platform.version() on Windows is "10.0.<build>".
    parts = version.split(".")
    build = _leading_int(parts[2]) if len(parts) >= 3 else None
    if build is None:
        return f"Windows (Build {release})"
    if build >= 22000:
        return f"Windows 11 Build {build}"
    if build >= 10240:
        return f"Windows 10 Build {build}"
    if build >= 9200:
        return f"Windows 8.1/8 Build {build}"
    return f"Windows (Build {build})"


def _linux_pretty_name(os_release_path: Path) -> str | None:
    try:
        content = os_release_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _PRETTY_NAME_RE.search(content)
    return match.group(1) if match else None


def describe_os(
    *,
    system: str | None = None,
    release: str | None = None,
    version: str | None = None,
    machine: str | None = None,
    os_release_path: Path = OS_RELEASE_PATH,
) -> str:
    """Describe the running OS, e.g. ``"Windows 11 Build 22631 (AMD64)"``.

    All arguments default to the values reported by the ``platform`` module.
    """
    system = (system or platform.system()).lower()
    release = release if release is not None else platform.release()
    version = version if version is not None else platform.version()
    machine = machine if machine is not None else platform.machine()

    if system == "windows":
        return f"{_windows_name(release, version)} ({machine})"
    if system == "darwin":
        major = _leading_int(release)
        name = _MACOS_NAMES.get(major or -1, f"macOS (Darwin {release})")
        return f"{name} ({machine})"
    if system == "linux":
        pretty = _linux_pretty_name(os_release_path)
        if pretty:
            return f"{pretty} (Kernel {release}, {machine})"
        return f"Linux {release} ({machine})"
    return f"{system} {release} ({machine})"
