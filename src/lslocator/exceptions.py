"""lslocator exception hierarchy.

All public exceptions inherit from LocatorError, giving callers a single
base class to catch when they want to handle any lslocator-specific failure
without swallowing unrelated errors.

Note that "server not found" is never an exception: discovery returns
``None`` for that outcome. Exceptions are reserved for failures of the
machinery itself (a shell command that could not run) and for invalid
configuration.
"""

from __future__ import annotations


class LocatorError(Exception):
    """Base exception for all lslocator errors."""


class CommandExecutionError(LocatorError):
    """Raised when a shell command fails, times out, or exits non-zero.

    Discovery components catch this at their boundary and degrade to
    "no candidates" or "no ports"; it only escapes when the shell runner
    is called directly.

    Attributes:
        command: The command line that was executed.
        returncode: Process exit status, or None if the command timed out
            or could not be started.
    """

    def __init__(
        self, command: str, message: str, returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class ConfigError(LocatorError):
    """Raised for invalid discovery settings.

    Covers out-of-range retry policies, unknown keys in the settings file,
    and malformed YAML.
    """
