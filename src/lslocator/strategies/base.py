"""Base class for OS-specific process and port discovery strategies.

Defines the ``PlatformStrategy`` abstract base class that the Windows and
Unix strategies implement. A strategy only knows how to *build* commands
and *parse* their output; running them is the caller's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lslocator.models import ProcessRecord
from lslocator.strategies.parsing import parse_listening_ports


class PlatformStrategy(ABC):
    """Abstract base class for per-OS discovery commands.

    Subclasses must implement the four command/parse primitives plus
    ``list_all_processes_command``. ``prepare_port_listing`` is a hook for
    strategies whose port command depends on what is installed.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short platform identifier (e.g. ``'windows'``)."""

    @abstractmethod
    def list_candidates_command(self, process_name: str) -> str:
        """Command listing processes whose name matches ``process_name``.

        Output must carry pid, parent pid and full command line.
        """

    @abstractmethod
    def list_all_processes_command(self) -> str:
        """Command listing every process with pid, parent pid and command line."""

    @abstractmethod
    def parse_candidates(self, raw: str) -> list[ProcessRecord] | None:
        """Parse process listing output.

        Returns:
            Records in enumeration order, ``[]`` when nothing matched, or
            None when the output could not be understood.
        """

    @abstractmethod
    def list_ports_command(self, pid: int) -> str:
        """Command listing the TCP ports on which ``pid`` is listening."""

    async def prepare_port_listing(self) -> None:
        """Hook run before ``list_ports_command``; no-op by default."""

    def parse_ports(self, raw: str, pid: int) -> list[int]:
        """Parse port listing output into a sorted, deduplicated list."""
        return parse_listening_ports(raw, pid)
