"""Windows discovery strategy (PowerShell / CIM, legacy WMIC output).

Process listings come from ``Win32_Process`` via ``Get-CimInstance``
(falling back to ``Get-WmiObject`` where CIM is restricted), serialised
with ``ConvertTo-Json``. Listening ports come from ``Get-NetTCPConnection``
with a ``netstat -ano`` fallback for hosts without the NetTCPIP module.
"""

from __future__ import annotations

from lslocator.models import ProcessRecord
from lslocator.strategies.base import PlatformStrategy
from lslocator.strategies.parsing import parse_windows_json, parse_wmic_csv

_POWERSHELL = "powershell -ExecutionPolicy Bypass -NoProfile -Command"

# UTF-8 output so non-ASCII install paths survive; '[]' instead of empty
# output when nothing matches.
_PROCESS_QUERY = (
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
    "{selector} "
    "if ($p) {{ @($p) | Select-Object ProcessId,ParentProcessId,CommandLine "
    "| ConvertTo-Json -Compress }} else {{ '[]' }}"
)


def _ps_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted PowerShell string."""
    return value.replace("'", "''").replace('"', "")


class WindowsStrategy(PlatformStrategy):
    """Process and port discovery for Windows 10/11."""

    @property
    def name(self) -> str:
        return "windows"

    def list_candidates_command(self, process_name: str) -> str:
        selector = (
            f"$n = '{_ps_literal(process_name)}'; "
            "$f = \\\"name='$n'\\\"; "
            "try { $p = Get-CimInstance Win32_Process -Filter $f } "
            "catch { $p = Get-WmiObject Win32_Process -Filter $f };"
        )
        script = _PROCESS_QUERY.format(selector=selector)
        return f'chcp 65001 >nul && {_POWERSHELL} "{script}"'

    def list_all_processes_command(self) -> str:
        selector = (
            "try { $p = Get-CimInstance Win32_Process } "
            "catch { $p = Get-WmiObject Win32_Process }; "
            "$p = $p | Where-Object { $_.CommandLine };"
        )
        script = _PROCESS_QUERY.format(selector=selector)
        return f'chcp 65001 >nul && {_POWERSHELL} "{script}"'

    def parse_candidates(self, raw: str) -> list[ProcessRecord] | None:
        records = parse_windows_json(raw)
        if records is not None:
            return records
        return parse_wmic_csv(raw)

    def list_ports_command(self, pid: int) -> str:
        script = (
            f"Get-NetTCPConnection -State Listen -OwningProcess {int(pid)} "
            "-ErrorAction Stop | Select-Object -ExpandProperty LocalPort"
        )
        return (
            f'{_POWERSHELL} "{script}" '
            f'|| netstat -ano | findstr "LISTENING" | findstr "{int(pid)}"'
        )
