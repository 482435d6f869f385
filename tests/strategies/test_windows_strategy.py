"""Tests for WindowsStrategy command construction and parsing."""

from __future__ import annotations

from lslocator.models import ProcessRecord
from lslocator.strategies.windows import WindowsStrategy


class TestWindowsStrategy:
    """Tests for WindowsStrategy."""

    def test_name(self) -> None:
        """Strategy identifies itself as windows."""
        assert WindowsStrategy().name == "windows"

    def test_candidates_command_filters_by_name(self) -> None:
        """The CIM query filters on the exact executable name."""
        cmd = WindowsStrategy().list_candidates_command("language_server_windows_x64.exe")
        assert cmd.startswith("chcp 65001 >nul && powershell")
        assert "-NoProfile" in cmd
        assert "$n = 'language_server_windows_x64.exe'" in cmd
        assert "Get-CimInstance Win32_Process" in cmd
        assert "Get-WmiObject Win32_Process" in cmd
        assert "ConvertTo-Json" in cmd

    def test_candidates_command_escapes_quotes(self) -> None:
        """Single quotes are doubled and double quotes dropped."""
        cmd = WindowsStrategy().list_candidates_command("it's\"x.exe")
        assert "$n = 'it''sx.exe'" in cmd

    def test_all_processes_command(self) -> None:
        """The full listing has no name filter but skips empty command lines."""
        cmd = WindowsStrategy().list_all_processes_command()
        assert "-Filter" not in cmd
        assert "Where-Object" in cmd

    def test_parse_json(self) -> None:
        """JSON output is parsed first."""
        raw = '[{"ProcessId":9,"ParentProcessId":1,"CommandLine":"ls.exe"}]'
        assert WindowsStrategy().parse_candidates(raw) == [ProcessRecord(9, 1, "ls.exe")]

    def test_parse_wmic_fallback(self) -> None:
        """CSV output is accepted when JSON is absent."""
        raw = "Node,CommandLine,ParentProcessId,ProcessId\nH,ls.exe,1,9\n"
        assert WindowsStrategy().parse_candidates(raw) == [ProcessRecord(9, 1, "ls.exe")]

    def test_parse_unrecognised(self) -> None:
        """Output in neither format is reported as unrecognised."""
        assert WindowsStrategy().parse_candidates("Access is denied.") is None

    def test_ports_command(self) -> None:
        """Port listing uses Get-NetTCPConnection with a netstat fallback."""
        cmd = WindowsStrategy().list_ports_command(4242)
        assert "Get-NetTCPConnection -State Listen -OwningProcess 4242" in cmd
        assert '|| netstat -ano | findstr "LISTENING" | findstr "4242"' in cmd

    def test_parse_ports_from_netstat(self) -> None:
        """Fallback netstat rows are filtered by pid."""
        raw = (
            "  TCP    127.0.0.1:42100  0.0.0.0:0  LISTENING  4242\n"
            "  TCP    0.0.0.0:5040     0.0.0.0:0  LISTENING  14242\n"
        )
        assert WindowsStrategy().parse_ports(raw, 4242) == [42100]
