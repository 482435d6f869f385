"""Tests for process and socket tool output parsers."""

from __future__ import annotations

from lslocator.models import ProcessRecord
from lslocator.strategies.parsing import (
    parse_listening_ports,
    parse_ps_output,
    parse_windows_json,
    parse_wmic_csv,
)


class TestParsePsOutput:
    """Tests for ``ps -o pid,ppid,command`` parsing."""

    def test_header_and_rows(self) -> None:
        """The header is skipped; command lines keep their spaces."""
        raw = (
            "  PID  PPID COMMAND\n"
            " 4242  4000 /opt/ls --csrf_token=abc --app_data_dir=/x y\n"
            "    1     0 /sbin/init\n"
        )
        assert parse_ps_output(raw) == [
            ProcessRecord(4242, 4000, "/opt/ls --csrf_token=abc --app_data_dir=/x y"),
            ProcessRecord(1, 0, "/sbin/init"),
        ]

    def test_empty(self) -> None:
        """Empty output yields no records."""
        assert parse_ps_output("") == []

    def test_garbage_lines_skipped(self) -> None:
        """Lines without two leading integers are ignored."""
        assert parse_ps_output("grep: warning\nabc 12 x\n") == []

    def test_oversized_pid_skipped(self) -> None:
        """A digit run longer than any pid is not converted."""
        raw = "9" * 5000 + " 1 /bin/x\n 7 1 /bin/y\n"
        assert parse_ps_output(raw) == [ProcessRecord(7, 1, "/bin/y")]


class TestParseWindowsJson:
    """Tests for ConvertTo-Json process output."""

    def test_array(self) -> None:
        """An array of objects becomes records in order."""
        raw = (
            '[{"ProcessId":10,"ParentProcessId":2,"CommandLine":"a.exe --csrf_token=x"},'
            '{"ProcessId":11,"ParentProcessId":2,"CommandLine":"b.exe"}]'
        )
        assert parse_windows_json(raw) == [
            ProcessRecord(10, 2, "a.exe --csrf_token=x"),
            ProcessRecord(11, 2, "b.exe"),
        ]

    def test_single_object(self) -> None:
        """PowerShell unwraps one-element arrays into a bare object."""
        raw = '{"ProcessId":10,"ParentProcessId":2,"CommandLine":"a.exe"}'
        assert parse_windows_json(raw) == [ProcessRecord(10, 2, "a.exe")]

    def test_leading_banner(self) -> None:
        """Text printed before the payload is skipped."""
        raw = 'Active code page: 65001 [utf-8]\r\n[{"ProcessId":7,"ParentProcessId":1,"CommandLine":"x"}]'
        assert parse_windows_json(raw) == [ProcessRecord(7, 1, "x")]

    def test_banner_with_json_array(self) -> None:
        """A banner that is itself valid JSON does not hide the payload."""
        raw = (
            "Profile loaded [1]\n"
            '[{"ProcessId": 5, "ParentProcessId": 1, "CommandLine": "x --csrf_token=a"}]'
        )
        assert parse_windows_json(raw) == [ProcessRecord(5, 1, "x --csrf_token=a")]

    def test_banner_with_json_object(self) -> None:
        """An empty object ahead of the payload is skipped."""
        raw = 'settings {}\r\n{"ProcessId": 9, "ParentProcessId": 3, "CommandLine": "y"}'
        assert parse_windows_json(raw) == [ProcessRecord(9, 3, "y")]

    def test_oversized_number_in_payload(self) -> None:
        """A pid too long to convert drops that row, not the whole listing."""
        raw = (
            '[{"ProcessId": "' + "9" * 5000 + '", "CommandLine": "a"},'
            '{"ProcessId": 8, "ParentProcessId": 1, "CommandLine": "b"}]'
        )
        assert parse_windows_json(raw) == [ProcessRecord(8, 1, "b")]

    def test_empty_output(self) -> None:
        """Empty output is an empty result, not an error."""
        assert parse_windows_json("  \r\n") == []

    def test_empty_array(self) -> None:
        """No matching process gives an empty array."""
        assert parse_windows_json("[]") == []

    def test_no_json(self) -> None:
        """Non-JSON output is unrecognised."""
        assert parse_windows_json("Access is denied.") is None

    def test_invalid_items_skipped(self) -> None:
        """Rows without a pid or command line are dropped."""
        raw = (
            '[{"ProcessId":0,"CommandLine":"x"},'
            '{"ProcessId":5,"CommandLine":null},'
            '{"ProcessId":"6","ParentProcessId":null,"CommandLine":"ok"},'
            '"junk"]'
        )
        assert parse_windows_json(raw) == [ProcessRecord(6, 0, "ok")]


class TestParseWmicCsv:
    """Tests for legacy WMIC CSV output."""

    def test_with_node_column(self) -> None:
        """The Node column is dropped and commas in commands are kept."""
        raw = (
            "\r\n"
            "Node,CommandLine,ParentProcessId,ProcessId\r\n"
            "HOST,C:\\ls.exe --csrf_token=abc --flag=a,b,4000,4242\r\n"
        )
        assert parse_wmic_csv(raw) == [
            ProcessRecord(4242, 4000, "C:\\ls.exe --csrf_token=abc --flag=a,b"),
        ]

    def test_without_node_column(self) -> None:
        """Output without a Node column keeps the first column."""
        raw = "CommandLine,ParentProcessId,ProcessId\nC:\\x.exe,1,2\n"
        assert parse_wmic_csv(raw) == [ProcessRecord(2, 1, "C:\\x.exe")]

    def test_header_only(self) -> None:
        """A header with no rows is a recognised empty result."""
        assert parse_wmic_csv("Node,CommandLine,ParentProcessId,ProcessId\n") == []

    def test_unrecognised(self) -> None:
        """Arbitrary text is not WMIC output."""
        assert parse_wmic_csv("No Instance(s) Available.") is None

    def test_oversized_pid_skipped(self) -> None:
        """Overlong pid columns do not reach int conversion."""
        raw = "CommandLine,ParentProcessId,ProcessId\nC:\\x.exe,1," + "9" * 5000 + "\n"
        assert parse_wmic_csv(raw) == []


class TestParseListeningPorts:
    """Tests for socket tool output parsing."""

    def test_bare_ports(self) -> None:
        """Get-NetTCPConnection prints one port per line."""
        assert parse_listening_ports("42100\r\n42101\r\n42100\r\n") == [42100, 42101]

    def test_windows_netstat(self) -> None:
        """Rows owned by another pid are ignored."""
        raw = (
            "  TCP    127.0.0.1:42100    0.0.0.0:0    LISTENING    4242\n"
            "  TCP    [::1]:42101        [::]:0       LISTENING    4242\n"
            "  TCP    0.0.0.0:135        0.0.0.0:0    LISTENING    14242\n"
        )
        assert parse_listening_ports(raw, 4242) == [42100, 42101]

    def test_lsof(self) -> None:
        """lsof rows end with (LISTEN)."""
        raw = (
            "COMMAND    PID USER FD TYPE DEVICE SIZE/OFF NODE NAME\n"
            "language_ 4242 u    9u IPv4 0x1    0t0      TCP  127.0.0.1:42100 (LISTEN)\n"
            "language_ 4242 u   10u IPv6 0x2    0t0      TCP  *:42101 (LISTEN)\n"
            "other     5000 u    3u IPv4 0x3    0t0      TCP  *:8080 (LISTEN)\n"
        )
        assert parse_listening_ports(raw, 4242) == [42100, 42101]

    def test_ss(self) -> None:
        """ss rows name their owner as pid=N."""
        raw = (
            'LISTEN 0 4096 127.0.0.1:42100 0.0.0.0:* users:(("language_server",pid=4242,fd=9))\n'
            'LISTEN 0 4096 [::1]:42102 [::]:* users:(("language_server",pid=4242,fd=10))\n'
            'LISTEN 0 128 0.0.0.0:22 0.0.0.0:* users:(("sshd",pid=900,fd=3))\n'
        )
        assert parse_listening_ports(raw, 4242) == [42100, 42102]

    def test_linux_netstat(self) -> None:
        """netstat -tlnp rows end with pid/program."""
        raw = (
            "tcp   0 0 127.0.0.1:42100 0.0.0.0:* LISTEN 4242/language_serv\n"
            "tcp6  0 0 :::42103        :::*      LISTEN 4242/language_serv\n"
            "tcp   0 0 0.0.0.0:22      0.0.0.0:* LISTEN 900/sshd\n"
        )
        assert parse_listening_ports(raw, 4242) == [42100, 42103]

    def test_without_pid_filter(self) -> None:
        """Without a pid every listening row counts."""
        raw = "tcp 0 0 0.0.0.0:22 0.0.0.0:* LISTEN 900/sshd\n"
        assert parse_listening_ports(raw) == [22]

    def test_out_of_range_ignored(self) -> None:
        """Ports outside 1..65535 are dropped."""
        assert parse_listening_ports("0\n70000\n443\n") == [443]

    def test_oversized_port_ignored(self) -> None:
        """Very long digit runs are skipped in every supported format."""
        huge = "9" * 5000
        raw = (
            f"{huge}\n"
            f"  TCP    127.0.0.1:{huge}    0.0.0.0:0    LISTENING    4242\n"
            f"LISTEN 0 4096 127.0.0.1:{huge} 0.0.0.0:* users:((\"ls\",pid=4242,fd=9))\n"
            "LISTEN 0 4096 127.0.0.1:42100 0.0.0.0:* users:((\"ls\",pid=4242,fd=9))\n"
        )
        assert parse_listening_ports(raw, 4242) == [42100]

    def test_garbage(self) -> None:
        """Unrecognised lines yield nothing."""
        assert parse_listening_ports("Active Internet connections\nProto Recv-Q\n") == []
