"""Parsers for the text emitted by OS process and socket tools.

Each function takes raw tool output and returns structured data (or
``None`` when the output is not in the expected format at all). None of
them raise on malformed input: a line that cannot be understood is simply
skipped.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator

from lslocator.models import ProcessRecord

logger = logging.getLogger(__name__)

MAX_PORT = 65535
_MAX_DIGITS = 10

_PS_LINE_RE = re.compile(r"^\s*(\d{1,10})\s+(\d{1,10})\s+(.+)$")
_SS_PID_RE = re.compile(r"pid=(\d+)")


# ---------------------------------------------------------------------------
# Process listings
# ---------------------------------------------------------------------------


def parse_ps_output(raw: str) -> list[ProcessRecord]:
    """Parse ``ps -o pid,ppid,command`` output.

    The first two whitespace-separated tokens of each line are the pid and
    parent pid; the remainder is the command line. Header and garbage
    lines are skipped.
    """
    records: list[ProcessRecord] = []
    for line in raw.splitlines():
        match = _PS_LINE_RE.match(line)
        if not match:
            continue
        records.append(ProcessRecord(
            pid=int(match.group(1)),
            ppid=int(match.group(2)),
            command_line=match.group(3).strip(),
        ))
    return records


def _is_number(text: str) -> bool:
    """A short run of ASCII digits; ``str.isdigit`` also accepts superscripts.

    Runs longer than any pid or port are rejected before they reach
    ``int``, which refuses very long digit strings.
    """
    return len(text) <= _MAX_DIGITS and text.isascii() and text.isdigit()


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _iter_json_values(raw: str) -> Iterator[Any]:
    """Yield each JSON array or object embedded in ``raw``, in order.

    PowerShell profiles and ``chcp`` can print text ahead of the payload,
    and that text may itself contain brackets or even valid JSON. Every
    ``[``/``{`` is tried; after a successful decode the scan resumes past
    the decoded value.
    """
    decoder = json.JSONDecoder()
    index = 0
    while index < len(raw):
        if raw[index] not in "[{":
            index += 1
            continue
        try:
            value, end = decoder.raw_decode(raw, index)
        except ValueError:
            index += 1
            continue
        yield value
        index = end


def _process_items(value: Any) -> list[dict] | None:
    """Return the rows of a decoded value if it looks like process data."""
    items = value if isinstance(value, list) else [value]
    rows = [item for item in items if isinstance(item, dict)]
    if not any("ProcessId" in row for row in rows):
        return None
    return rows


def parse_windows_json(raw: str) -> list[ProcessRecord] | None:
    """Parse ``Win32_Process`` rows serialised by ``ConvertTo-Json``.

    Accepts an array, a single object (PowerShell unwraps one-element
    arrays), leading banner text, and empty output. The first decoded
    value carrying ``ProcessId`` rows is the payload; bracketed banner
    text before it is skipped.

    Returns:
        Parsed records, ``[]`` for an empty result, or None when the
        output contains no JSON payload.
    """
    text = raw.strip()
    if not text:
        return []

    decoded = False
    rows: list[dict] = []
    for value in _iter_json_values(text):
        decoded = True
        found = _process_items(value)
        if found is not None:
            rows = found
            break
    if not decoded:
        return None

    records: list[ProcessRecord] = []
    for item in rows:
        pid = _to_int(item.get("ProcessId"))
        command_line = item.get("CommandLine")
        if pid <= 0 or not isinstance(command_line, str) or not command_line:
            continue
        records.append(ProcessRecord(
            pid=pid,
            ppid=_to_int(item.get("ParentProcessId")),
            command_line=command_line,
        ))
    return records


def parse_wmic_csv(raw: str) -> list[ProcessRecord] | None:
    """Parse legacy ``wmic process get ... /format:csv`` output.

    The last two columns are ``ParentProcessId`` and ``ProcessId``; the
    columns before them (minus the leading ``Node`` column when the header
    declares one) are rejoined as the command line, since command lines
    may themselves contain commas.

    Returns:
        Parsed records, or None when no line has the expected shape.
    """
    records: list[ProcessRecord] = []
    has_node_column = False
    recognised = False

    for line in raw.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = line.split(",")
        lowered = line.lower()
        if "processid" in lowered and "commandline" in lowered:
            has_node_column = parts[0].strip().lower() == "node"
            recognised = True
            continue
        if len(parts) < 3:
            continue
        ppid_text, pid_text = parts[-2].strip(), parts[-1].strip()
        if not (_is_number(ppid_text) and _is_number(pid_text)):
            continue
        recognised = True
        leading = parts[1:-2] if has_node_column else parts[:-2]
        command_line = ",".join(leading).strip()
        if not command_line:
            continue
        records.append(ProcessRecord(
            pid=int(pid_text), ppid=int(ppid_text), command_line=command_line,
        ))

    return records if recognised else None


# ---------------------------------------------------------------------------
# Listening ports
# ---------------------------------------------------------------------------


def _port_from_address(address: str) -> int | None:
    """Extract the port from ``host:port``, ``*:port`` or ``[::1]:port``."""
    _, sep, port_text = address.rpartition(":")
    if not sep or not _is_number(port_text):
        return None
    port = int(port_text)
    return port if 0 < port <= MAX_PORT else None


def _parse_port_line(line: str, pid: int | None) -> int | None:
    """Return the listening port described by one tool output line."""
    if _is_number(line):
        port = int(line)
        return port if 0 < port <= MAX_PORT else None

    fields = line.split()
    if len(fields) < 2:
        return None
    wanted = str(pid) if pid is not None else None

    # netstat -ano (Windows): Proto Local Foreign State PID
    if fields[0].upper() == "TCP" and len(fields) >= 5 and fields[3] == "LISTENING":
        if wanted is not None and fields[4] != wanted:
            return None
        return _port_from_address(fields[1])

    # lsof: COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME (LISTEN)
    if fields[-1] == "(LISTEN)" and len(fields) >= 3:
        if wanted is not None and _is_number(fields[1]) and fields[1] != wanted:
            return None
        return _port_from_address(fields[-2])

    # ss -tlnp: State Recv-Q Send-Q Local Peer Process
    if fields[0] == "LISTEN" and len(fields) >= 4:
        owners = _SS_PID_RE.findall(line)
        if wanted is not None and owners and wanted not in owners:
            return None
        return _port_from_address(fields[3])

    # netstat -tlnp (Linux): Proto Recv-Q Send-Q Local Foreign State PID/Program
    if fields[0].startswith("tcp") and "LISTEN" in fields and len(fields) >= 4:
        owner = fields[-1].split("/", 1)[0]
        if wanted is not None and _is_number(owner) and owner != wanted:
            return None
        return _port_from_address(fields[3])

    return None


def parse_listening_ports(raw: str, pid: int | None = None) -> list[int]:
    """Parse listening ports from any supported socket tool's output.

    Understands bare port-per-line output, Windows ``netstat -ano``,
    ``lsof -iTCP -sTCP:LISTEN``, ``ss -tlnp`` and Linux ``netstat -tlnp``.
    Rows that name a different owning pid are ignored.

    Args:
        raw: Tool output.
        pid: Owning process id to keep, or None to keep every row.

    Returns:
        Deduplicated, ascending list of ports in ``(0, 65535]``.
    """
    ports: set[int] = set()
    for line in raw.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        port = _parse_port_line(stripped, pid)
        if port is not None:
            ports.add(port)
    return sorted(ports)
