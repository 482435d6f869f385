"""Command-line signature extraction for the language server process.

The language server publishes nothing on disk: its port and CSRF token only
appear in its own argument list. These pure functions turn one process's
command line into a ``ServerCandidate`` (or nothing).

Recognised markers::

    --extension_server_port=<digits>
    --csrf_token=<token>          (letters, digits, '-', '_', '.')
    --workspace_id=<id>           (optional)
    --app_data_dir=<path>         (strict mode: must name the product)

Values may be separated from the marker by ``=`` or whitespace, and may be
wrapped in single or double quotes. A value that itself starts with ``--``
is the next flag, not a value.
"""

from __future__ import annotations

import re

from lslocator.models import ProcessRecord, ServerCandidate

PORT_MARKER = "--extension_server_port"
TOKEN_MARKER = "--csrf_token"
WORKSPACE_MARKER = "--workspace_id"
APP_DATA_MARKER = "--app_data_dir"

# Generic signature searched by ambient discovery.
DEFAULT_SIGNATURE = "csrf_token"

_PORT_RE = re.compile(r"""--extension_server_port[=\s]+["']?(\d+)""")
_TOKEN_RE = re.compile(
    r"""--csrf_token[=\s]+["']?(?!--)([A-Za-z0-9\-_.]+)["']?"""
)
_WORKSPACE_RE = re.compile(
    r"""--workspace_id[=\s]+["']?(?!--)([A-Za-z0-9\-_.]+)["']?"""
)
# Quoted paths may contain spaces; unquoted ones stop at whitespace.
_APP_DATA_RE = re.compile(
    r"""--app_data_dir[=\s]+(?:"([^"]*)"|'([^']*)'|(\S+))"""
)

_MAX_PORT = 65535


def extract_port(command_line: str) -> int:
    """Return the ``--extension_server_port`` value, or 0 if unusable."""
    match = _PORT_RE.search(command_line)
    if not match:
        return 0
    digits = match.group(1)
    if len(digits) > len(str(_MAX_PORT)):
        return 0
    port = int(digits)
    return port if 0 < port <= _MAX_PORT else 0


def extract_token(command_line: str) -> str | None:
    """Return the ``--csrf_token`` value, or None."""
    match = _TOKEN_RE.search(command_line)
    return match.group(1) if match else None


def extract_workspace_id(command_line: str) -> str | None:
    """Return the ``--workspace_id`` value, or None."""
    match = _WORKSPACE_RE.search(command_line)
    return match.group(1) if match else None


def extract_app_data_dir(command_line: str) -> str | None:
    """Return the ``--app_data_dir`` value with quotes removed, or None."""
    match = _APP_DATA_RE.search(command_line)
    if not match:
        return None
    return next(g for g in match.groups() if g is not None)


def app_data_dir_matches(command_line: str, product_name: str) -> bool:
    """Check that ``--app_data_dir`` names the product (case-insensitive)."""
    app_data_dir = extract_app_data_dir(command_line)
    if not app_data_dir:
        return False
    return product_name.lower() in app_data_dir.lower()


def matches_signature(command_line: str, signature: str = DEFAULT_SIGNATURE) -> bool:
    """Plain substring test used to pre-filter the full process list."""
    return bool(signature) and signature in command_line


def extract_candidate(
    record: ProcessRecord,
    *,
    strict: bool = True,
    product_name: str = "antigravity",
) -> ServerCandidate | None:
    """Turn a process record into a server candidate.

    Args:
        record: Raw process metadata.
        strict: Require ``--app_data_dir`` to reference ``product_name``.
        product_name: Expected product name for strict matching.

    Returns:
        A ``ServerCandidate`` when both the port and token markers are
        present and a token value can be read, otherwise None.
    """
    cmd = record.command_line
    if PORT_MARKER not in cmd or TOKEN_MARKER not in cmd:
        return None

    token = extract_token(cmd)
    if not token:
        return None

    if strict and not app_data_dir_matches(cmd, product_name):
        return None

    return ServerCandidate(
        pid=record.pid,
        ppid=record.ppid,
        port=extract_port(cmd),
        token=token,
        workspace_id=extract_workspace_id(cmd),
    )


def extract_candidates(
    records: list[ProcessRecord],
    *,
    strict: bool = True,
    product_name: str = "antigravity",
) -> list[ServerCandidate]:
    """Apply ``extract_candidate`` to each record, preserving order."""
    candidates: list[ServerCandidate] = []
    for record in records:
        candidate = extract_candidate(
            record, strict=strict, product_name=product_name,
        )
        if candidate is not None:
            candidates.append(candidate)
    return candidates
