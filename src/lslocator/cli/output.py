"""Rich output formatting helpers for the lslocator CLI.

Provides consistent terminal output for discovery results, probe results
and environment diagnostics.

Colour mapping:
    verified / success = bold green, not found / failure = bold red,
    secondary detail = dim
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lslocator.models import DiscoveryReport, ProbeResult, VerifiedEndpoint

console = Console()


def mask_token(token: str) -> str:
    """Show only the first and last four characters of a token."""
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}{'*' * (len(token) - 8)}{token[-4:]}"


def _status_text(success: bool) -> Text:
    if success:
        return Text("OK", style="bold green")
    return Text("FAIL", style="bold red")


def print_endpoint(endpoint: VerifiedEndpoint, *, show_token: bool = False) -> None:
    """Print a verified endpoint.

    Args:
        endpoint: The endpoint to display.
        show_token: Print the CSRF token in full instead of masked.
    """
    token = endpoint.token if show_token else mask_token(endpoint.token)
    body = Text.assemble(
        ("Host:  ", "bold"), (endpoint.host, ""), "\n",
        ("Port:  ", "bold"), (str(endpoint.port), ""), "\n",
        ("Token: ", "bold"), (token, "dim" if not show_token else ""),
    )
    console.print(Panel(body, title="Language Server Found", border_style="green"))


def print_not_found(report: DiscoveryReport) -> None:
    """Print a short summary after discovery failed."""
    console.print(
        f"[bold red]Language server not found[/bold red] after "
        f"{report.attempts_made} attempt(s): "
        f"{len(report.candidates)} candidate(s), {len(report.probes)} probe(s)."
    )


def print_report(report: DiscoveryReport) -> None:
    """Print every probe issued during discovery.

    Args:
        report: Diagnostics collected by a finder.
    """
    if not report.probes:
        console.print("[dim]No probes were issued.[/dim]")
        return

    table = Table(title="Probes", show_header=True, header_style="bold")
    table.add_column("PID", justify="right")
    table.add_column("Host")
    table.add_column("Port", justify="right")
    table.add_column("Scheme", style="dim")
    table.add_column("Status", justify="center")
    table.add_column("Detail", style="dim")

    for attempt in report.probes:
        result = attempt.result
        table.add_row(
            str(attempt.candidate.pid), attempt.host, str(attempt.port),
            result.protocol, _status_text(result.success),
            result.error or str(result.status_code),
        )
    console.print(table)


def print_probe_result(host: str, port: int, result: ProbeResult) -> None:
    """Print the outcome of a single gateway probe."""
    header = Text.assemble(
        ("Target: ", "bold"), (f"{host}:{port}", ""),
        ("  Status: ", "bold"), _status_text(result.success),
    )
    console.print(Panel(header, title="Gateway Probe"))
    console.print(f"  Protocol:    {result.protocol}")
    console.print(f"  HTTP status: {result.status_code or '-'}")
    if result.error:
        console.print(f"  Error:       [red]{result.error}[/red]")


def print_environment(rows: list[tuple[str, str]]) -> None:
    """Print environment diagnostics as a two-column table."""
    table = Table(title="Discovery Environment", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(key, value)
    console.print(table)
