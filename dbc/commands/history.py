"""Statement history command."""

import typer
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..statement_log import get_statement_logger

console = Console()

STATEMENT_WIDTH = 60


def _shorten(text: str, width: int = STATEMENT_WIDTH) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def _print_stats(stats: dict) -> None:
    if "error" in stats:
        console.print(f"[yellow]{stats['error']}[/yellow]")
        return

    console.print(f"[bold]Statements in the last {stats['since_hours']} hours[/bold]")
    console.print(f"  Total: {stats['total_statements']}")
    console.print(f"  Succeeded: [green]{stats['success_count']}[/green]")
    console.print(f"  Failed: [red]{stats['error_count']}[/red]")
    console.print(f"  Average duration: {stats['avg_duration_ms']} ms")

    if stats["by_identifier"]:
        table = Table(title="By connection")
        table.add_column("Identifier", style="cyan")
        table.add_column("Backend", style="green")
        table.add_column("Statements", justify="right")
        table.add_column("Errors", justify="right")
        for entry in stats["by_identifier"]:
            table.add_row(
                entry["identifier"],
                entry["backend"] or "",
                str(entry["count"]),
                str(entry["errors"] or 0),
            )
        console.print(table)

    if stats["recent_errors"]:
        console.print("[bold]Recent errors[/bold]")
        for entry in stats["recent_errors"]:
            console.print(
                f"  [dim]{entry['timestamp']}[/dim] {entry['identifier']}: "
                f"[red]{escape(entry['error_message'] or '')}[/red]"
            )


def show_history(
    identifier: Optional[str] = typer.Option(None, "--identifier", "-i", help="Only this connection"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="success, error or started"),
    hours: int = typer.Option(24, "--hours", help="Look back this many hours"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum number of statements"),
    stats: bool = typer.Option(False, "--stats", help="Show aggregate counts instead"),
):
    """Show statements recorded by the statement log."""
    statement_logger = get_statement_logger()
    if not statement_logger.enabled:
        console.print("[yellow]Statement logging is disabled (DBC_STATEMENT_LOGGING_ENABLED).[/yellow]")
        return

    if stats:
        _print_stats(statement_logger.get_stats(since_hours=hours))
        return

    entries = statement_logger.query_statements(
        identifier=identifier,
        status=status,
        since_hours=hours,
        limit=limit,
    )
    if not entries:
        console.print("[yellow]No statements found.[/yellow]")
        return

    table = Table(title=f"Statements (last {hours} hours)")
    table.add_column("Time", style="dim")
    table.add_column("Connection", style="cyan")
    table.add_column("Kind")
    table.add_column("Status")
    table.add_column("Rows", justify="right")
    table.add_column("ms", justify="right")
    table.add_column("Statement")

    status_styles = {"success": "green", "error": "red"}
    for entry in entries:
        entry_status = entry["status"]
        style = status_styles.get(entry_status, "yellow")
        table.add_row(
            entry["timestamp"][:19].replace("T", " "),
            entry["identifier"],
            entry["kind"],
            f"[{style}]{entry_status}[/{style}]",
            "" if entry["rows"] is None else str(entry["rows"]),
            "" if entry["duration_ms"] is None else str(entry["duration_ms"]),
            escape(_shorten(entry["statement"])),
        )

    console.print(table)
