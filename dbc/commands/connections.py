"""Connection listing command."""

import typer
from typing import Optional
from rich.console import Console
from rich.table import Table

from ..config import load_connections, settings
from ..errors import DbcError

console = Console()


def list_connections(
    path: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Connections file (default: DBC_CONNECTIONS_FILE or ~/.dbc.yml)",
    ),
):
    """List configured connection identifiers."""
    try:
        connections = load_connections(path)
    except DbcError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    if not connections:
        console.print(f"[yellow]No connections configured in {path or settings.connections_file}.[/yellow]")
        return

    table = Table(title="Connections")
    table.add_column("Identifier", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("URL")
    table.add_column("Database")
    table.add_column("Username")

    for identifier, params in sorted(connections.items()):
        table.add_row(
            identifier,
            params.type.value,
            params.url or "",
            params.dbname or "",
            params.username or "",
        )

    console.print(table)
