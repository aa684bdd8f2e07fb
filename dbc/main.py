"""dbc - Main entry point."""

import json
import logging
import sys
from typing import List

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import render
from .commands import connections, history
from .config import get_connection_params, settings
from .database import Connection, create_connection
from .errors import DbcError
from .export import write_csv
from .repl.commands import RunRaw, clean_statement
from .repl.session import SessionOptions, SessionState
from .repl.shell import print_banner, print_farewell, run_shell
from .statement_log import get_statement_logger

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="dbc",
    help="Interactive SQL client for PostgreSQL, Oracle, MySQL and SQLite",
    add_completion=False,
)

app.command("connections")(connections.list_connections)
app.command("history")(history.show_history)

console = Console()
err_console = Console(stderr=True)

OUTPUT_FORMATS = ("table", "csv", "json")


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich at the configured level."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


def _fail(error: DbcError) -> None:
    logger.debug("Startup failed: %s", error.to_dict())
    err_console.print(f"[red]Error: {escape(error.message)}[/red]")
    raise typer.Exit(1)


def _open(identifier: str) -> Connection:
    try:
        params = get_connection_params(identifier)
        return create_connection(identifier, params)
    except DbcError as e:
        _fail(e)


@app.command()
def connect(
    identifier: str = typer.Argument(..., help="Connection identifier from the connections file"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="No banner, version or farewell"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Skip reading table names for completion"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Open an interactive session on a configured connection."""
    setup_logging(verbose)

    if not quiet:
        print_banner(console)

    connection = _open(identifier)
    with connection:
        try:
            version = connection.server_version()
        except DbcError as e:
            _fail(e)
        if not quiet:
            console.print(f"[green]Connected to version {escape(version)}[/green]")

        table_names: List[str] = []
        if not no_cache:
            console.print("[yellow]Reading DB schema...[/yellow]")
            try:
                table_names = [t.name for t in connection.list_tables()]
            except DbcError as e:
                logger.warning("Cannot read table names: %s", e.message)

        state = SessionState(options=SessionOptions.from_settings(settings))
        run_shell(
            connection,
            state,
            console,
            settings.history_file,
            table_names=table_names,
            statement_logger=get_statement_logger(),
        )

    if not quiet:
        print_farewell(console)


@app.command()
def query(
    identifier: str = typer.Argument(..., help="Connection identifier from the connections file"),
    sql: List[str] = typer.Argument(..., help="Statement to run (words are joined with spaces)"),
    output_format: str = typer.Option("table", "--format", "-f", help="table, csv or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Run one statement and print its result."""
    setup_logging(verbose)

    if output_format not in OUTPUT_FORMATS:
        err_console.print(f"[red]Error: Format not supported: {escape(output_format)}[/red]")
        raise typer.Exit(2)

    command = RunRaw(statement=clean_statement(" ".join(sql)))
    statement_logger = get_statement_logger()

    connection = _open(identifier)
    with connection:
        try:
            if not command.is_select:
                with statement_logger.log_statement(identifier, command.statement, "execute", connection.TAG) as ctx:
                    ctx.rows = connection.execute(command.statement)
                render.print_rows_affected(console, ctx.rows)
                return

            with statement_logger.log_statement(identifier, command.statement, "query", connection.TAG) as ctx:
                result = connection.query(command.statement)
                ctx.rows = len(result.rows)
        except DbcError as e:
            _fail(e)

    if output_format == "csv":
        write_csv(result, sys.stdout)
    elif output_format == "json":
        records = [dict(zip(result.column_names, row.data)) for row in result.rows]
        sys.stdout.write(json.dumps(records, indent=2) + "\n")
    else:
        render.print_result(console, result, settings.row_limit, settings.column_limit)


@app.command()
def config():
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Connections file: {settings.connections_file}")
    console.print(f"  History file: {settings.history_file}")
    console.print(f"  Row limit: {settings.row_limit}")
    console.print(f"  Column limit: {settings.column_limit}")
    console.print(f"  Statement logging: {'Enabled' if settings.statement_logging_enabled else 'Disabled'}")
    console.print(f"  Statement log: {settings.statement_log_db_path or '~/.dbc/statements.db'}")
    console.print(f"  Retention: {settings.statement_log_retention_days} days")
    console.print(f"  Log level: {settings.log_level}")


@app.callback()
def main():
    """
    dbc - one client for PostgreSQL, Oracle, MySQL and SQLite.

    Connections are read from ~/.dbc.yml (identifier -> type, url, username, password, dbname).

    Examples:

        dbc connect prod

        dbc query local "select * from users" --format csv

        dbc history --stats
    """
    pass


if __name__ == "__main__":
    app()
