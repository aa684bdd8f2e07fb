"""Executes parsed REPL commands against one open connection."""

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .. import render
from ..database.base import Connection
from ..errors import DbcError
from ..export import check_target, export_result, is_stdout
from ..statement_log import StatementLogger
from .commands import (
    COMMAND_HELP,
    Command,
    Describe,
    Empty,
    Export,
    Help,
    ListQueries,
    ListTables,
    RunRaw,
    RunSaved,
    Search,
    SetOption,
    ShowAll,
    ShowLast,
    Unknown,
    parse_command,
)
from .session import ALL_ROW_LIMIT, LIST_ROW_LIMIT, SessionState

logger = logging.getLogger(__name__)

NO_LAST_QUERY = "No last query."


class Dispatcher:
    """Runs one input line at a time.

    Errors raised while handling a line are printed and the session goes
    on; nothing below :meth:`handle_line` prints error messages itself.
    """

    def __init__(
        self,
        connection: Connection,
        state: SessionState,
        console: Console,
        statement_logger: Optional[StatementLogger] = None,
    ):
        self.connection = connection
        self.state = state
        self.console = console
        self.statement_logger = statement_logger or StatementLogger(enabled=False)

    def handle_line(self, line: str) -> None:
        """Parse and run one line, reporting any error inline."""
        try:
            self.dispatch(parse_command(line))
        except DbcError as e:
            logger.debug("Command failed: %s", e.to_dict())
            self.console.print(f"[red]Error: {escape(e.message)}[/red]")

    def dispatch(self, command: Command) -> None:
        if isinstance(command, Empty):
            return
        if isinstance(command, SetOption):
            setattr(self.state.options, command.key, command.value)
            self.console.print(f"[dim]{command.key} = {command.value}[/dim]")
        elif isinstance(command, ShowLast):
            self._rerun_last(LIST_ROW_LIMIT)
        elif isinstance(command, ShowAll):
            self._rerun_last(ALL_ROW_LIMIT)
        elif isinstance(command, Export):
            self._export(command)
        elif isinstance(command, RunSaved):
            self._run_saved(command.name)
        elif isinstance(command, RunRaw):
            self._run_raw(command)
        elif isinstance(command, Describe):
            render.print_description(self.console, self.connection.describe(command.name))
        elif isinstance(command, Search):
            render.print_search_results(self.console, self.connection.search(command.pattern))
        elif isinstance(command, ListTables):
            render.print_table_refs(self.console, self.connection.list_tables())
        elif isinstance(command, ListQueries):
            render.print_standard_queries(self.console, self.connection.standard_queries())
        elif isinstance(command, Help):
            self._print_help()
        elif isinstance(command, Unknown):
            self.console.print(f"[red]ERROR: Unsupported command {escape(command.word)}[/red]")
        else:
            raise TypeError(f"Unhandled command {command!r}")

    def _query_and_print(self, statement: str, row_limit: int) -> None:
        with self.statement_logger.log_statement(
            self.connection.identifier, statement, "query", self.connection.TAG
        ) as ctx:
            result = self.connection.query(statement)
            ctx.rows = len(result.rows)
        render.print_result(self.console, result, row_limit, self.state.options.column_limit)

    def _rerun_last(self, row_limit: int) -> None:
        if self.state.last_select is None:
            self.console.print(NO_LAST_QUERY)
            return
        self._query_and_print(self.state.last_select, row_limit)

    def _run_saved(self, name: str) -> None:
        saved = self.connection.find_standard_query(name)
        if saved is None:
            self.console.print(f"Query not found {escape(name)}")
            return
        self._query_and_print(saved.query, ALL_ROW_LIMIT)

    def _run_raw(self, command: RunRaw) -> None:
        if command.is_select:
            self._query_and_print(command.statement, self.state.options.row_limit)
            self.state.last_select = command.statement
            return

        with self.statement_logger.log_statement(
            self.connection.identifier, command.statement, "execute", self.connection.TAG
        ) as ctx:
            ctx.rows = self.connection.execute(command.statement)
        render.print_rows_affected(self.console, ctx.rows)

    def _export(self, command: Export) -> None:
        if self.state.last_select is None:
            self.console.print(NO_LAST_QUERY)
            return
        check_target(command.format, command.target)

        statement = self.state.last_select
        with self.statement_logger.log_statement(
            self.connection.identifier, statement, "export", self.connection.TAG
        ) as ctx:
            result = self.connection.query(statement)
            ctx.rows = export_result(command.format, result, statement, command.target, self.console.file)
        if not is_stdout(command.target):
            self.console.print(f"[green]Exported {ctx.rows} rows to {escape(command.target)}[/green]")

    def _print_help(self) -> None:
        for usage in COMMAND_HELP.values():
            self.console.print(f"  {escape(usage)}")
        self.console.print("  @<name>                           run a standard query")
        self.console.print("  <sql>                             run a statement")
