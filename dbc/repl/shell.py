"""Interactive read-eval-print loop."""

import logging
from pathlib import Path
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.lexers import PygmentsLexer
from pygments.lexers.sql import SqlLexer
from rich.console import Console

from ..database.base import Connection
from ..statement_log import StatementLogger
from .completion import DbcCompleter
from .dispatcher import Dispatcher
from .session import SessionState

logger = logging.getLogger(__name__)


def print_banner(console: Console) -> None:
    console.print("*" * 60)
    console.print("* Welcome to dbc")
    console.print("*" * 60)
    console.print()


def print_farewell(console: Console) -> None:
    console.print()
    console.print("Thank you for using dbc.")


def build_prompt_session(history_file: str, completer: DbcCompleter) -> PromptSession:
    history_path = Path(history_file).expanduser()
    history_path.parent.mkdir(parents=True, exist_ok=True)
    return PromptSession(
        history=FileHistory(str(history_path)),
        lexer=PygmentsLexer(SqlLexer),
        completer=completer,
    )


def run_shell(
    connection: Connection,
    state: SessionState,
    console: Console,
    history_file: str,
    table_names: Optional[List[str]] = None,
    statement_logger: Optional[StatementLogger] = None,
) -> None:
    """Read lines until EOF or interrupt, running each through the dispatcher."""
    completer = DbcCompleter(
        table_names or [],
        [q.name for q in connection.standard_queries()],
    )
    session = build_prompt_session(history_file, completer)
    dispatcher = Dispatcher(connection, state, console, statement_logger)

    while True:
        try:
            line = session.prompt(connection.prompt())
        except (EOFError, KeyboardInterrupt):
            logger.debug("Session ended by user")
            break
        dispatcher.handle_line(line)
