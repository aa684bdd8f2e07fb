"""Statement logging module for dbc.

Records every statement run from a session in a local SQLite database
for auditing and for ``dbc history``.
"""

from dbc.statement_log.log_db import StatementLogDatabase, get_default_log_db_path
from dbc.statement_log.log_service import (
    StatementContext,
    StatementLogger,
    get_statement_logger,
)

__all__ = [
    "StatementLogDatabase",
    "get_default_log_db_path",
    "StatementContext",
    "StatementLogger",
    "get_statement_logger",
]
