"""Statement logging service for dbc.

Provides a high-level interface for recording statements run from a
session. Failures to write the log are reported as warnings and never
interrupt the session.
"""

import logging
import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from dbc.statement_log.log_db import StatementLogDatabase

logger = logging.getLogger(__name__)

# Global logger instance
_statement_logger: Optional["StatementLogger"] = None

_LOG_ERRORS = (sqlite3.Error, OSError)


def get_statement_logger() -> "StatementLogger":
    """Get or create the global statement logger from settings."""
    global _statement_logger
    if _statement_logger is None:
        from dbc.config import settings

        _statement_logger = StatementLogger(
            db_path=settings.statement_log_db_path,
            enabled=settings.statement_logging_enabled,
            retention_days=settings.statement_log_retention_days,
        )
    return _statement_logger


@dataclass
class StatementContext:
    """Context for one logged statement."""

    statement_id: str
    identifier: str
    statement: str
    kind: str
    backend: Optional[str] = None
    start_time: float = field(default_factory=time.time)

    # Filled in by the caller
    rows: Optional[int] = None


class StatementLogger:
    """High-level logger for statements.

    Example usage:
        statement_logger = get_statement_logger()

        with statement_logger.log_statement("prod", "select 1", "query", "pg") as ctx:
            result = connection.query("select 1")
            ctx.rows = len(result.rows)
    """

    def __init__(self, db_path: Optional[str] = None, enabled: bool = True, retention_days: int = 30):
        """Initialize the statement logger.

        Args:
            db_path: Path to the SQLite database. If None, uses default.
            enabled: Whether logging is enabled.
            retention_days: Entries older than this are purged on start-up.
        """
        self.enabled = enabled
        self._db: Optional[StatementLogDatabase] = None

        if self.enabled:
            try:
                self._db = StatementLogDatabase(db_path)
                self._db.initialize()
                self._db.cleanup_old_statements(retention_days)
            except _LOG_ERRORS as e:
                logger.warning("Failed to initialize statement logging: %s", e)
                self.enabled = False
                self._db = None

    @property
    def db(self) -> Optional[StatementLogDatabase]:
        """Get the database instance."""
        return self._db

    @contextmanager
    def log_statement(
        self,
        identifier: str,
        statement: str,
        kind: str,
        backend: Optional[str] = None,
    ) -> Iterator[StatementContext]:
        """Context manager for logging one statement.

        Args:
            identifier: Connection identifier
            statement: Statement text
            kind: 'query', 'execute' or 'export'
            backend: Backend tag

        Yields:
            StatementContext whose ``rows`` the caller sets
        """
        ctx = StatementContext(
            statement_id=uuid.uuid4().hex[:12],
            identifier=identifier,
            statement=statement,
            kind=kind,
            backend=backend,
        )

        if not self.enabled or self._db is None:
            yield ctx
            return

        try:
            self._db.insert_statement(
                statement_id=ctx.statement_id,
                identifier=identifier,
                statement=statement,
                kind=kind,
                backend=backend,
            )
        except _LOG_ERRORS as e:
            logger.warning("Failed to log statement start: %s", e)

        try:
            yield ctx
        except Exception as e:
            duration_ms = int((time.time() - ctx.start_time) * 1000)
            try:
                self._db.update_error(
                    statement_id=ctx.statement_id,
                    error_message=str(e),
                    error_type=type(e).__name__,
                    duration_ms=duration_ms,
                )
            except _LOG_ERRORS as log_err:
                logger.warning("Failed to log statement error: %s", log_err)

            logger.debug("Statement %s failed after %dms: %s", ctx.statement_id, duration_ms, e)

            # Re-raise the original exception
            raise

        duration_ms = int((time.time() - ctx.start_time) * 1000)
        try:
            self._db.update_success(ctx.statement_id, ctx.rows, duration_ms)
        except _LOG_ERRORS as e:
            logger.warning("Failed to log statement result: %s", e)

        logger.debug("Statement %s completed in %dms", ctx.statement_id, duration_ms)

    def query_statements(
        self,
        identifier: Optional[str] = None,
        status: Optional[str] = None,
        since_hours: int = 24,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """Query logged statements with optional filters."""
        if not self.enabled or not self._db:
            return []

        return self._db.query_statements(
            identifier=identifier,
            status=status,
            since_hours=since_hours,
            limit=limit,
        )

    def get_stats(self, since_hours: int = 24) -> Dict[str, Any]:
        """Get statistics about logged statements."""
        if not self.enabled or not self._db:
            return {"error": "Statement logging not enabled"}

        return self._db.get_stats(since_hours=since_hours)

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
