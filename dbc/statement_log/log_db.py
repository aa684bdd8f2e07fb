"""Database operations for statement logging."""

import sqlite3
import logging
from pathlib import Path
from typing import Optional, List, Dict, Any
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)


# SQL schema for statement logging
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS statements (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    statement_id TEXT UNIQUE NOT NULL,
    timestamp TEXT NOT NULL,
    identifier TEXT NOT NULL,
    backend TEXT,
    statement TEXT NOT NULL,
    kind TEXT NOT NULL,  -- 'query', 'execute', 'export'
    status TEXT DEFAULT 'started',  -- 'started', 'success', 'error'
    rows INTEGER,
    duration_ms INTEGER,

    -- Error information
    error_message TEXT,
    error_type TEXT
);

CREATE INDEX IF NOT EXISTS idx_statements_timestamp ON statements(timestamp);
CREATE INDEX IF NOT EXISTS idx_statements_identifier ON statements(identifier);
CREATE INDEX IF NOT EXISTS idx_statements_status ON statements(status);
"""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_default_log_db_path() -> str:
    """Get the default database path (~/.dbc/statements.db)."""
    dbc_dir = Path.home() / ".dbc"
    dbc_dir.mkdir(exist_ok=True)
    return str(dbc_dir / "statements.db")


class StatementLogDatabase:
    """SQLite database for statement logging."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses default.
        """
        self.db_path = db_path or get_default_log_db_path()
        self._connection: Optional[sqlite3.Connection] = None
        self._initialized = False

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                isolation_level=None,  # Auto-commit mode
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        try:
            conn = self._get_connection()
            conn.executescript(SCHEMA_SQL)
            self._initialized = True
            logger.debug("Statement log database initialized at %s", self.db_path)
        except sqlite3.Error as e:
            logger.error("Failed to initialize statement log database: %s", e)
            raise

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def insert_statement(
        self,
        statement_id: str,
        identifier: str,
        statement: str,
        kind: str,
        backend: Optional[str] = None,
    ) -> int:
        """Insert a new statement entry.

        Args:
            statement_id: Unique identifier for this execution
            identifier: Connection identifier from the connections file
            statement: Statement text as executed
            kind: 'query', 'execute' or 'export'
            backend: Backend tag ('pg', 'ora', 'my', 'sqlite')

        Returns:
            The row ID of the inserted entry
        """
        self.initialize()
        conn = self._get_connection()

        cursor = conn.execute(
            """
            INSERT INTO statements (
                statement_id, timestamp, identifier, backend, statement, kind, status
            )
            VALUES (?, ?, ?, ?, ?, ?, 'started')
            """,
            (statement_id, _utc_now().isoformat(), identifier, backend, statement, kind),
        )
        return cursor.lastrowid

    def update_success(self, statement_id: str, rows: Optional[int], duration_ms: int) -> None:
        """Mark statement as successful.

        Args:
            statement_id: Statement identifier
            rows: Rows returned, affected or exported
            duration_ms: Total duration in milliseconds
        """
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE statements
            SET status = 'success', rows = ?, duration_ms = ?
            WHERE statement_id = ?
            """,
            (rows, duration_ms, statement_id),
        )

    def update_error(
        self,
        statement_id: str,
        error_message: str,
        error_type: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> None:
        """Mark statement as failed with error details."""
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE statements
            SET status = 'error', error_message = ?, error_type = ?, duration_ms = ?
            WHERE statement_id = ?
            """,
            (error_message, error_type, duration_ms, statement_id),
        )

    def query_statements(
        self,
        identifier: Optional[str] = None,
        status: Optional[str] = None,
        since_hours: int = 24,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query statement entries with optional filters.

        Args:
            identifier: Filter by connection identifier
            status: Filter by status
            since_hours: Look back N hours (default 24)
            limit: Maximum number of results
            offset: Offset for pagination

        Returns:
            List of statement entries as dictionaries, newest first
        """
        self.initialize()
        conn = self._get_connection()

        conditions = []
        params = []

        # Time filter
        since_time = _utc_now() - timedelta(hours=since_hours)
        conditions.append("timestamp >= ?")
        params.append(since_time.isoformat())

        if identifier:
            conditions.append("identifier = ?")
            params.append(identifier)

        if status:
            conditions.append("status = ?")
            params.append(status)

        where_clause = " AND ".join(conditions)
        params.extend([limit, offset])

        query = f"""
            SELECT * FROM statements
            WHERE {where_clause}
            ORDER BY timestamp DESC, id DESC
            LIMIT ? OFFSET ?
        """

        cursor = conn.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]

    def get_stats(self, since_hours: int = 24) -> Dict[str, Any]:
        """Get statistics about logged statements.

        Args:
            since_hours: Look back N hours

        Returns:
            Dict with statistics
        """
        self.initialize()
        conn = self._get_connection()

        since = (_utc_now() - timedelta(hours=since_hours)).isoformat()

        cursor = conn.execute(
            """
            SELECT
                COUNT(*) as total,
                SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) as success_count,
                SUM(CASE WHEN status = 'error' THEN 1 ELSE 0 END) as error_count,
                AVG(duration_ms) as avg_duration_ms
            FROM statements
            WHERE timestamp >= ?
            """,
            (since,),
        )
        row = cursor.fetchone()

        # Counts by connection
        cursor = conn.execute(
            """
            SELECT identifier, backend, COUNT(*) as count,
                   SUM(CASE WHEN status = 'error' THEN 1 ELSE 0 END) as errors
            FROM statements
            WHERE timestamp >= ?
            GROUP BY identifier, backend
            ORDER BY count DESC
            """,
            (since,),
        )
        by_identifier = [dict(r) for r in cursor.fetchall()]

        # Recent errors
        cursor = conn.execute(
            """
            SELECT statement_id, timestamp, identifier, statement, error_message, error_type
            FROM statements
            WHERE timestamp >= ? AND status = 'error'
            ORDER BY timestamp DESC
            LIMIT 5
            """,
            (since,),
        )
        recent_errors = [dict(r) for r in cursor.fetchall()]

        return {
            "total_statements": row["total"] or 0,
            "success_count": row["success_count"] or 0,
            "error_count": row["error_count"] or 0,
            "avg_duration_ms": round(row["avg_duration_ms"] or 0, 2),
            "since_hours": since_hours,
            "by_identifier": by_identifier,
            "recent_errors": recent_errors,
        }

    def cleanup_old_statements(self, retention_days: int = 30) -> int:
        """Delete statements older than retention period.

        Returns:
            Number of deleted rows
        """
        self.initialize()
        conn = self._get_connection()

        cutoff_time = _utc_now() - timedelta(days=retention_days)
        cursor = conn.execute(
            "DELETE FROM statements WHERE timestamp < ?",
            (cutoff_time.isoformat(),),
        )

        deleted = cursor.rowcount
        if deleted > 0:
            logger.info("Cleaned up %d old statement log entries", deleted)

        return deleted

    def __enter__(self):
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
