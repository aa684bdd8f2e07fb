"""PostgreSQL connection."""

import logging
import re
from typing import List, Optional, Tuple

from ..config import DatabaseType
from ..errors import ConnectionError, ObjectNotFoundError
from .base import Connection
from .models import (
    CatalogObject,
    ColumnInfo,
    ForeignKey,
    ObjectDescription,
    ObjectKind,
    SequenceInfo,
    StandardQuery,
    TableRef,
)
from .normalizers import PostgresNormalizer, parse_pg_interval

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"//([^/:]+):(\d+)/(\w+)$")

INTERVAL_OID = 1186

RELKINDS = {
    "r": ObjectKind.TABLE,
    "p": ObjectKind.TABLE,
    "v": ObjectKind.VIEW,
    "i": ObjectKind.INDEX,
    "S": ObjectKind.SEQUENCE,
    "m": ObjectKind.MATERIALIZED_VIEW,
}

TABLE_COLUMNS_SQL = """
    SELECT
        column_name,
        data_type,
        character_maximum_length,
        numeric_precision,
        is_nullable,
        column_default
    FROM information_schema.columns
    WHERE table_name = %s
    ORDER BY ordinal_position
"""

FOREIGN_KEYS_SQL = """
    SELECT
        kcu.column_name,
        ccu.table_schema AS foreign_table_schema,
        ccu.table_name AS foreign_table_name,
        ccu.column_name AS foreign_column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON tc.constraint_name = kcu.constraint_name
      AND tc.table_schema = kcu.table_schema
    JOIN information_schema.constraint_column_usage ccu
      ON ccu.constraint_name = tc.constraint_name
      AND ccu.table_schema = tc.table_schema
    WHERE tc.constraint_type = 'FOREIGN KEY'
      AND tc.table_name = %s
    ORDER BY kcu.column_name
"""

SEQUENCE_SQL = """
    SELECT sequencename, start_value, min_value, max_value, increment_by, last_value
    FROM pg_sequences
    WHERE sequencename = %s
"""

LOCKS_SQL = """
select blocked.pid as blocked_pid,
       blocked_activity.usename as blocked_user,
       blocking.pid as blocking_pid,
       blocking_activity.usename as blocking_user,
       blocked.locktype,
       blocked.relation::regclass::text as relation,
       blocked_activity.query as blocked_statement,
       blocking_activity.query as blocking_statement
from pg_catalog.pg_locks blocked
join pg_catalog.pg_stat_activity blocked_activity on blocked_activity.pid = blocked.pid
join pg_catalog.pg_locks blocking
  on blocking.locktype = blocked.locktype
 and blocking.database is not distinct from blocked.database
 and blocking.relation is not distinct from blocked.relation
 and blocking.page is not distinct from blocked.page
 and blocking.tuple is not distinct from blocked.tuple
 and blocking.virtualxid is not distinct from blocked.virtualxid
 and blocking.transactionid is not distinct from blocked.transactionid
 and blocking.classid is not distinct from blocked.classid
 and blocking.objid is not distinct from blocked.objid
 and blocking.objsubid is not distinct from blocked.objsubid
 and blocking.pid != blocked.pid
join pg_catalog.pg_stat_activity blocking_activity on blocking_activity.pid = blocking.pid
where not blocked.granted
"""

QUERIES_SQL = """
select pid,
       usename,
       application_name,
       client_addr::text as client_addr,
       now() - query_start as running_for,
       wait_event_type,
       query
from pg_stat_activity
where state = 'active'
  and pid != pg_backend_pid()
order by query_start
"""

SIZES_SQL = """
select n.nspname as schema,
       c.relname as name,
       pg_size_pretty(pg_total_relation_size(c.oid)) as total_size,
       pg_size_pretty(pg_relation_size(c.oid)) as table_size,
       pg_size_pretty(pg_indexes_size(c.oid)) as index_size
from pg_class c
join pg_namespace n on n.oid = c.relnamespace
where c.relkind in ('r', 'm')
  and n.nspname not in ('pg_catalog', 'information_schema')
order by pg_total_relation_size(c.oid) desc
"""

SESSIONS_SQL = """
select usename,
       application_name,
       state,
       count(*) as sessions
from pg_stat_activity
group by usename, application_name, state
order by count(*) desc
"""


def parse_url(url: Optional[str]) -> Tuple[str, int, str]:
    """Split a ``//host:port/dbname`` URL.

    Raises:
        ConnectionError: if the URL does not match
    """
    match = URL_PATTERN.search(url or "")
    if not match:
        raise ConnectionError(
            f"Format of Postgres URL needs to be //host:port/dbname, got {url!r}",
            details={"url": url},
        )
    return match.group(1), int(match.group(2)), match.group(3)


def _cast_interval(value, cursor):
    return parse_pg_interval(value)


def _text(value) -> Optional[str]:
    return None if value is None else str(value)


class PostgresConnection(Connection):
    """Connection to PostgreSQL through psycopg2."""

    DB_TYPE = DatabaseType.POSTGRES
    TAG = "pg"
    NORMALIZER = PostgresNormalizer
    STANDARD_QUERIES = [
        StandardQuery(name="locks", query=LOCKS_SQL),
        StandardQuery(name="queries", query=QUERIES_SQL),
        StandardQuery(name="sizes", query=SIZES_SQL),
        StandardQuery(name="sessions", query=SESSIONS_SQL),
    ]

    def connect(self):
        """Connect to PostgreSQL."""
        if self._connection is not None:
            return self._connection

        host, port, dbname = parse_url(self.params.url)

        try:
            import psycopg2
            import psycopg2.extensions
        except ImportError:
            raise ImportError(
                "psycopg2 is required for Postgres connections. "
                "Install it with: pip install psycopg2-binary"
            )

        try:
            conn = psycopg2.connect(
                host=host,
                port=port,
                user=self.params.username,
                password=self.params.password,
                dbname=dbname,
            )
        except psycopg2.Error as e:
            raise ConnectionError(
                f"Cannot connect to Postgres at {host}:{port}/{dbname}: {str(e).strip()}",
                details={"host": host, "port": port, "dbname": dbname},
            ) from e

        conn.autocommit = True
        interval = psycopg2.extensions.new_type((INTERVAL_OID,), "DBC_INTERVAL", _cast_interval)
        psycopg2.extensions.register_type(interval, conn)
        with conn.cursor() as cursor:
            cursor.execute("SET intervalstyle = 'postgres'")

        self.driver_error = (psycopg2.Error,)
        self._connection = conn
        logger.info("Postgres connected: %s@%s:%s/%s", self.params.username, host, port, dbname)
        return self._connection

    def server_version(self) -> str:
        rows = self._fetch("show server_version")
        return str(rows[0][0]) if rows else "unknown"

    def list_tables(self) -> List[TableRef]:
        rows = self._fetch(
            "SELECT table_schema, table_name FROM information_schema.tables "
            "ORDER BY table_schema, table_name"
        )
        return [TableRef(schema=r[0].lower(), name=r[1].lower()) for r in rows]

    def describe(self, object_name: str) -> ObjectDescription:
        name = object_name.lower()
        rows = self._fetch(
            "SELECT relkind::text FROM pg_class WHERE relname = %s ORDER BY oid",
            (name,),
        )
        if not rows:
            raise ObjectNotFoundError(object_name)

        relkind = rows[0][0]
        description = ObjectDescription(
            name=name,
            kind=RELKINDS.get(relkind, ObjectKind.UNKNOWN),
            native_kind=relkind,
        )
        if description.kind == ObjectKind.TABLE:
            description.columns = self._describe_columns(name)
            description.foreign_keys = self._describe_foreign_keys(name)
        elif description.kind == ObjectKind.SEQUENCE:
            description.sequence = self._describe_sequence(name)
        return description

    def _describe_columns(self, name: str) -> List[ColumnInfo]:
        return [
            ColumnInfo(
                name=r[0],
                data_type=r[1],
                length=_text(r[2]),
                precision=_text(r[3]),
                nullable=r[4],
                default=_text(r[5]),
            )
            for r in self._fetch(TABLE_COLUMNS_SQL, (name,))
        ]

    def _describe_foreign_keys(self, name: str) -> List[ForeignKey]:
        return [
            ForeignKey(column=r[0], foreign_schema=r[1], foreign_table=r[2], foreign_column=r[3])
            for r in self._fetch(FOREIGN_KEYS_SQL, (name,))
        ]

    def _describe_sequence(self, name: str) -> Optional[SequenceInfo]:
        rows = self._fetch(SEQUENCE_SQL, (name,))
        if not rows:
            return None
        r = rows[0]
        return SequenceInfo(
            name=r[0],
            start_value=_text(r[1]),
            min_value=_text(r[2]),
            max_value=_text(r[3]),
            increment_by=_text(r[4]),
            last_value=_text(r[5]),
        )

    def search(self, pattern: str) -> List[CatalogObject]:
        rows = self._fetch(
            "SELECT relname::text, relkind::text FROM pg_class "
            "WHERE relname LIKE %s ORDER BY relname",
            (self.like_pattern(pattern.lower()),),
        )
        return [
            CatalogObject(name=r[0], kind=RELKINDS.get(r[1], ObjectKind.UNKNOWN).value)
            for r in rows
        ]
