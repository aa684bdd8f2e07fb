"""SQLite connection."""

import logging
import sqlite3
from typing import List

from ..config import DatabaseType
from ..errors import ConnectionError, ObjectNotFoundError
from .base import Connection
from .models import (
    CatalogObject,
    ColumnInfo,
    ForeignKey,
    ObjectDescription,
    ObjectKind,
    StandardQuery,
    TableRef,
)
from .normalizers import SQLiteNormalizer

logger = logging.getLogger(__name__)

MEMORY_NAMES = {"memory", ":memory:"}

OBJECT_KINDS = {
    "table": ObjectKind.TABLE,
    "view": ObjectKind.VIEW,
    "index": ObjectKind.INDEX,
}

TABLES_SQL = """
select type, name, tbl_name
from sqlite_master
where name not like 'sqlite_%'
order by type, name
"""


def resolve_path(url, dbname) -> str:
    """Database file for a connection; ``memory`` opens an in-memory database.

    Raises:
        ConnectionError: if neither url nor dbname is configured
    """
    path = url or dbname
    if not path:
        raise ConnectionError(
            "SQLite connections need a url (file path or 'memory')",
            details={"url": url, "dbname": dbname},
        )
    if path in MEMORY_NAMES:
        return ":memory:"
    if path.startswith("sqlite:///"):
        path = path[len("sqlite:///"):]
    return path


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class SQLiteConnection(Connection):
    """Connection to SQLite through the standard library ``sqlite3`` module."""

    DB_TYPE = DatabaseType.SQLITE
    TAG = "sqlite"
    NORMALIZER = SQLiteNormalizer
    STANDARD_QUERIES = [
        StandardQuery(name="tables", query=TABLES_SQL),
    ]

    driver_error = (sqlite3.Error,)

    def connect(self):
        """Open the SQLite database."""
        if self._connection is not None:
            return self._connection

        path = resolve_path(self.params.url, self.params.dbname)
        try:
            self._connection = sqlite3.connect(
                path,
                isolation_level=None,  # Auto-commit mode
            )
        except sqlite3.Error as e:
            raise ConnectionError(
                f"Cannot open SQLite database {path}: {e}",
                details={"path": path},
            ) from e

        logger.info("SQLite opened: %s", path)
        return self._connection

    def server_version(self) -> str:
        return sqlite3.sqlite_version

    def list_tables(self) -> List[TableRef]:
        rows = self._fetch(
            "select name from sqlite_master "
            "where type in ('table', 'view') and name not like 'sqlite_%' "
            "order by name"
        )
        return [TableRef(schema="main", name=r[0].lower()) for r in rows]

    def describe(self, object_name: str) -> ObjectDescription:
        rows = self._fetch(
            "select type, name from sqlite_master where lower(name) = lower(?) order by type",
            (object_name,),
        )
        if not rows:
            raise ObjectNotFoundError(object_name)

        object_type, name = rows[0]
        description = ObjectDescription(
            name=name,
            kind=OBJECT_KINDS.get(object_type, ObjectKind.UNKNOWN),
            native_kind=object_type,
        )
        if description.kind in (ObjectKind.TABLE, ObjectKind.VIEW):
            # cid, name, type, notnull, dflt_value, pk
            description.columns = [
                ColumnInfo(
                    name=r[1],
                    data_type=(r[2] or "").lower(),
                    nullable="NO" if r[3] else "YES",
                    default=None if r[4] is None else str(r[4]),
                )
                for r in self._fetch(f"PRAGMA table_info({_quote(name)})")
            ]
        if description.kind == ObjectKind.TABLE:
            # id, seq, table, from, to, on_update, on_delete, match
            description.foreign_keys = [
                ForeignKey(column=r[3], foreign_schema="main", foreign_table=r[2], foreign_column=r[4] or "")
                for r in self._fetch(f"PRAGMA foreign_key_list({_quote(name)})")
            ]
        return description

    def search(self, pattern: str) -> List[CatalogObject]:
        rows = self._fetch(
            "select name, type from sqlite_master where name like ? order by name",
            (self.like_pattern(pattern),),
        )
        return [CatalogObject(name=r[0], kind=r[1]) for r in rows]
