"""Oracle connection."""

import logging
from typing import List, Optional

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
from .normalizers import OracleNormalizer

logger = logging.getLogger(__name__)

OBJECT_KINDS = {
    "TABLE": ObjectKind.TABLE,
    "VIEW": ObjectKind.VIEW,
    "SEQUENCE": ObjectKind.SEQUENCE,
    "INDEX": ObjectKind.INDEX,
    "MATERIALIZED VIEW": ObjectKind.MATERIALIZED_VIEW,
}

TABLE_COLUMNS_SQL = """
    SELECT COLUMN_NAME, DATA_TYPE, DATA_LENGTH, DATA_PRECISION, NULLABLE, DATA_DEFAULT
    FROM ALL_TAB_COLUMNS
    WHERE TABLE_NAME = :1 AND OWNER = :2
    ORDER BY COLUMN_ID
"""

FOREIGN_KEYS_SQL = """
    SELECT cc.COLUMN_NAME, rc.OWNER, rc.TABLE_NAME, rcc.COLUMN_NAME
    FROM ALL_CONSTRAINTS c
    JOIN ALL_CONS_COLUMNS cc
      ON cc.OWNER = c.OWNER AND cc.CONSTRAINT_NAME = c.CONSTRAINT_NAME
    JOIN ALL_CONSTRAINTS rc
      ON rc.OWNER = c.R_OWNER AND rc.CONSTRAINT_NAME = c.R_CONSTRAINT_NAME
    JOIN ALL_CONS_COLUMNS rcc
      ON rcc.OWNER = rc.OWNER AND rcc.CONSTRAINT_NAME = rc.CONSTRAINT_NAME
     AND rcc.POSITION = cc.POSITION
    WHERE c.CONSTRAINT_TYPE = 'R' AND c.TABLE_NAME = :1 AND c.OWNER = :2
    ORDER BY cc.POSITION
"""

SEQUENCE_SQL = """
    SELECT SEQUENCE_NAME, MIN_VALUE, MAX_VALUE, INCREMENT_BY, LAST_NUMBER
    FROM ALL_SEQUENCES
    WHERE SEQUENCE_NAME = :1 AND SEQUENCE_OWNER = :2
"""

SESSIONS_SQL = """
select username, osuser, machine, program, status, count(*) as sessions
from v$session
where type = 'USER'
group by username, osuser, machine, program, status
order by count(*) desc
"""

LOCKS_SQL = """
select s.sid, s.serial#, s.username, s.blocking_session, s.event,
       s.seconds_in_wait, s.sql_id
from v$session s
where s.blocking_session is not null
order by s.seconds_in_wait desc
"""

SIZES_SQL = """
select segment_name, segment_type, round(sum(bytes) / 1024 / 1024, 2) as size_mb
from user_segments
group by segment_name, segment_type
order by sum(bytes) desc
"""


def build_dsn(url: Optional[str], dbname: Optional[str]) -> str:
    """Build the Easy Connect string for oracledb.

    Raises:
        ConnectionError: if no URL is configured
    """
    if not url:
        raise ConnectionError(
            "Oracle connections need a url (host:port, Easy Connect string or TNS alias)",
            details={"url": url, "dbname": dbname},
        )
    if dbname:
        return f"//{url.lstrip('/')}/{dbname}"
    return url


def _text(value) -> Optional[str]:
    return None if value is None else str(value).strip()


class OracleConnection(Connection):
    """Connection to Oracle through python-oracledb (thin mode)."""

    DB_TYPE = DatabaseType.ORACLE
    TAG = "ora"
    NORMALIZER = OracleNormalizer
    STANDARD_QUERIES = [
        StandardQuery(name="sessions", query=SESSIONS_SQL),
        StandardQuery(name="locks", query=LOCKS_SQL),
        StandardQuery(name="sizes", query=SIZES_SQL),
    ]

    def connect(self):
        """Connect to Oracle."""
        if self._connection is not None:
            return self._connection

        dsn = build_dsn(self.params.url, self.params.dbname)

        try:
            import oracledb
        except ImportError:
            raise ImportError(
                "oracledb is required for Oracle connections. "
                "Install it with: pip install oracledb"
            )

        # CLOB/NCLOB come back as str instead of LOB handles
        oracledb.defaults.fetch_lobs = False

        try:
            self._connection = oracledb.connect(
                user=self.params.username,
                password=self.params.password,
                dsn=dsn,
            )
        except oracledb.Error as e:
            raise ConnectionError(
                f"Cannot connect to Oracle at {dsn}: {str(e).strip()}",
                details={"dsn": dsn},
            ) from e

        self.driver_error = (oracledb.Error,)
        logger.info("Oracle connected: %s@%s", self.params.username, dsn)
        return self._connection

    def server_version(self) -> str:
        return str(self._get_connection().version)

    def list_tables(self) -> List[TableRef]:
        rows = self._fetch("SELECT TABLE_NAME FROM USER_TABLES ORDER BY TABLE_NAME")
        return [TableRef(schema="", name=r[0].lower()) for r in rows]

    def describe(self, object_name: str) -> ObjectDescription:
        name = object_name.upper()
        rows = self._fetch(
            "SELECT OBJECT_TYPE, OWNER FROM ALL_OBJECTS WHERE OBJECT_NAME = :1 "
            "ORDER BY CASE WHEN OWNER = USER THEN 0 ELSE 1 END, OWNER",
            (name,),
        )
        if not rows:
            raise ObjectNotFoundError(object_name)

        object_type, owner = rows[0]
        description = ObjectDescription(
            name=name,
            kind=OBJECT_KINDS.get(object_type, ObjectKind.UNKNOWN),
            native_kind=object_type,
        )
        if description.kind == ObjectKind.TABLE:
            description.columns = [
                ColumnInfo(
                    name=r[0],
                    data_type=r[1],
                    length=_text(r[2]),
                    precision=_text(r[3]),
                    nullable=_text(r[4]),
                    default=_text(r[5]),
                )
                for r in self._fetch(TABLE_COLUMNS_SQL, (name, owner))
            ]
            description.foreign_keys = [
                ForeignKey(column=r[0], foreign_schema=r[1], foreign_table=r[2], foreign_column=r[3])
                for r in self._fetch(FOREIGN_KEYS_SQL, (name, owner))
            ]
        elif description.kind == ObjectKind.SEQUENCE:
            seq = self._fetch(SEQUENCE_SQL, (name, owner))
            if seq:
                r = seq[0]
                description.sequence = SequenceInfo(
                    name=r[0],
                    min_value=_text(r[1]),
                    max_value=_text(r[2]),
                    increment_by=_text(r[3]),
                    last_value=_text(r[4]),
                )
        return description

    def search(self, pattern: str) -> List[CatalogObject]:
        rows = self._fetch(
            "SELECT DISTINCT OBJECT_NAME, OBJECT_TYPE FROM ALL_OBJECTS "
            "WHERE OBJECT_NAME LIKE :1 ORDER BY OBJECT_NAME, OBJECT_TYPE",
            (self.like_pattern(pattern.upper()),),
        )
        return [CatalogObject(name=r[0], kind=r[1].lower()) for r in rows]
