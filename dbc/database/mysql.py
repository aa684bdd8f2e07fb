"""MySQL connection."""

import logging
import re
from typing import List, Optional, Tuple

from ..config import DatabaseType
from ..errors import ConnectionError
from .base import Connection
from .models import StandardQuery, TableRef
from .normalizers import MySQLNormalizer

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"//([^/:]+)(?::(\d+))?/(\w+)$")

DEFAULT_PORT = 3306


def parse_url(url: Optional[str]) -> Tuple[str, int, str]:
    """Split a ``//host[:port]/dbname`` URL.

    Raises:
        ConnectionError: if the URL does not match
    """
    match = URL_PATTERN.search(url or "")
    if not match:
        raise ConnectionError(
            f"Format of MySQL URL needs to be //host[:port]/dbname, got {url!r}",
            details={"url": url},
        )
    port = int(match.group(2)) if match.group(2) else DEFAULT_PORT
    return match.group(1), port, match.group(3)


class MySQLConnection(Connection):
    """Connection to MySQL / MariaDB through PyMySQL.

    ``describe`` and ``search`` are not available for this backend.
    """

    DB_TYPE = DatabaseType.MYSQL
    TAG = "my"
    NORMALIZER = MySQLNormalizer
    STANDARD_QUERIES = [
        StandardQuery(name="sessions", query="show full processlist"),
    ]

    def connect(self):
        """Connect to MySQL."""
        if self._connection is not None:
            return self._connection

        host, port, dbname = parse_url(self.params.url)

        try:
            import pymysql
        except ImportError:
            raise ImportError(
                "pymysql is required for MySQL connections. "
                "Install it with: pip install pymysql"
            )

        try:
            self._connection = pymysql.connect(
                host=host,
                port=port,
                user=self.params.username,
                password=self.params.password or "",
                database=dbname,
                autocommit=True,
            )
        except pymysql.MySQLError as e:
            raise ConnectionError(
                f"Cannot connect to MySQL at {host}:{port}/{dbname}: {e}",
                details={"host": host, "port": port, "dbname": dbname},
            ) from e

        self.driver_error = (pymysql.MySQLError,)
        logger.info("MySQL connected: %s@%s:%s/%s", self.params.username, host, port, dbname)
        return self._connection

    def server_version(self) -> str:
        return str(self._get_connection().get_server_info())

    def list_tables(self) -> List[TableRef]:
        rows = self._fetch("show tables")
        return sorted(
            (TableRef(schema="", name=str(r[0]).lower()) for r in rows),
            key=lambda t: t.name,
        )
