"""Abstract base class for database connections."""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple, Type

from ..config import ConnectionParams, DatabaseType
from ..errors import NoResultError, QueryExecutionError, UnsupportedOperationError
from .models import (
    CatalogObject,
    Column,
    ObjectDescription,
    QueryResult,
    StandardQuery,
    TableRef,
)
from .normalizers import ValueNormalizer

logger = logging.getLogger(__name__)


class Connection(ABC):
    """Abstract base class for a live database connection.

    Subclasses open one native DB-API connection and supply the
    dialect-specific catalog queries. Statement execution and value
    normalization are shared.
    """

    # Override in subclasses
    DB_TYPE: DatabaseType
    TAG: str = ""
    NORMALIZER: Type[ValueNormalizer]
    STANDARD_QUERIES: List[StandardQuery] = []

    # Base exception class of the native driver, set by connect()
    driver_error: Tuple[Type[BaseException], ...] = ()

    def __init__(self, identifier: str, params: ConnectionParams):
        self.identifier = identifier
        self.params = params
        self._connection = None
        self._normalizer = self.NORMALIZER()

    @abstractmethod
    def connect(self):
        """Open the native connection.

        Raises:
            ConnectionError: if the URL is malformed or the driver refuses
        """
        pass

    @abstractmethod
    def server_version(self) -> str:
        """Version string of the connected server."""
        pass

    @abstractmethod
    def list_tables(self) -> List[TableRef]:
        """Tables visible to the connected user, lower-cased."""
        pass

    def close(self):
        """Close the native connection."""
        if self._connection is not None:
            try:
                self._connection.close()
            except self.driver_error as e:
                logger.debug("Error closing %s connection: %s", self.TAG, e)
            self._connection = None

    def _get_connection(self):
        if self._connection is None:
            self.connect()
        return self._connection

    def _run(self, statement: str, params: Optional[Sequence[Any]] = None):
        """Execute on a fresh cursor, wrapping driver errors."""
        cursor = None
        try:
            cursor = self._get_connection().cursor()
            if params is None:
                cursor.execute(statement)
            else:
                cursor.execute(statement, params)
        except self.driver_error as e:
            if cursor is not None:
                cursor.close()
            raise QueryExecutionError(
                str(e).strip(),
                details={"statement": statement, "backend": self.TAG},
            ) from e
        return cursor

    def _fetch(self, statement: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
        """Run a catalog query and return the raw rows."""
        cursor = self._run(statement, params)
        try:
            return [tuple(r) for r in cursor.fetchall()]
        except self.driver_error as e:
            raise QueryExecutionError(
                str(e).strip(),
                details={"statement": statement, "backend": self.TAG},
            ) from e
        finally:
            cursor.close()

    def execute(self, statement: str) -> int:
        """Run a non-query statement.

        Returns:
            Number of rows affected (0 if the driver does not know)
        """
        cursor = self._run(statement)
        try:
            count = cursor.rowcount
        finally:
            cursor.close()
        if count is None or count < 0:
            return 0
        return int(count)

    def query(self, statement: str) -> QueryResult:
        """Run a row-producing statement and normalize every cell.

        Raises:
            NoResultError: if the statement produced no result columns
            QueryExecutionError: if the driver rejected the statement
        """
        cursor = self._run(statement)
        try:
            if not cursor.description:
                raise NoResultError(statement)
            columns = [Column(name=str(d[0])) for d in cursor.description]
            type_tags = [d[1] for d in cursor.description]
            native_rows = cursor.fetchall()
        except self.driver_error as e:
            raise QueryExecutionError(
                str(e).strip(),
                details={"statement": statement, "backend": self.TAG},
            ) from e
        finally:
            cursor.close()

        logger.debug("%s query returned %d rows", self.TAG, len(native_rows))
        return QueryResult(
            columns=columns,
            rows=[self._normalizer.normalize_row(type_tags, r) for r in native_rows],
        )

    def describe(self, object_name: str) -> ObjectDescription:
        """Resolve an object's kind and collect its metadata.

        Raises:
            ObjectNotFoundError: if no object has that name
            UnsupportedOperationError: if the backend has no catalog support
        """
        raise UnsupportedOperationError("describe", self.TAG)

    def search(self, pattern: str) -> List[CatalogObject]:
        """Find catalog objects whose name matches ``pattern``."""
        raise UnsupportedOperationError("search", self.TAG)

    def standard_queries(self) -> List[StandardQuery]:
        """Diagnostic queries shipped for this backend."""
        return list(self.STANDARD_QUERIES)

    def find_standard_query(self, name: str) -> Optional[StandardQuery]:
        for q in self.standard_queries():
            if q.name == name:
                return q
        return None

    def prompt(self) -> str:
        """Prompt label, e.g. ``prod (pg)> ``."""
        return f"{self.identifier} ({self.TAG})> "

    @staticmethod
    def like_pattern(pattern: str) -> str:
        """Turn a bare search term into a substring LIKE pattern."""
        if "%" in pattern:
            return pattern
        return f"%{pattern}%"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
