"""Connection factory: picks the adapter for a configured database type."""

import logging
from typing import Dict, Type

from ..config import ConnectionParams, DatabaseType
from ..errors import ConnectionError
from .base import Connection
from .mysql import MySQLConnection
from .oracle import OracleConnection
from .postgres import PostgresConnection
from .sqlite import SQLiteConnection

logger = logging.getLogger(__name__)

CONNECTION_CLASSES: Dict[DatabaseType, Type[Connection]] = {
    DatabaseType.POSTGRES: PostgresConnection,
    DatabaseType.ORACLE: OracleConnection,
    DatabaseType.MYSQL: MySQLConnection,
    DatabaseType.SQLITE: SQLiteConnection,
}


def create_connection(identifier: str, params: ConnectionParams) -> Connection:
    """Create and open the connection for ``params.type``.

    Raises:
        ConnectionError: if the type is unknown or the connection fails
    """
    connection_class = CONNECTION_CLASSES.get(params.type)
    if connection_class is None:
        raise ConnectionError(
            f"Unknown database type {params.type!r}",
            details={"identifier": identifier},
        )

    logger.debug("Opening %s connection %s", params.type.value, identifier)
    connection = connection_class(identifier, params)
    connection.connect()
    return connection
