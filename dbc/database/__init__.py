"""Database connection module for dbc.

This module provides one connection interface with specific
implementations for PostgreSQL, Oracle, MySQL and SQLite.
"""

from .models import (
    Cell,
    Column,
    Row,
    QueryResult,
    TableRef,
    StandardQuery,
    ObjectKind,
    ObjectDescription,
    ColumnInfo,
    ForeignKey,
    SequenceInfo,
    CatalogObject,
)
from .base import Connection
from .normalizers import (
    Interval,
    ValueNormalizer,
    PostgresNormalizer,
    OracleNormalizer,
    MySQLNormalizer,
    SQLiteNormalizer,
)
from .postgres import PostgresConnection
from .oracle import OracleConnection
from .mysql import MySQLConnection
from .sqlite import SQLiteConnection
from .factory import create_connection

__all__ = [
    # Data models
    "Cell",
    "Column",
    "Row",
    "QueryResult",
    "TableRef",
    "StandardQuery",
    "ObjectKind",
    "ObjectDescription",
    "ColumnInfo",
    "ForeignKey",
    "SequenceInfo",
    "CatalogObject",
    # Base classes
    "Connection",
    # Value normalizers
    "Interval",
    "ValueNormalizer",
    "PostgresNormalizer",
    "OracleNormalizer",
    "MySQLNormalizer",
    "SQLiteNormalizer",
    # Connections
    "PostgresConnection",
    "OracleConnection",
    "MySQLConnection",
    "SQLiteConnection",
    "create_connection",
]
