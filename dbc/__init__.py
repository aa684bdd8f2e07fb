"""dbc - interactive SQL client for PostgreSQL, Oracle, MySQL and SQLite."""

__version__ = "0.1.0"
