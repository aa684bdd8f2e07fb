"""Tests for the SQLite adapter against a real in-memory database."""

import pytest

from dbc.config import ConnectionParams, DatabaseType
from dbc.database import ObjectKind, SQLiteConnection, create_connection
from dbc.database.sqlite import resolve_path
from dbc.errors import ConnectionError, NoResultError, ObjectNotFoundError, QueryExecutionError


class TestResolvePath:
    """Tests for mapping url/dbname to a database file."""

    def test_memory_aliases(self):
        assert resolve_path("memory", None) == ":memory:"
        assert resolve_path(":memory:", None) == ":memory:"

    def test_dbname_used_when_no_url(self):
        assert resolve_path(None, "/tmp/app.db") == "/tmp/app.db"

    def test_sqlalchemy_style_prefix_is_stripped(self):
        assert resolve_path("sqlite:///data/app.db", None) == "data/app.db"

    def test_missing_path_raises(self):
        with pytest.raises(ConnectionError):
            resolve_path(None, None)


class TestQuery:
    """Tests for query and execute."""

    def test_select_one(self, sqlite_connection):
        """select 1 returns one column and one row with the text "1"."""
        result = sqlite_connection.query("select 1")

        assert len(result.columns) == 1
        assert len(result.rows) == 1
        assert result.rows[0].data == ["1"]

    def test_null_is_none_and_empty_string_is_kept(self, sqlite_connection):
        result = sqlite_connection.query("select null as a, '' as b")

        assert result.column_names == ["a", "b"]
        assert result.rows[0].data == [None, ""]

    def test_numbers_and_text(self, sqlite_connection):
        result = sqlite_connection.query(
            "select orders.id, customers.name, orders.total "
            "from orders join customers on customers.id = orders.customer_id "
            "order by orders.id"
        )

        assert result.rows[0].data[1] == "Ada"
        assert result.rows[0].data[2] == "12.5"

    def test_blob_is_placeholder(self, sqlite_connection):
        result = sqlite_connection.query("select x'00ff' as payload")

        assert result.rows[0].data == ["?blob"]

    def test_every_row_matches_column_count(self, sqlite_connection):
        result = sqlite_connection.query("select * from customers order by id")

        assert result.column_names == ["id", "name", "email"]
        assert all(len(row.data) == 3 for row in result.rows)
        assert result.rows[1].data == ["2", "Grace", None]

    def test_zero_rows_is_not_an_error(self, sqlite_connection):
        result = sqlite_connection.query("select * from customers where id = -1")

        assert result.column_names == ["id", "name", "email"]
        assert result.rows == []

    def test_statement_without_columns_raises_no_result(self, sqlite_connection):
        with pytest.raises(NoResultError) as exc_info:
            sqlite_connection.query("update customers set email = email")

        assert exc_info.value.message == "No result found"

    def test_execute_returns_affected_rows(self, sqlite_connection):
        assert sqlite_connection.execute("update customers set email = 'x' where id in (1, 2)") == 2

    def test_execute_ddl_returns_zero(self, sqlite_connection):
        assert sqlite_connection.execute("create table t (x integer)") == 0

    def test_driver_error_is_wrapped(self, sqlite_connection):
        with pytest.raises(QueryExecutionError) as exc_info:
            sqlite_connection.query("select * from missing_table")

        assert "missing_table" in exc_info.value.message
        assert exc_info.value.details["backend"] == "sqlite"
        assert exc_info.value.__cause__ is not None


class TestIntrospection:
    """Tests for list_tables, describe and search."""

    def test_list_tables(self, sqlite_connection):
        names = [t.name for t in sqlite_connection.list_tables()]

        assert names == ["customers", "open_orders", "orders"]

    def test_describe_table(self, sqlite_connection):
        description = sqlite_connection.describe("ORDERS")

        assert description.kind == ObjectKind.TABLE
        assert [c.name for c in description.columns] == ["id", "customer_id", "total", "status"]
        status = description.columns[3]
        assert status.data_type == "text"
        assert status.nullable == "YES"
        assert status.default == "'new'"
        assert len(description.foreign_keys) == 1
        fk = description.foreign_keys[0]
        assert (fk.column, fk.foreign_table, fk.foreign_column) == ("customer_id", "customers", "id")

    def test_describe_lowercases_declared_types(self, sqlite_connection):
        sqlite_connection.execute("create table audit (note TEXT, amount NUMERIC(10, 2))")

        description = sqlite_connection.describe("audit")

        assert [c.data_type for c in description.columns] == ["text", "numeric(10, 2)"]

    def test_describe_view(self, sqlite_connection):
        description = sqlite_connection.describe("open_orders")

        assert description.kind == ObjectKind.VIEW
        assert description.columns
        assert description.foreign_keys == []

    def test_describe_index(self, sqlite_connection):
        description = sqlite_connection.describe("idx_orders_customer")

        assert description.kind == ObjectKind.INDEX
        assert description.columns == []

    def test_describe_missing_object(self, sqlite_connection):
        with pytest.raises(ObjectNotFoundError):
            sqlite_connection.describe("no_such_thing")

    def test_search_wraps_bare_term(self, sqlite_connection):
        hits = sqlite_connection.search("order")

        assert [(h.name, h.kind) for h in hits] == [
            ("idx_orders_customer", "index"),
            ("open_orders", "view"),
            ("orders", "table"),
        ]

    def test_search_keeps_explicit_pattern(self, sqlite_connection):
        hits = sqlite_connection.search("cust%")

        assert [h.name for h in hits] == ["customers"]


class TestConnectionLifecycle:
    """Tests for the factory, prompt and close."""

    def test_factory_opens_sqlite(self):
        params = ConnectionParams(type=DatabaseType.SQLITE, url="memory")
        with create_connection("scratch", params) as connection:
            assert isinstance(connection, SQLiteConnection)
            assert connection.query("select 1").rows[0].data == ["1"]

    def test_prompt(self, sqlite_connection):
        assert sqlite_connection.prompt() == "local (sqlite)> "

    def test_server_version(self, sqlite_connection):
        assert sqlite_connection.server_version()

    def test_standard_queries(self, sqlite_connection):
        assert [q.name for q in sqlite_connection.standard_queries()] == ["tables"]
        assert sqlite_connection.find_standard_query("tables") is not None
        assert sqlite_connection.find_standard_query("locks") is None

    def test_closed_native_connection_raises_query_error(self, sqlite_connection):
        sqlite_connection._connection.close()

        with pytest.raises(QueryExecutionError):
            sqlite_connection.query("select 1")

    def test_close_is_idempotent(self, sqlite_params):
        connection = SQLiteConnection("scratch", sqlite_params)
        connection.connect()
        connection.close()
        connection.close()
        assert connection._connection is None
