"""Shared pytest fixtures for dbc tests."""

import io

import pytest
from rich.console import Console

from dbc.config import ConnectionParams, DatabaseType
from dbc.database import QueryResult, SQLiteConnection
from dbc.repl import SessionState
from dbc.statement_log import StatementLogger


SCHEMA_STATEMENTS = [
    "create table customers (id integer primary key, name text not null, email text)",
    "create table orders ("
    "id integer primary key, "
    "customer_id integer references customers(id), "
    "total real, "
    "status text default 'new')",
    "create view open_orders as select * from orders where status = 'new'",
    "create index idx_orders_customer on orders(customer_id)",
]

CUSTOMERS = [
    (1, "Ada", "ada@example.com"),
    (2, "Grace", None),
    (3, "Linus", "linus@example.com"),
]


@pytest.fixture
def sqlite_params():
    """Connection parameters for an in-memory SQLite database."""
    return ConnectionParams(type=DatabaseType.SQLITE, url="memory")


@pytest.fixture
def sqlite_connection(sqlite_params):
    """An open in-memory SQLite connection with a small schema."""
    connection = SQLiteConnection("local", sqlite_params)
    connection.connect()
    for statement in SCHEMA_STATEMENTS:
        connection.execute(statement)
    for customer_id, name, email in CUSTOMERS:
        email_sql = "null" if email is None else f"'{email}'"
        connection.execute(f"insert into customers values ({customer_id}, '{name}', {email_sql})")
    connection.execute("insert into orders values (10, 1, 12.5, 'new')")
    connection.execute("insert into orders values (11, 3, 7.25, 'shipped')")
    yield connection
    connection.close()


@pytest.fixture
def console():
    """A rich console writing to a string buffer, without colors."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


@pytest.fixture
def output(console):
    """Callable returning everything printed to the console so far."""
    return lambda: console.file.getvalue()


@pytest.fixture
def session_state():
    return SessionState()


@pytest.fixture
def statement_logger(tmp_path):
    """A statement logger backed by a temporary database."""
    logger = StatementLogger(db_path=str(tmp_path / "statements.db"))
    yield logger
    logger.close()


@pytest.fixture
def two_by_two_result():
    """Two rows, two columns, one NULL cell."""
    return QueryResult.from_values(["col1", "col2"], [["v1", "v2"], ["v3", None]])


@pytest.fixture
def wide_result():
    """Twenty-five rows of five columns."""
    names = [f"c{i}" for i in range(5)]
    rows = [[f"r{r}c{c}" for c in range(5)] for r in range(25)]
    return QueryResult.from_values(names, rows)


@pytest.fixture
def connections_file(tmp_path):
    """A connections file with one entry per backend."""
    path = tmp_path / "dbc.yml"
    path.write_text(
        """
prod:
  type: postgres
  url: //db.example.com:5432/sales
  username: report
  password: secret
warehouse:
  url: dbhost:1521
  dbname: ORCLPDB1
  username: scott
  password: 1234
shop:
  type: mysql
  url: //localhost/shop
  username: root
local:
  type: sqlite
  url: memory
broken:
  type: pg
  url: not-a-url
""",
        encoding="utf-8",
    )
    return str(path)
