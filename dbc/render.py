"""Rich output formatting for query results and catalog metadata.

Builders return :class:`rich.table.Table` objects so layouts can be checked
without a terminal; ``print_*`` helpers write them to a console.
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .database.models import (
    CatalogObject,
    Cell,
    ObjectDescription,
    ObjectKind,
    QueryResult,
    StandardQuery,
    TableRef,
)

NAME_STYLE = "bold green"
NULL_STYLE = "magenta"
NULL_TEXT = "NULL"


def _cell(value: Cell) -> Text:
    """Render one cell; NULL is the styled literal ``NULL``."""
    if value is None:
        return Text(NULL_TEXT, style=NULL_STYLE)
    return Text(value)


def _name(value: str) -> Text:
    return Text(value, style=NAME_STYLE)


def _new_table(show_header: bool = True) -> Table:
    return Table(box=box.SIMPLE, show_header=show_header, show_edge=False, pad_edge=False)


def is_vertical(result: QueryResult, row_limit: int) -> bool:
    """Single-row results and a row limit of 1 use the vertical layout."""
    return row_limit == 1 or len(result.rows) == 1


def build_vertical_table(result: QueryResult) -> Table:
    """One table row per column of the first result row."""
    table = _new_table(show_header=False)
    table.add_column("column", no_wrap=True)
    table.add_column("value")

    if result.rows:
        row = result.rows[0]
        for column, value in zip(result.columns, row.data):
            table.add_row(_name(column.name), _cell(value))
    return table


def build_horizontal_table(result: QueryResult, row_limit: int, column_limit: int) -> Table:
    """Header plus at most ``row_limit`` rows of ``column_limit`` columns."""
    table = _new_table()
    for column in result.columns[:column_limit]:
        table.add_column(_name(column.name))

    shown = 0
    for row in result.rows:
        if shown >= row_limit:
            break
        table.add_row(*[_cell(v) for v in row.data[:column_limit]])
        shown += 1

    notes = []
    if shown < len(result.rows):
        notes.append(f"{shown} of {len(result.rows)} rows")
    if column_limit < len(result.columns):
        notes.append(f"{column_limit} of {len(result.columns)} columns")
    if notes:
        table.caption = ", ".join(notes)
    return table


def build_result_table(result: QueryResult, row_limit: int, column_limit: int) -> Table:
    """Pick the layout for a result and build it."""
    if is_vertical(result, row_limit):
        return build_vertical_table(result)
    return build_horizontal_table(result, row_limit, column_limit)


def print_result(console: Console, result: QueryResult, row_limit: int, column_limit: int) -> None:
    """Render a query result to the console."""
    console.print(build_result_table(result, row_limit, column_limit))


def print_rows_affected(console: Console, count: int) -> None:
    console.print(f"[magenta]{count} rows updated.[/magenta]")


def build_description_tables(description: ObjectDescription) -> List[Table]:
    """Tables describing a catalog object (columns, foreign keys, sequence)."""
    tables = []

    if description.columns:
        columns = _new_table()
        columns.title = "Columns"
        for header in ("name", "type", "length", "precision", "nullable", "default"):
            columns.add_column(_name(header))
        for c in description.columns:
            columns.add_row(
                _name(c.name),
                Text(c.data_type),
                Text(c.length or ""),
                Text(c.precision or ""),
                Text(c.nullable or ""),
                Text(c.default or ""),
            )
        tables.append(columns)

    if description.foreign_keys:
        keys = _new_table()
        keys.title = "Foreign Keys"
        for header in ("column", "references", "foreign column"):
            keys.add_column(_name(header))
        for fk in description.foreign_keys:
            target = f"{fk.foreign_schema}.{fk.foreign_table}" if fk.foreign_schema else fk.foreign_table
            keys.add_row(_name(fk.column), Text(target, style="blue"), Text(fk.foreign_column, style="yellow"))
        tables.append(keys)

    if description.sequence is not None:
        seq = _new_table(show_header=False)
        seq.add_column("property", no_wrap=True)
        seq.add_column("value")
        for label in ("name", "start_value", "min_value", "max_value", "increment_by", "last_value"):
            value: Optional[str] = getattr(description.sequence, label)
            if value is not None:
                seq.add_row(_name(label), Text(value))
        tables.append(seq)

    return tables


def print_description(console: Console, description: ObjectDescription) -> None:
    """Print what ``describe`` found."""
    kind = description.kind.value
    if description.native_kind and description.kind == ObjectKind.UNKNOWN:
        kind = f"{kind} ({description.native_kind})"
    console.print(f"[yellow]{escape(description.name)}[/yellow] is a [magenta]{escape(kind)}[/magenta]")
    for table in build_description_tables(description):
        console.print(table)


def build_search_table(objects: List[CatalogObject]) -> Table:
    table = _new_table()
    table.add_column(_name("name"))
    table.add_column(_name("type"))
    for obj in objects:
        table.add_row(Text(obj.name), Text(obj.kind))
    return table


def print_search_results(console: Console, objects: List[CatalogObject]) -> None:
    if not objects:
        console.print("[yellow]No matching objects.[/yellow]")
        return
    console.print(build_search_table(objects))


def print_table_refs(console: Console, tables: List[TableRef]) -> None:
    if not tables:
        console.print("[yellow]No tables found.[/yellow]")
        return
    table = _new_table()
    table.add_column(_name("schema"))
    table.add_column(_name("name"))
    for ref in tables:
        table.add_row(Text(ref.schema), Text(ref.name))
    console.print(table)


def print_standard_queries(console: Console, queries: List[StandardQuery]) -> None:
    if not queries:
        console.print("[yellow]No standard queries for this connection.[/yellow]")
        return
    for q in queries:
        console.print(f"  [cyan]@{q.name}[/cyan]")
