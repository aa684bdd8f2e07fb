"""Exporters writing a query result as CSV, INSERT statements or a workbook."""

import csv
import logging
import re
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional, TextIO

from .database.models import Cell, QueryResult
from .errors import ExportError

logger = logging.getLogger(__name__)

STDOUT_TARGET = "-"

# Best effort only: joins and subqueries may yield the wrong table
TABLE_PATTERN = re.compile(r"\s+from\s+([A-Za-z0-9_.$]+)", re.IGNORECASE)
PLACEHOLDER_TABLE = "unknown_table"

CSV_DELIMITER = ";"


class ExportFormat(str, Enum):
    """Supported export formats."""
    CSV = "csv"
    INSERT = "insert"
    EXCEL = "excel"

    @property
    def supports_stdout(self) -> bool:
        return self is not ExportFormat.EXCEL


def parse_format(value: str) -> ExportFormat:
    """Parse a format name.

    Raises:
        ExportError: for unknown formats
    """
    try:
        return ExportFormat(value.lower())
    except ValueError:
        raise ExportError(
            f"Format not supported: {value}",
            details={"format": value, "supported": [f.value for f in ExportFormat]},
        )


def is_stdout(target: Optional[str]) -> bool:
    return target is None or target == STDOUT_TARGET


def check_target(fmt: ExportFormat, target: Optional[str]) -> None:
    """Reject targets a format cannot write to, before any I/O happens."""
    if is_stdout(target) and not fmt.supports_stdout:
        raise ExportError(
            f"Export of {fmt.value} to stdout not supported",
            details={"format": fmt.value},
        )


@contextmanager
def _open_target(target: Optional[str], stdout: TextIO) -> Iterator[TextIO]:
    if is_stdout(target):
        yield stdout
        stdout.flush()
        return

    try:
        with open(target, "w", newline="", encoding="utf-8") as f:
            yield f
    except OSError as e:
        raise ExportError(f"Cannot write {target}: {e}", details={"target": target}) from e


def table_name_from_query(query: str) -> str:
    """Target table for INSERT export: the first ``from <name>`` in the query."""
    match = TABLE_PATTERN.search(query)
    if match:
        return match.group(1)
    return PLACEHOLDER_TABLE


def sql_literal(value: Cell) -> str:
    """Quote a cell for an INSERT statement; NULL stays the keyword NULL."""
    if value is None:
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


def write_csv(result: QueryResult, stream: TextIO) -> int:
    """Write a semicolon-delimited CSV; NULL becomes an empty field.

    Returns:
        Number of data rows written
    """
    writer = csv.writer(stream, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerow(result.column_names)
    for row in result.rows:
        writer.writerow(["" if v is None else v for v in row.data])
    return len(result.rows)


def write_inserts(result: QueryResult, query: str, stream: TextIO) -> int:
    """Write one INSERT statement per row.

    Returns:
        Number of statements written
    """
    table = table_name_from_query(query)
    columns = ", ".join(result.column_names)
    for row in result.rows:
        values = ", ".join(sql_literal(v) for v in row.data)
        stream.write(f"INSERT INTO {table} ({columns}) VALUES ({values});\n")
    return len(result.rows)


def _put_text(sheet, row: int, column: int, value: Cell) -> None:
    # openpyxl reads a leading "=" as a formula; cells hold data only
    if value is None:
        return
    cell = sheet.cell(row=row, column=column, value=value)
    cell.data_type = "s"


def write_workbook(result: QueryResult, query: str, path: str) -> int:
    """Write a workbook with a "Data" sheet and a "Query" sheet.

    Returns:
        Number of data rows written
    """
    from openpyxl import Workbook
    from openpyxl.utils.exceptions import IllegalCharacterError

    workbook = Workbook()
    data = workbook.active
    data.title = "Data"
    try:
        for row_index, values in enumerate([result.column_names] + [r.data for r in result.rows], start=1):
            for column_index, value in enumerate(values, start=1):
                _put_text(data, row_index, column_index, value)

        query_sheet = workbook.create_sheet("Query")
        _put_text(query_sheet, 1, 1, query)
    except IllegalCharacterError as e:
        raise ExportError(f"Value cannot be stored in a workbook: {e}") from e

    try:
        workbook.save(path)
    except OSError as e:
        raise ExportError(f"Cannot write {path}: {e}", details={"target": path}) from e
    return len(result.rows)


def export_result(
    fmt: ExportFormat,
    result: QueryResult,
    query: str,
    target: Optional[str],
    stdout: TextIO,
) -> int:
    """Export a result to a file, or to ``stdout`` when target is ``-``.

    Returns:
        Number of rows exported

    Raises:
        ExportError: for unsupported targets or write failures
    """
    check_target(fmt, target)

    if fmt is ExportFormat.EXCEL:
        count = write_workbook(result, query, target)
    else:
        with _open_target(target, stdout) as stream:
            if fmt is ExportFormat.CSV:
                count = write_csv(result, stream)
            else:
                count = write_inserts(result, query, stream)

    logger.debug("Exported %d rows as %s to %s", count, fmt.value, target)
    return count
