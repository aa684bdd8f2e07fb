"""Database-specific value normalization strategies.

Every adapter turns native driver values into ``Optional[str]`` cells. The
conversion is keyed by the native column type tag the driver reports in
``cursor.description`` (or, for SQLite, by the storage class of the value).
Unknown tags never raise; they yield a ``?<tag>`` placeholder.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Sequence

from .models import Cell, Row


@dataclass(frozen=True)
class Interval:
    """A duration made of months, days, seconds and microseconds.

    ``seconds`` and ``microseconds`` carry the same sign.
    """
    months: int = 0
    days: int = 0
    seconds: int = 0
    microseconds: int = 0

    @classmethod
    def from_timedelta(cls, value: timedelta, months: int = 0) -> "Interval":
        micros = value.seconds * 1_000_000 + value.microseconds
        return cls._with_time(months=months, days=value.days, total_micros=micros)

    @classmethod
    def _with_time(cls, months: int, days: int, total_micros: int) -> "Interval":
        sign = -1 if total_micros < 0 else 1
        seconds, micros = divmod(abs(total_micros), 1_000_000)
        return cls(months=months, days=days, seconds=sign * seconds, microseconds=sign * micros)

    def __str__(self) -> str:
        out = "P"
        if self.months != 0:
            out += f"{self.months}M"
        if self.days != 0:
            out += f"{self.days}D"
        out += "T"
        if self.seconds != 0 or self.microseconds != 0:
            sign = -1 if self.seconds < 0 else 1
            hours, rest = divmod(abs(self.seconds), 3600)
            minutes, seconds = divmod(rest, 60)
            out += (
                f"{sign * hours}H{sign * minutes}M{sign * seconds}"
                f".{abs(self.microseconds):06d}S"
            )
        return out


_PG_INTERVAL_UNIT = re.compile(r"([+-]?\d+)\s+(years?|mons?|days?)")
_PG_INTERVAL_TIME = re.compile(r"([+-])?(\d+):(\d{2}):(\d{2})(?:\.(\d{1,6}))?")


def parse_pg_interval(text: Optional[str]) -> Optional[Interval]:
    """Parse an interval in Postgres' default ``postgres`` output style.

    Examples: ``1 year 2 mons 3 days 04:05:06.789``, ``-1 days +02:03:00``.
    """
    if text is None:
        return None

    months = 0
    days = 0
    for amount, unit in _PG_INTERVAL_UNIT.findall(text):
        if unit.startswith("year"):
            months += int(amount) * 12
        elif unit.startswith("mon"):
            months += int(amount)
        else:
            days += int(amount)

    micros = 0
    match = _PG_INTERVAL_TIME.search(text)
    if match:
        sign, hours, minutes, seconds, fraction = match.groups()
        micros = (int(hours) * 3600 + int(minutes) * 60 + int(seconds)) * 1_000_000
        if fraction:
            micros += int(fraction.ljust(6, "0"))
        if sign == "-":
            micros = -micros

    return Interval._with_time(months=months, days=days, total_micros=micros)


def format_number(value: Any) -> str:
    """Default numeric formatting, no locale and no rounding."""
    if isinstance(value, Decimal) and value.is_finite():
        # Avoid exponent notation for integral decimals such as Decimal('1E+2')
        if value == value.to_integral_value() and value.as_tuple().exponent > 0:
            return str(value.quantize(Decimal(1)))
    return str(value)


def format_bool(value: Any) -> str:
    return "true" if value else "false"


def format_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def format_temporal(value: Any) -> str:
    return str(value)


def format_interval(value: Any) -> str:
    if isinstance(value, Interval):
        return str(value)
    if isinstance(value, timedelta):
        return str(Interval.from_timedelta(value))
    return str(value)


def format_json(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


class ValueNormalizer(ABC):
    """Abstract base class for converting native values to cells."""

    @abstractmethod
    def formatter_for(self, type_tag: Any) -> Optional[Callable[[Any], str]]:
        """Return the formatter for a native type tag, or None if unsupported."""
        pass

    def type_label(self, type_tag: Any) -> str:
        """Debug form of a type tag used in placeholders."""
        return str(type_tag)

    def normalize(self, type_tag: Any, value: Any) -> Cell:
        """Convert one native value."""
        if value is None:
            return None
        formatter = self.formatter_for(type_tag)
        if formatter is None:
            return f"?{self.type_label(type_tag)}"
        return formatter(value)

    def normalize_row(self, type_tags: Sequence[Any], values: Sequence[Any]) -> Row:
        """Convert a native row using the per-column type tags."""
        return Row(data=[self.normalize(t, v) for t, v in zip(type_tags, values)])


class PostgresNormalizer(ValueNormalizer):
    """Normalizer keyed by Postgres type OIDs."""

    FORMATTERS: Dict[int, Callable[[Any], str]] = {
        16: format_bool,        # bool
        20: format_number,      # int8
        21: format_number,      # int2
        23: format_number,      # int4
        26: format_number,      # oid
        700: format_number,     # float4
        701: format_number,     # float8
        1700: format_number,    # numeric
        18: format_text,        # char
        19: format_text,        # name
        25: format_text,        # text
        1042: format_text,      # bpchar
        1043: format_text,      # varchar
        2950: format_text,      # uuid
        114: format_json,       # json
        3802: format_json,      # jsonb
        1082: format_temporal,  # date
        1083: format_temporal,  # time
        1114: format_temporal,  # timestamp
        1184: format_temporal,  # timestamptz
        1266: format_temporal,  # timetz
        1186: format_interval,  # interval
    }

    def formatter_for(self, type_tag: Any) -> Optional[Callable[[Any], str]]:
        return self.FORMATTERS.get(type_tag)

    def type_label(self, type_tag: Any) -> str:
        return f"oid:{type_tag}"


def _oracle_interval_ym(value: Any) -> str:
    # oracledb returns IntervalYM(years, months)
    years = getattr(value, "years", 0)
    months = getattr(value, "months", 0)
    return str(Interval(months=years * 12 + months))


def _oracle_lob(value: Any) -> str:
    if hasattr(value, "read"):
        value = value.read()
    return format_text(value)


class OracleNormalizer(ValueNormalizer):
    """Normalizer keyed by oracledb ``DbType`` names."""

    FORMATTERS: Dict[str, Callable[[Any], str]] = {
        "DB_TYPE_VARCHAR": format_text,
        "DB_TYPE_NVARCHAR": format_text,
        "DB_TYPE_CHAR": format_text,
        "DB_TYPE_NCHAR": format_text,
        "DB_TYPE_LONG": format_text,
        "DB_TYPE_ROWID": format_text,
        "DB_TYPE_CLOB": _oracle_lob,
        "DB_TYPE_NCLOB": _oracle_lob,
        "DB_TYPE_NUMBER": format_number,
        "DB_TYPE_BINARY_INTEGER": format_number,
        "DB_TYPE_BINARY_FLOAT": format_number,
        "DB_TYPE_BINARY_DOUBLE": format_number,
        "DB_TYPE_DATE": format_temporal,
        "DB_TYPE_TIMESTAMP": format_temporal,
        "DB_TYPE_TIMESTAMP_TZ": format_temporal,
        "DB_TYPE_TIMESTAMP_LTZ": format_temporal,
        "DB_TYPE_INTERVAL_DS": format_interval,
        "DB_TYPE_INTERVAL_YM": _oracle_interval_ym,
        "DB_TYPE_BOOLEAN": format_bool,
    }

    def type_label(self, type_tag: Any) -> str:
        return getattr(type_tag, "name", str(type_tag))

    def formatter_for(self, type_tag: Any) -> Optional[Callable[[Any], str]]:
        return self.FORMATTERS.get(self.type_label(type_tag))


def format_mysql_time(value: Any) -> str:
    """Format a MySQL TIME (returned as timedelta) as ``[-]HH:MM:SS[.ffffff]``."""
    if not isinstance(value, timedelta):
        return str(value)
    total = value.days * 86400 * 1_000_000 + value.seconds * 1_000_000 + value.microseconds
    sign = "-" if total < 0 else ""
    seconds, micros = divmod(abs(total), 1_000_000)
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    out = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if micros:
        out += f".{micros:06d}"
    return out


def format_mysql_bit(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return str(int.from_bytes(value, "big"))
    return str(value)


_MYSQL_GROUPS: Dict[str, Callable[[Any], str]] = {
    "TINY": format_number,
    "SHORT": format_number,
    "LONG": format_number,
    "LONGLONG": format_number,
    "INT24": format_number,
    "YEAR": format_number,
    "FLOAT": format_number,
    "DOUBLE": format_number,
    "DECIMAL": format_number,
    "NEWDECIMAL": format_number,
    "VARCHAR": format_text,
    "VAR_STRING": format_text,
    "STRING": format_text,
    "TINY_BLOB": format_text,
    "MEDIUM_BLOB": format_text,
    "LONG_BLOB": format_text,
    "BLOB": format_text,
    "JSON": format_text,
    "ENUM": format_text,
    "SET": format_text,
    "DATE": format_temporal,
    "NEWDATE": format_temporal,
    "DATETIME": format_temporal,
    "TIMESTAMP": format_temporal,
    "TIME": format_mysql_time,
    "BIT": format_mysql_bit,
}


@lru_cache(maxsize=1)
def _mysql_type_names() -> Dict[int, str]:
    from pymysql.constants import FIELD_TYPE

    names = list(_MYSQL_GROUPS) + ["NULL", "GEOMETRY"]
    return {getattr(FIELD_TYPE, n): n for n in names if hasattr(FIELD_TYPE, n)}


class MySQLNormalizer(ValueNormalizer):
    """Normalizer keyed by PyMySQL ``FIELD_TYPE`` codes."""

    def type_label(self, type_tag: Any) -> str:
        return _mysql_type_names().get(type_tag, str(type_tag))

    def formatter_for(self, type_tag: Any) -> Optional[Callable[[Any], str]]:
        return _MYSQL_GROUPS.get(self.type_label(type_tag))


class SQLiteNormalizer(ValueNormalizer):
    """Normalizer keyed by SQLite storage class.

    ``sqlite3`` reports no column types in ``cursor.description``; the
    storage class of each value is the native tag.
    """

    FORMATTERS: Dict[str, Callable[[Any], str]] = {
        "integer": format_number,
        "real": format_number,
        "text": format_text,
    }

    @staticmethod
    def storage_class(value: Any) -> str:
        if value is None:
            return "null"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, float):
            return "real"
        if isinstance(value, str):
            return "text"
        if isinstance(value, (bytes, bytearray, memoryview)):
            return "blob"
        return type(value).__name__

    def formatter_for(self, type_tag: Any) -> Optional[Callable[[Any], str]]:
        return self.FORMATTERS.get(type_tag)

    def normalize(self, type_tag: Any, value: Any) -> Cell:
        if value is None:
            return None
        return super().normalize(type_tag or self.storage_class(value), value)
