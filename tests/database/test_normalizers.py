"""Tests for value normalization and interval formatting."""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from dbc.database import (
    Interval,
    MySQLNormalizer,
    OracleNormalizer,
    PostgresNormalizer,
    QueryResult,
    SQLiteNormalizer,
)
from dbc.database.models import Column, Row
from dbc.database.normalizers import format_mysql_time, format_number, parse_pg_interval


class TestInterval:
    """Tests for the ISO-8601-like duration format."""

    def test_zero(self):
        assert str(Interval()) == "PT"

    def test_months_and_days_only(self):
        assert str(Interval(months=14, days=3)) == "P14M3DT"

    def test_time_part(self):
        interval = Interval(days=1, seconds=3 * 3600 + 4 * 60 + 5, microseconds=600000)

        assert str(interval) == "P1DT3H4M5.600000S"

    def test_microseconds_alone_show_time(self):
        assert str(Interval(microseconds=7)) == "PT0H0M0.000007S"

    def test_from_timedelta(self):
        assert str(Interval.from_timedelta(timedelta(hours=1, minutes=30))) == "PT1H30M0.000000S"


class TestPostgresIntervalParsing:
    """Tests for parsing Postgres interval output."""

    def test_full_interval(self):
        interval = parse_pg_interval("1 year 2 mons 3 days 04:05:06.789")

        assert interval == Interval(months=14, days=3, seconds=14706, microseconds=789000)

    def test_negative_parts(self):
        interval = parse_pg_interval("-1 days -02:00:00")

        assert interval.days == -1
        assert interval.seconds == -7200
        assert str(interval) == "P-1DT-2H0M0.000000S"

    def test_days_only(self):
        assert str(parse_pg_interval("5 days")) == "P5DT"

    def test_none(self):
        assert parse_pg_interval(None) is None


class TestPostgresNormalizer:
    """Tests for OID keyed conversion."""

    @pytest.fixture
    def normalizer(self):
        return PostgresNormalizer()

    def test_null(self, normalizer):
        assert normalizer.normalize(23, None) is None

    @pytest.mark.parametrize(
        "oid,value,expected",
        [
            (23, 42, "42"),
            (701, 1.5, "1.5"),
            (1700, Decimal("12.50"), "12.50"),
            (16, True, "true"),
            (16, False, "false"),
            (25, "it's", "it's"),
            (1082, date(2024, 2, 29), "2024-02-29"),
            (1083, time(13, 5), "13:05:00"),
            (1184, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc), "2024-01-02 03:04:05+00:00"),
            (1186, Interval(months=1), "P1MT"),
            (3802, {"a": 1}, '{"a": 1}'),
        ],
    )
    def test_known_types(self, normalizer, oid, value, expected):
        assert normalizer.normalize(oid, value) == expected

    def test_unknown_type_is_placeholder(self, normalizer):
        assert normalizer.normalize(600, "(1,2)") == "?oid:600"

    def test_row(self, normalizer):
        row = normalizer.normalize_row([23, 25], [1, None])

        assert row.data == ["1", None]


class TestOracleNormalizer:
    """Tests for DbType keyed conversion."""

    @pytest.fixture
    def normalizer(self):
        return OracleNormalizer()

    def test_number(self, normalizer):
        assert normalizer.normalize(SimpleNamespace(name="DB_TYPE_NUMBER"), 7) == "7"

    def test_interval_day_to_second(self, normalizer):
        value = timedelta(days=-1, seconds=86399)

        assert normalizer.normalize(SimpleNamespace(name="DB_TYPE_INTERVAL_DS"), value) == "P-1DT23H59M59.000000S"

    def test_interval_year_to_month(self, normalizer):
        value = SimpleNamespace(years=1, months=2)

        assert normalizer.normalize(SimpleNamespace(name="DB_TYPE_INTERVAL_YM"), value) == "P14MT"

    def test_clob_handle_is_read(self, normalizer):
        lob = SimpleNamespace(read=lambda: "long text")

        assert normalizer.normalize(SimpleNamespace(name="DB_TYPE_CLOB"), lob) == "long text"

    def test_unknown_type_is_placeholder(self, normalizer):
        assert normalizer.normalize(SimpleNamespace(name="DB_TYPE_RAW"), b"\x00") == "?DB_TYPE_RAW"


class TestMySQLNormalizer:
    """Tests for FIELD_TYPE keyed conversion."""

    @pytest.fixture
    def normalizer(self):
        return MySQLNormalizer()

    def test_integer(self, normalizer):
        from pymysql.constants import FIELD_TYPE

        assert normalizer.normalize(FIELD_TYPE.LONG, 5) == "5"

    def test_invalid_utf8_is_replaced(self, normalizer):
        from pymysql.constants import FIELD_TYPE

        assert normalizer.normalize(FIELD_TYPE.VAR_STRING, b"ab\xff") == "ab�"

    def test_time(self, normalizer):
        from pymysql.constants import FIELD_TYPE

        assert normalizer.normalize(FIELD_TYPE.TIME, timedelta(hours=25, seconds=1)) == "25:00:01"

    def test_geometry_is_placeholder(self, normalizer):
        from pymysql.constants import FIELD_TYPE

        assert normalizer.normalize(FIELD_TYPE.GEOMETRY, b"...") == "?GEOMETRY"

    def test_negative_time(self):
        assert format_mysql_time(-timedelta(minutes=1, microseconds=5)) == "-00:01:00.000005"


class TestSQLiteNormalizer:
    """Tests for storage class keyed conversion."""

    def test_storage_classes(self):
        normalizer = SQLiteNormalizer()

        assert normalizer.normalize(None, 3) == "3"
        assert normalizer.normalize(None, 2.5) == "2.5"
        assert normalizer.normalize(None, "x") == "x"
        assert normalizer.normalize(None, b"x") == "?blob"
        assert normalizer.normalize(None, None) is None


class TestFormatNumber:
    """Tests for numeric formatting."""

    def test_integral_decimal_with_exponent(self):
        assert format_number(Decimal("1E+2")) == "100"

    def test_decimal_keeps_scale(self):
        assert format_number(Decimal("0.10")) == "0.10"

    def test_nan(self):
        assert format_number(Decimal("NaN")) == "NaN"


class TestQueryResult:
    """Tests for the result model."""

    def test_arity_mismatch_is_rejected(self):
        with pytest.raises(ValueError):
            QueryResult(columns=[Column("a"), Column("b")], rows=[Row(["1"])])

    def test_from_values(self):
        result = QueryResult.from_values(["a"], [["1"], [None]])

        assert result.column_names == ["a"]
        assert [r.data for r in result.rows] == [["1"], [None]]
