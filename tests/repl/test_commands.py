"""Tests for the REPL command tokenizer."""

import pytest

from dbc.errors import CommandError, ExportError
from dbc.export import ExportFormat
from dbc.repl.commands import (
    Describe,
    Empty,
    Export,
    Help,
    ListQueries,
    ListTables,
    RunRaw,
    RunSaved,
    Search,
    SetOption,
    ShowAll,
    ShowLast,
    Unknown,
    parse_command,
)


class TestParseCommand:
    """Tests for classifying input lines."""

    @pytest.mark.parametrize("line", ["", "   ", ";", " ;; "])
    def test_empty(self, line):
        assert parse_command(line) == Empty()

    def test_set(self):
        assert parse_command(":set row_limit 3") == SetOption(key="row_limit", value=3)
        assert parse_command(":set column_limit 0") == SetOption(key="column_limit", value=0)

    @pytest.mark.parametrize(
        "line",
        [":set", ":set row_limit", ":set page_size 3", ":set row_limit -1", ":set row_limit x", ":set row_limit 1 2"],
    )
    def test_bad_set(self, line):
        with pytest.raises(CommandError):
            parse_command(line)

    def test_list_and_all(self):
        assert parse_command(":list") == ShowLast()
        assert parse_command(":all") == ShowAll()

    def test_export(self):
        assert parse_command(":export csv -") == Export(format=ExportFormat.CSV, target="-")
        assert parse_command(":export excel /tmp/out.xlsx") == Export(
            format=ExportFormat.EXCEL, target="/tmp/out.xlsx"
        )

    def test_export_needs_target(self):
        with pytest.raises(CommandError):
            parse_command(":export csv")

    def test_export_unknown_format(self):
        with pytest.raises(ExportError):
            parse_command(":export xml -")

    def test_describe_aliases(self):
        assert parse_command(":describe orders") == Describe(name="orders")
        assert parse_command(":desc orders") == Describe(name="orders")

    def test_search_keeps_whole_pattern(self):
        assert parse_command(":search user%") == Search(pattern="user%")

    def test_catalog_commands(self):
        assert parse_command(":tables") == ListTables()
        assert parse_command(":queries") == ListQueries()
        assert parse_command(":help") == Help()

    def test_unknown_meta_command(self):
        assert parse_command(":quit") == Unknown(word=":quit")

    def test_saved_query(self):
        assert parse_command("@locks") == RunSaved(name="locks")

    def test_raw_statement_is_trimmed(self):
        command = parse_command("  select * from t;  ")

        assert command == RunRaw(statement="select * from t")
        assert command.is_select

    def test_select_check_is_case_sensitive(self):
        assert not parse_command("SELECT 1").is_select

    def test_non_select(self):
        assert not parse_command("update t set x = 1;").is_select
