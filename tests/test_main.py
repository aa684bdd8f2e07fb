"""Tests for the typer command line."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import dbc.config
from dbc.main import app
from dbc.statement_log import StatementLogger

runner = CliRunner()


@pytest.fixture(autouse=True)
def configured(connections_file, monkeypatch):
    """Point the CLI at the test connections file and a disabled statement log."""
    monkeypatch.setattr(dbc.config.settings, "connections_file", connections_file)
    with patch("dbc.main.get_statement_logger", return_value=StatementLogger(enabled=False)):
        yield


class TestQueryCommand:
    """Tests for one-shot queries."""

    def test_csv_output(self):
        result = runner.invoke(app, ["query", "local", "select", "1", "as", "n", "--format", "csv"])

        assert result.exit_code == 0
        assert result.output == "n\n1\n"

    def test_json_output(self):
        result = runner.invoke(app, ["query", "local", "select null as a, 'x' as b", "--format", "json"])

        assert result.exit_code == 0
        assert '"a": null' in result.output
        assert '"b": "x"' in result.output

    def test_table_output(self):
        result = runner.invoke(app, ["query", "local", "select 'hello' as greeting"])

        assert result.exit_code == 0
        assert "hello" in result.output

    def test_non_select(self):
        result = runner.invoke(app, ["query", "local", "create table t (x integer)"])

        assert result.exit_code == 0
        assert "0 rows updated." in result.output

    def test_bad_statement_exits_1(self):
        result = runner.invoke(app, ["query", "local", "select * from nowhere"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_unknown_identifier_exits_1(self):
        result = runner.invoke(app, ["query", "nope", "select 1"])

        assert result.exit_code == 1
        assert "No such identifier: nope" in result.output

    def test_unknown_format(self):
        result = runner.invoke(app, ["query", "local", "select 1", "--format", "xml"])

        assert result.exit_code == 2


class TestConnectCommand:
    """Tests for the interactive command's startup path."""

    def test_unknown_identifier_exits_1(self):
        result = runner.invoke(app, ["connect", "nope", "--quiet"])

        assert result.exit_code == 1

    def test_bad_url_exits_1(self):
        result = runner.invoke(app, ["connect", "broken", "--quiet"])

        assert result.exit_code == 1

    def test_session_runs_and_says_goodbye(self):
        with patch("dbc.main.run_shell") as run_shell:
            result = runner.invoke(app, ["connect", "local"])

        assert result.exit_code == 0
        assert "Welcome to dbc" in result.output
        assert "Connected to version" in result.output
        assert "Thank you for using dbc." in result.output
        run_shell.assert_called_once()

    def test_quiet_and_no_cache(self):
        with patch("dbc.main.run_shell") as run_shell:
            result = runner.invoke(app, ["connect", "local", "--quiet", "--no-cache"])

        assert result.exit_code == 0
        assert "Welcome" not in result.output
        assert run_shell.call_args.kwargs["table_names"] == []


class TestOtherCommands:
    """Tests for connections and config."""

    def test_connections_hides_passwords(self):
        result = runner.invoke(app, ["connections"])

        assert result.exit_code == 0
        assert "prod" in result.output
        assert "secret" not in result.output

    def test_config(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Row limit: 20" in result.output
