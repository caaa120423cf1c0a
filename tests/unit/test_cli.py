"""
Unit Tests for CLI

Tests the QueryIQ CLI commands.
"""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from queryiq.cli import cli
from queryiq.connectors.base import QueryResult
from queryiq.introspection import DatabaseConnectionError
from queryiq.models.schema import (
    CollectionSummary,
    DatabaseSummary,
    TableColumn,
    TableSummary,
)
from queryiq.security.encryption import CredentialCipher


@pytest.fixture
def runner():
    return CliRunner()


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("introspect", "export", "tools", "keygen", "serve"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_keygen_prints_usable_key(self, runner):
        result = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0
        key = result.output.strip()
        cipher = CredentialCipher(key)
        assert cipher.decrypt(cipher.encrypt("x")) == "x"


class TestToolsCommand:
    def test_sql_tools(self, runner):
        result = runner.invoke(cli, ["tools", "--type", "postgres"])
        assert result.exit_code == 0
        assert "getRowCount" in result.output
        assert "findDocuments" not in result.output

    def test_mongo_tools(self, runner):
        result = runner.invoke(cli, ["tools", "--type", "mongodb"])
        assert result.exit_code == 0
        assert "getDocumentCount" in result.output

    def test_unknown_type(self, runner):
        result = runner.invoke(cli, ["tools", "--type", "oracle"])
        assert result.exit_code != 0


class TestIntrospectCommand:
    def test_tables(self, runner):
        summary = DatabaseSummary(
            summary=[TableSummary(table="users", columns=[TableColumn(name="id", type="integer")])],
            db_type="postgresql",
        )
        with patch("queryiq.cli.introspect_database", new=AsyncMock(return_value=summary)):
            result = runner.invoke(cli, ["introspect", "postgresql://u:p@h/db", "--type", "postgresql"])

        assert result.exit_code == 0
        assert "users" in result.output
        assert "id (integer)" in result.output

    def test_collections(self, runner):
        summary = DatabaseSummary(
            summary=[CollectionSummary(collection="events", document_count=12, storage_size=4096)],
            db_type="mongodb",
        )
        with patch("queryiq.cli.introspect_database", new=AsyncMock(return_value=summary)):
            result = runner.invoke(cli, ["introspect", "mongodb://h/db", "--type", "mongodb"])

        assert result.exit_code == 0
        assert "events" in result.output
        assert "4096" in result.output

    def test_connection_failure(self, runner):
        error = DatabaseConnectionError("PostgreSQL", OSError("refused"))
        with patch("queryiq.cli.introspect_database", new=AsyncMock(side_effect=error)):
            result = runner.invoke(cli, ["introspect", "postgresql://u:p@h/db", "--type", "postgresql"])

        assert result.exit_code == 1
        assert "Failed to connect" in result.output


class TestExportCommand:
    def test_writes_workbook(self, runner, tmp_path):
        output = tmp_path / "users.xlsx"
        rows = QueryResult(rows=[{"id": 1}, {"id": 2}], row_count=2, execution_time_ms=1.0)
        with patch("queryiq.export.execute_query", new=AsyncMock(return_value=rows)):
            result = runner.invoke(
                cli,
                ["export", "mysql://u:p@h/db", "SELECT id FROM users", "--type", "mysql", "-o", str(output)],
            )

        assert result.exit_code == 0
        assert "Wrote 2 rows" in result.output
        assert list(load_workbook(output).active.values) == [("id",), (1,), (2,)]

    def test_rejects_non_select(self, runner, tmp_path):
        result = runner.invoke(
            cli,
            ["export", "postgresql://u:p@h/db", "UPDATE users SET a = 1", "-o", str(tmp_path / "x.xlsx")],
        )

        assert result.exit_code == 1
        assert "Only SELECT queries are allowed" in result.output
        assert not (tmp_path / "x.xlsx").exists()
