"""Tests for the command line interface."""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from mssql_loader.main import app

runner = CliRunner()

INSPECT_ARGS = [
    "inspect",
    "--server", "db01:1433",
    "--database", "Sales",
    "--user", "CORP\\alice",
    "--password", "secret",
]


class TestConfigCommand:
    def test_shows_pool_bounds(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Pool size" in result.stdout


class TestInspectCommand:
    """Test schema inspection end to end against the fake catalog."""

    def test_table_output(self, make_loader):
        with patch("mssql_loader.main.MsSqlLoader", side_effect=lambda: make_loader()):
            result = runner.invoke(app, INSPECT_ARGS)

        assert result.exit_code == 0
        assert "Customers" in result.stdout
        assert "FK_Shipments_OrderLines" in result.stdout
        assert "unsupported types" in result.stdout

    def test_json_output_file(self, make_loader, tmp_path):
        output = tmp_path / "schema.json"
        with patch("mssql_loader.main.MsSqlLoader", side_effect=lambda: make_loader()):
            result = runner.invoke(app, INSPECT_ARGS + ["--output", str(output), "--model", "Orders"])

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert list(data["models"]) == ["Orders"]

    def test_connectivity_failure_exits_nonzero(self, make_loader, sample_database):
        sample_database.fail_connect = True
        with patch("mssql_loader.main.MsSqlLoader", side_effect=lambda: make_loader()):
            result = runner.invoke(app, INSPECT_ARGS)

        assert result.exit_code == 1
        assert "CONNECTIVITY_FAILED" in result.stdout
