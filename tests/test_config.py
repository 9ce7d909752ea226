"""Tests for settings and loader option validation."""

import pytest

from mssql_loader.config import LoaderOptions, Settings, get_settings
from mssql_loader.database.address import parse_address
from mssql_loader.database.connection import build_connection_string
from mssql_loader.errors import ConfigurationInvalid


class TestSettings:
    """Test settings defaults and overrides."""

    def test_pool_defaults(self, monkeypatch):
        monkeypatch.delenv("MSSQL_LOADER_POOL_MIN", raising=False)
        monkeypatch.delenv("MSSQL_LOADER_POOL_MAX", raising=False)

        settings = Settings()

        assert settings.pool_min == 10
        assert settings.pool_max == 30

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MSSQL_LOADER_POOL_MAX", "50")

        assert Settings().pool_max == 50

    def test_min_above_max_rejected(self):
        with pytest.raises(ConfigurationInvalid):
            get_settings(pool_min=40, pool_max=30)


class TestLoaderOptions:
    """Test host option parsing."""

    def test_parse_valid(self, loader_options):
        options = LoaderOptions.parse(loader_options)

        assert options.server == "db01:1433"
        assert options.database_name == "Sales"
        assert options.user_name == "CORP\\alice"
        assert "secret" not in repr(options)

    def test_empty_string_rejected(self, loader_options):
        loader_options["password"] = ""

        with pytest.raises(ConfigurationInvalid) as exc_info:
            LoaderOptions.parse(loader_options)

        assert exc_info.value.details["fields"] == ["password"]

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationInvalid):
            LoaderOptions.parse(None)


class TestConnectionString:
    """Test ODBC connection string rendering."""

    def test_port_and_domain(self):
        settings = Settings(odbc_driver="ODBC Driver 18 for SQL Server", app_name="mssql-loader")
        params = parse_address("db01:1500", "CORP\\alice", "Sales")

        result = build_connection_string(params, "secret", settings)

        assert "DRIVER={ODBC Driver 18 for SQL Server}" in result
        assert "SERVER=db01,1500" in result
        assert "DATABASE=Sales" in result
        assert "UID=CORP\\alice" in result
        assert "PWD=secret" in result

    def test_instance(self):
        params = parse_address("db01\\SQLEXPRESS", "alice", "Sales")

        result = build_connection_string(params, "secret", Settings())

        assert "SERVER=db01\\SQLEXPRESS" in result

    def test_password_with_separator_quoted(self):
        params = parse_address("db01", "alice", "Sales")

        result = build_connection_string(params, "p;w}d", Settings())

        assert "PWD={p;w}}d}" in result
