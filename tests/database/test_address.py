"""Tests for server address and user identity parsing."""

import pytest

from mssql_loader.database.address import parse_address
from mssql_loader.database.models import ConnectionParameters, DEFAULT_PORT
from mssql_loader.errors import ConfigurationInvalid, InvalidAddress


class TestServerAddress:
    """Test host/port/instance extraction."""

    def test_host_only_defaults_port(self):
        """A bare host gets the standard port."""
        params = parse_address("localhost", "testUser")

        assert params.host == "localhost"
        assert params.port == DEFAULT_PORT == 1433
        assert params.instance_name is None

    def test_colon_port(self):
        params = parse_address("db:1234", "testUser")

        assert params.host == "db"
        assert params.port == 1234
        assert params.instance_name is None

    def test_comma_port(self):
        params = parse_address("db,1433", "testUser")

        assert params.host == "db"
        assert params.port == 1433
        assert params.instance_name is None

    def test_backslash_instance(self):
        params = parse_address("db\\INST1", "testUser")

        assert params.host == "db"
        assert params.instance_name == "INST1"
        assert params.port is None

    def test_port_then_instance_drops_instance(self):
        """host:port\\instance keeps the port and leaves the instance unset."""
        params = parse_address("db:1433\\INST1", "testUser")

        assert params.host == "db"
        assert params.port == 1433
        assert params.instance_name is None

    def test_instance_then_port_drops_port(self):
        """When the named qualifier comes first it wins."""
        params = parse_address("db\\INST1:1433", "testUser")

        assert params.instance_name == "INST1"
        assert params.port is None

    @pytest.mark.parametrize("address", ["db:", "db,", "db\\"])
    def test_empty_qualifier_defaults_port(self, address):
        params = parse_address(address, "testUser")

        assert params.port == DEFAULT_PORT
        assert params.instance_name is None
        assert params.server_spec == "db,1433"

    @pytest.mark.parametrize("qualifier", ["1_433", "+5"])
    def test_only_plain_digits_are_a_port(self, qualifier):
        params = parse_address(f"db:{qualifier}", "testUser")

        assert params.port is None
        assert params.instance_name == qualifier

    def test_database_name_carried(self):
        params = parse_address("db", "testUser", "Sales")

        assert params.database_name == "Sales"


class TestUserIdentity:
    """Test domain/user extraction."""

    def test_domain_and_user(self):
        params = parse_address("db", "CORP\\alice")

        assert params.domain == "CORP"
        assert params.user_name == "alice"
        assert params.login == "CORP\\alice"

    def test_plain_user(self):
        params = parse_address("db", "alice")

        assert params.domain is None
        assert params.user_name == "alice"
        assert params.login == "alice"


class TestInvalidAddress:
    """Test rejection of empty inputs."""

    def test_empty_address(self):
        with pytest.raises(InvalidAddress):
            parse_address("", "alice")

    def test_empty_user(self):
        with pytest.raises(InvalidAddress):
            parse_address("db", "")

    def test_invalid_address_is_configuration_error(self):
        with pytest.raises(ConfigurationInvalid) as exc_info:
            parse_address("", "alice")

        assert exc_info.value.code == "INVALID_ADDRESS"


class TestServerSpec:
    """Test ODBC server rendering."""

    def test_port_rendering(self):
        assert parse_address("db:1234", "alice").server_spec == "db,1234"

    def test_instance_rendering(self):
        assert parse_address("db\\INST1", "alice").server_spec == "db\\INST1"

    def test_port_and_instance_rejected(self):
        with pytest.raises(ValueError):
            ConnectionParameters(host="db", user_name="alice", port=1433, instance_name="INST1")
