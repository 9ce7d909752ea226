"""Shared pytest fixtures for mssql-loader tests."""

import pytest

from mssql_loader.config import Settings
from mssql_loader.loader import MsSqlLoader

from .fixtures import FakeDatabase, RecordingSink, column_row, fk_row


@pytest.fixture
def settings():
    """Small, fast pool settings."""
    return Settings(pool_min=2, pool_max=4, acquire_timeout=1.0)


@pytest.fixture
def sink():
    """A log sink that records everything."""
    return RecordingSink()


@pytest.fixture
def loader_options():
    """Valid host options for prepare()."""
    return {
        "server": "db01:1433",
        "databaseName": "Sales",
        "userName": "CORP\\alice",
        "password": "secret",
    }


@pytest.fixture
def sample_database():
    """A catalog with customers, orders and a composite-key order line table."""
    db = FakeDatabase()
    db.add_table(
        101,
        "Customers",
        columns=[
            column_row("CustomerId", "int", is_primary_key=True, is_identity=True, seed_value=1, increment_value=1),
            column_row("Name", "nvarchar", max_length=200),
            column_row("Email", "varchar", max_length=255, is_nullable=True),
            column_row("IsActive", "bit", max_length=1, default_definition="((1))"),
            column_row("CreatedAt", "datetime2", max_length=8, default_definition="(getdate())"),
            column_row("RowGuid", "uniqueidentifier", max_length=16, default_definition="(newid())"),
        ],
    )
    db.add_table(
        102,
        "Orders",
        columns=[
            column_row("OrderId", "int", is_primary_key=True),
            column_row("LineNo", "smallint", max_length=2, is_primary_key=True),
            column_row("CustomerId", "int"),
            column_row("Total", "money", max_length=8, precision=19, scale=4),
            column_row("Location", "geography", max_length=-1, is_nullable=True),
        ],
        foreign_keys=[
            fk_row("FK_Orders_Customers", "Orders", "CustomerId", "Customers", "CustomerId", object_id=901),
        ],
    )
    db.add_table(
        103,
        "Shipments",
        columns=[
            column_row("ShipmentId", "bigint", max_length=8, is_primary_key=True),
            column_row("OrderId", "int"),
            column_row("LineNo", "smallint", max_length=2),
        ],
        foreign_keys=[
            fk_row("FK_Shipments_OrderLines", "Shipments", "OrderId", "Orders", "OrderId", object_id=902),
            fk_row("FK_Shipments_OrderLines", "Shipments", "LineNo", "Orders", "LineNo", object_id=902),
        ],
    )
    return db


@pytest.fixture
def make_loader(settings, sample_database):
    """Build loaders wired to the sample database."""
    def _make(database=None):
        db = database or sample_database

        def connect_factory(params, password, loader_settings):
            db.connection_params = params
            db.password = password
            return db.connect

        return MsSqlLoader(settings=settings, connect_factory=connect_factory)

    return _make
