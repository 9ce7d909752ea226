"""Tests for loading a complete schema."""

import json

import pytest

from mssql_loader.database.property_types import PropertyKind
from mssql_loader.schema import read_schema


class TestReadSchema:
    """Test the full load pass over a prepared loader."""

    @pytest.mark.asyncio
    async def test_all_models_loaded(self, make_loader, loader_options):
        async with make_loader() as loader:
            await loader.prepare(loader_options)
            schema = await read_schema(loader)

        assert [m.name for m in schema.models] == ["Customers", "Orders", "Shipments"]
        customers = schema.get_model("Customers")
        assert customers.properties["CustomerId"].kind == PropertyKind.INTEGER
        assert customers.metadata["schemaName"] == "dbo"

    @pytest.mark.asyncio
    async def test_unsupported_property_recorded(self, make_loader, loader_options):
        async with make_loader() as loader:
            await loader.prepare(loader_options)
            schema = await read_schema(loader)

        orders = schema.get_model("Orders")
        assert "Location" not in orders.properties
        assert "Orders.Location" in orders.errors["Location"]
        assert schema.error_count == 1

    @pytest.mark.asyncio
    async def test_references_resolved(self, make_loader, loader_options):
        async with make_loader() as loader:
            await loader.prepare(loader_options)
            schema = await read_schema(loader)

        shipments = schema.get_model("Shipments")
        reference = shipments.references["FK_Shipments_OrderLines"]
        assert reference.target_model == "Orders"
        assert len(reference.columns) == 2

    @pytest.mark.asyncio
    async def test_model_filter(self, make_loader, loader_options):
        async with make_loader() as loader:
            await loader.prepare(loader_options)
            schema = await read_schema(loader, ["Orders"])

        assert [m.name for m in schema.models] == ["Orders"]
        assert schema.get_model("Customers") is None

    @pytest.mark.asyncio
    async def test_to_dict_is_json_serializable(self, make_loader, loader_options):
        async with make_loader() as loader:
            await loader.prepare(loader_options)
            schema = await read_schema(loader)

        data = json.loads(json.dumps(schema.to_dict()))

        created_at = data["models"]["Customers"]["properties"]["CreatedAt"]
        assert created_at == {"type": "DateTime", "nullable": False, "isPrimaryKey": False, "default": "NOW"}
        fk = data["models"]["Orders"]["references"]["FK_Orders_Customers"]
        assert fk["targetModel"] == "Customers"
        assert fk["columns"] == [{"local": "CustomerId", "target": "CustomerId"}]
