"""SQL Server schema loader."""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .base import SchemaLoader
from .config import LoaderOptions, Settings, get_settings
from .database.address import parse_address
from .database.catalog import group_foreign_keys
from .database.connection import connection_factory
from .database.models import ConnectionParameters, ModelReference, TableRecord
from .database.property_types import PropertyType
from .database.type_mappers import SqlServerTypeMapper, TypeMapper
from .errors import (
    ConnectivityFailed,
    LoaderStateError,
    ModelNotIntrospected,
    PropertyNotFound,
    ReferenceNotFound,
    SessionClosed,
)
from .session import Session
from .sink import LogSink, LoggingSink

logger = logging.getLogger(__name__)

ConnectFactory = Callable[[ConnectionParameters, str, Settings], Callable[[], Any]]


class LoaderState(str, Enum):
    """Lifecycle states. Transitions only move forward."""
    CREATED = "created"
    PREPARED = "prepared"
    ACTIVE = "active"
    DISPOSED = "disposed"


class MsSqlLoader(SchemaLoader):
    """Reads tables, columns and foreign keys from a SQL Server database.

    Example usage:
        loader = MsSqlLoader()
        await loader.prepare({
            "server": "db01\\\\SQLEXPRESS",
            "databaseName": "Sales",
            "userName": "CORP\\\\alice",
            "password": "...",
        })
        for model in await loader.list_model_names():
            for prop in await loader.list_property_names(model):
                print(model, prop, await loader.resolve_property_type(model, prop))
        await loader.finalize()

    Details (property types, references) are only resolved from data a
    previous listing call cached; they never trigger queries of their own.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        connect_factory: Optional[ConnectFactory] = None,
        type_mapper: Optional[TypeMapper] = None,
    ):
        self.settings = settings or get_settings()
        self._connect_factory = connect_factory or connection_factory
        self._type_mapper = type_mapper or SqlServerTypeMapper()
        self._session: Optional[Session] = None
        self._sink: LogSink = LoggingSink(logger)
        self.state = LoaderState.CREATED
        self.connection_params: Optional[ConnectionParameters] = None

    async def prepare(self, options: Dict[str, Any], sink: Optional[LogSink] = None) -> None:
        """Validate options, open the connection pool and check connectivity.

        On failure the loader stays in the CREATED state so ``prepare`` can
        be retried.

        Raises:
            ConfigurationInvalid: for missing or malformed options
            ConnectivityFailed: if no connection could be established
        """
        if self.state == LoaderState.DISPOSED:
            raise SessionClosed("Loader has been finalized; create a new loader")
        if self.state != LoaderState.CREATED:
            raise LoaderStateError(f"Loader is already {self.state.value}")

        loader_options = LoaderOptions.parse(options)
        params = parse_address(loader_options.server, loader_options.user_name, loader_options.database_name)
        if sink is not None:
            self._sink = sink

        connect = self._connect_factory(params, loader_options.password, self.settings)
        session = Session(connect, self.settings, self._sink)
        try:
            await session.open()
        except ConnectivityFailed:
            await session.close()
            raise

        self._session = session
        self.connection_params = params
        self.state = LoaderState.PREPARED
        self._sink.log(f"Connected to {params.server_spec}, database {params.database_name}")

    async def list_model_names(self) -> List[str]:
        session = self._active_session()
        tables = await session.catalog.list_tables()
        for table in tables:
            cached = session.cache.get(table.name)
            # Keep already fetched columns/references for an unchanged table
            if cached is None or cached.object_id != table.object_id:
                session.cache.put(table.name, table)
        return [table.name for table in tables]

    async def list_property_names(self, model_name: str) -> List[str]:
        session = self._active_session()
        columns = await session.catalog.list_columns(self._table_ref(session, model_name))
        if not session.cache.update_columns(model_name, columns):
            self._sink.log(f"Columns of {model_name} not cached; call list_model_names() first")
        return [column.name for column in columns]

    async def resolve_property_type(self, model_name: str, property_name: str) -> PropertyType:
        """Map a cached column to its canonical type.

        Raises:
            ModelNotIntrospected: if the model's columns are not cached
            PropertyNotFound: if the model has no such column
            UnsupportedType: if the column's SQL type cannot be mapped
        """
        session = self._active_session()
        table = session.cache.get(model_name)
        if table is None or table.columns is None:
            raise ModelNotIntrospected(model_name, "list_property_names")

        property_type = table.property_types.get(property_name)
        if property_type is None:
            column = table.get_column(property_name)
            if column is None:
                raise PropertyNotFound(model_name, property_name)
            property_type = self._type_mapper.map_column(column, model_name)
            table.property_types[property_name] = property_type
        return property_type

    async def list_reference_names(self, model_name: str) -> List[str]:
        session = self._active_session()
        rows = await session.catalog.list_foreign_keys(self._table_ref(session, model_name))
        references = group_foreign_keys(rows)
        if not session.cache.update_references(model_name, references):
            self._sink.log(f"References of {model_name} not cached; call list_model_names() first")
        return list(references)

    async def resolve_reference(self, model_name: str, reference_name: str) -> ModelReference:
        """Resolve a cached foreign key into a model reference.

        Raises:
            ModelNotIntrospected: if the model's references are not cached
            ReferenceNotFound: if the model has no such reference
        """
        session = self._active_session()
        table = session.cache.get(model_name)
        if table is None or table.references is None:
            raise ModelNotIntrospected(model_name, "list_reference_names")

        reference = table.references.get(reference_name)
        if reference is None:
            raise ReferenceNotFound(model_name, reference_name)
        return ModelReference(
            name=reference.name,
            target_model=reference.ref_table,
            columns=tuple(reference.columns),
        )

    async def get_metadata(self, model_name: str) -> Dict[str, Any]:
        """Schema name, table name and raw SQL type/default per cached column.

        Unknown models yield an empty dict.
        """
        session = self._active_session()
        table = session.cache.get(model_name)
        if table is None:
            return {}

        metadata: Dict[str, Any] = {
            "schemaName": table.schema_name,
            "tableName": table.name,
        }
        if table.columns is not None:
            properties = {}
            for column in table.columns:
                column_metadata: Dict[str, Any] = {"sqlDataType": column.data_type}
                if column.default_definition is not None:
                    column_metadata["sqlDefault"] = column.default_definition
                properties[column.name] = column_metadata
            metadata["properties"] = properties
        return metadata

    async def finalize(self) -> None:
        """Drain the pool and drop cached data. Safe to call more than once."""
        if self.state == LoaderState.DISPOSED:
            return
        session, self._session = self._session, None
        self.state = LoaderState.DISPOSED
        if session is not None:
            await session.close()
            self._sink.log("Connection pool drained")

    def _active_session(self) -> Session:
        if self.state == LoaderState.DISPOSED:
            raise SessionClosed("Loader has been finalized; create a new loader")
        if self._session is None:
            raise SessionClosed("Loader is not connected; call prepare() first")
        if self.state == LoaderState.PREPARED:
            self.state = LoaderState.ACTIVE
        return self._session

    @staticmethod
    def _table_ref(session: Session, model_name: str) -> Union[int, str]:
        table: Optional[TableRecord] = session.cache.get(model_name)
        if table is not None:
            return table.object_id
        return model_name
