"""Read-only queries against the SQL Server catalog views."""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from ..errors import QueryFailed
from ..sink import LogSink, LoggingSink
from .models import ColumnRecord, ForeignKeyRow, ReferenceRecord, TableRecord
from .pool import ConnectionPool

logger = logging.getLogger(__name__)

T = TypeVar("T")

TABLES_QUERY = """
SELECT t.object_id, t.name, SCHEMA_NAME(t.schema_id) AS schema_name
FROM sys.tables t
ORDER BY t.name
"""

COLUMNS_QUERY = """
SELECT c.[name], TYPE_NAME(c.user_type_id) AS data_type, c.max_length, c.[precision], c.scale, c.is_nullable,
  CAST(IIF(ixc.index_column_id IS NOT NULL, 1, 0) AS BIT) AS is_primary_key, c.is_identity,
  CAST(ic.seed_value AS BIGINT) AS seed_value, CAST(ic.increment_value AS BIGINT) AS increment_value,
  df.[definition] AS default_definition
FROM sys.columns c
LEFT OUTER JOIN sys.indexes ix ON ix.object_id = c.object_id AND ix.is_primary_key = 1
LEFT OUTER JOIN sys.index_columns ixc ON ixc.object_id = c.object_id AND ixc.index_id = ix.index_id
  AND ixc.column_id = c.column_id
LEFT OUTER JOIN sys.default_constraints df ON df.parent_object_id = c.object_id AND df.parent_column_id = c.column_id
LEFT OUTER JOIN sys.identity_columns ic ON ic.object_id = c.object_id AND ic.column_id = c.column_id
WHERE {object_filter}
ORDER BY c.column_id
"""

FOREIGN_KEYS_QUERY = """
SELECT fk.object_id, fk.name, OBJECT_NAME(fk.parent_object_id) AS local_table, pc.name AS local_column,
  OBJECT_NAME(fk.referenced_object_id) AS ref_table, rc.name AS ref_column
FROM sys.foreign_keys fk
INNER JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id
INNER JOIN sys.columns pc ON pc.object_id = fkc.parent_object_id AND pc.column_id = fkc.parent_column_id
INNER JOIN sys.columns rc ON rc.object_id = fkc.referenced_object_id AND rc.column_id = fkc.referenced_column_id
WHERE {object_filter}
ORDER BY fk.name, fkc.constraint_column_id
"""

TableRef = Union[int, str]


class CatalogReader:
    """Runs one metadata query per call on a pooled connection."""

    def __init__(self, pool: ConnectionPool, sink: Optional[LogSink] = None):
        self._pool = pool
        self._sink = sink or LoggingSink(logger)

    async def list_tables(self) -> List[TableRecord]:
        """All user tables, ordered by name."""
        return await self._fetch("tables", TABLES_QUERY, (), _table_from_row)

    async def list_columns(self, table: TableRef) -> List[ColumnRecord]:
        """Columns of a table given its object id or (qualified) name."""
        clause, params = _object_filter("c.object_id", table)
        query = COLUMNS_QUERY.format(object_filter=clause)
        return await self._fetch("columns", query, params, _column_from_row, table)

    async def list_foreign_keys(self, table: TableRef) -> List[ForeignKeyRow]:
        """One row per column pair of every foreign key declared on a table."""
        clause, params = _object_filter("fk.parent_object_id", table)
        query = FOREIGN_KEYS_QUERY.format(object_filter=clause)
        return await self._fetch("foreign_keys", query, params, _foreign_key_from_row, table)

    async def _fetch(
        self,
        query_name: str,
        query: str,
        params: Sequence[Any],
        factory: Callable[[Dict[str, Any]], T],
        table: Optional[TableRef] = None,
    ) -> List[T]:
        async with self._pool.connection() as connection:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(
                None, self._execute, connection, query_name, query, params, factory, table
            )

    def _execute(
        self,
        connection: Any,
        query_name: str,
        query: str,
        params: Sequence[Any],
        factory: Callable[[Dict[str, Any]], T],
        table: Optional[TableRef],
    ) -> List[T]:
        """Blocking part of a catalog call; runs in the executor."""
        cursor = connection.cursor()
        try:
            try:
                cursor.execute(query, *params)
                columns = [description[0] for description in cursor.description]
                rows = cursor.fetchall()
            except Exception as e:
                self._sink.error(f"Catalog query {query_name} failed:", e)
                raise QueryFailed(
                    f"Catalog query {query_name} failed: {e}",
                    details={"query": query_name, "table": table},
                ) from e

            results = []
            for row in rows:
                try:
                    results.append(factory(dict(zip(columns, row))))
                except Exception as e:
                    self._sink.error(f"Skipping unreadable {query_name} row:", e)
            logger.debug("Catalog query %s returned %d rows", query_name, len(results))
            return results
        finally:
            cursor.close()


def group_foreign_keys(rows: Iterable[ForeignKeyRow]) -> Dict[str, ReferenceRecord]:
    """Group per-column foreign key rows into one reference per constraint.

    Column pairs keep row order. The target table comes from the first row of
    each constraint.
    """
    references: Dict[str, ReferenceRecord] = {}
    for row in rows:
        reference = references.get(row.name)
        if reference is None:
            reference = ReferenceRecord(
                name=row.name,
                ref_table=row.ref_table,
                object_id=row.object_id,
            )
            references[row.name] = reference
        reference.columns.append((row.local_column, row.ref_column))
    return references


def _object_filter(column: str, table: TableRef) -> Tuple[str, Tuple[Any, ...]]:
    if isinstance(table, int):
        return f"{column} = ?", (table,)
    return f"{column} = OBJECT_ID(?)", (table,)


def _table_from_row(row: Dict[str, Any]) -> TableRecord:
    return TableRecord(
        object_id=int(row["object_id"]),
        name=row["name"],
        schema_name=row["schema_name"],
    )


def _column_from_row(row: Dict[str, Any]) -> ColumnRecord:
    return ColumnRecord(
        name=row["name"],
        data_type=row["data_type"],
        max_length=int(row["max_length"]),
        precision=int(row["precision"]),
        scale=int(row["scale"]),
        is_nullable=bool(row["is_nullable"]),
        is_primary_key=bool(row["is_primary_key"]),
        is_identity=bool(row["is_identity"]),
        seed_value=_optional_int(row.get("seed_value")),
        increment_value=_optional_int(row.get("increment_value")),
        default_definition=row.get("default_definition"),
    )


def _foreign_key_from_row(row: Dict[str, Any]) -> ForeignKeyRow:
    return ForeignKeyRow(
        name=row["name"],
        local_column=row["local_column"],
        ref_table=row["ref_table"],
        ref_column=row["ref_column"],
        object_id=_optional_int(row.get("object_id")),
        local_table=row.get("local_table"),
    )


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)
