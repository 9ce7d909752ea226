"""SQL Server catalog access for mssql-loader.

This module provides the building blocks the loader is assembled from:
address parsing, a bounded connection pool, catalog queries, a per-session
cache and the mapping from SQL Server types to canonical property types.
"""

from .models import (
    ColumnRecord,
    ConnectionParameters,
    ForeignKeyRow,
    ModelReference,
    ReferenceRecord,
    TableRecord,
)
from .address import parse_address
from .pool import ConnectionPool
from .catalog import CatalogReader, group_foreign_keys
from .cache import SchemaCache
from .type_mappers import TypeMapper, SqlServerTypeMapper, parse_default
from .property_types import (
    Autogenerate,
    BinaryPropertyType,
    BooleanPropertyType,
    DateTimePropertyType,
    DecimalPropertyType,
    IntegerPropertyType,
    PropertyKind,
    PropertyType,
    StringPropertyType,
    UniqueIdentifierPropertyType,
)

__all__ = [
    # Data models
    "ColumnRecord",
    "ConnectionParameters",
    "ForeignKeyRow",
    "ModelReference",
    "ReferenceRecord",
    "TableRecord",
    # Catalog access
    "parse_address",
    "ConnectionPool",
    "CatalogReader",
    "group_foreign_keys",
    "SchemaCache",
    # Type mapping
    "TypeMapper",
    "SqlServerTypeMapper",
    "parse_default",
    # Canonical property types
    "Autogenerate",
    "BinaryPropertyType",
    "BooleanPropertyType",
    "DateTimePropertyType",
    "DecimalPropertyType",
    "IntegerPropertyType",
    "PropertyKind",
    "PropertyType",
    "StringPropertyType",
    "UniqueIdentifierPropertyType",
]
