"""Introspect SQL Server catalogs into vendor-neutral schema models."""

from .base import SchemaLoader
from .loader import LoaderState, MsSqlLoader
from .schema import LoadedModel, LoadedSchema, read_schema

__version__ = "0.1.0"

__all__ = [
    "SchemaLoader",
    "LoaderState",
    "MsSqlLoader",
    "LoadedModel",
    "LoadedSchema",
    "read_schema",
]
