"""Database-specific type mapping strategies."""

from abc import ABC, abstractmethod
from typing import Optional

from ..errors import UnsupportedType
from .models import ColumnRecord
from .property_types import (
    NOW,
    Autogenerate,
    BinaryPropertyType,
    BooleanPropertyType,
    DateTimePropertyType,
    DecimalPropertyType,
    IntegerPropertyType,
    PropertyType,
    StringPropertyType,
    UniqueIdentifierPropertyType,
)


class TypeMapper(ABC):
    """Abstract base class for database type mapping."""

    @abstractmethod
    def map_column(self, column: ColumnRecord, model_name: Optional[str] = None) -> PropertyType:
        """Convert a catalog column to its canonical property type."""
        pass


class SqlServerTypeMapper(TypeMapper):
    """Type mapper for SQL Server column types."""

    BOOLEAN_TYPES = frozenset({"bit"})
    BINARY_TYPES = frozenset({"binary", "varbinary", "image", "rowversion", "timestamp"})
    INTEGER_TYPES = frozenset({"tinyint", "smallint", "int", "bigint"})
    DECIMAL_TYPES = frozenset({"decimal", "numeric", "smallmoney", "money", "real", "float"})
    DATETIME_TYPES = frozenset({"date", "datetime", "datetime2", "datetimeoffset", "smalldatetime", "time"})
    STRING_TYPES = frozenset({"char", "varchar", "text"})
    UNICODE_STRING_TYPES = frozenset({"nchar", "nvarchar", "ntext", "sysname"})
    UNIQUEIDENTIFIER_TYPES = frozenset({"uniqueidentifier"})

    # Default functions that mean "the current timestamp"
    NOW_DEFAULTS = frozenset({
        "getdate()",
        "getutcdate()",
        "sysdatetime()",
        "sysutcdatetime()",
        "sysdatetimeoffset()",
        "current_timestamp",
    })

    def map_column(self, column: ColumnRecord, model_name: Optional[str] = None) -> PropertyType:
        """Convert a SQL Server column to a canonical property type.

        Raises:
            UnsupportedType: if the column's type belongs to no known family
        """
        data_type = column.data_type.lower()

        if data_type in self.BOOLEAN_TYPES:
            return self._boolean(column)
        elif data_type in self.BINARY_TYPES:
            return self._binary(column)
        elif data_type in self.INTEGER_TYPES:
            return self._integer(column)
        elif data_type in self.DECIMAL_TYPES:
            return self._decimal(column)
        elif data_type in self.DATETIME_TYPES:
            return self._datetime(column)
        elif data_type in self.STRING_TYPES or data_type in self.UNICODE_STRING_TYPES:
            return self._string(column)
        elif data_type in self.UNIQUEIDENTIFIER_TYPES:
            return self._unique_identifier(column)
        raise UnsupportedType(model_name, column.name, column.data_type)

    def _boolean(self, column: ColumnRecord) -> BooleanPropertyType:
        return BooleanPropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=parse_boolean_default(column.default_definition),
        )

    def _binary(self, column: ColumnRecord) -> BinaryPropertyType:
        return BinaryPropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=parse_default(column.default_definition),
            max_length=column.max_length if column.max_length > 0 else None,
        )

    def _integer(self, column: ColumnRecord) -> IntegerPropertyType:
        autogenerate = None
        if column.is_identity:
            autogenerate = Autogenerate(
                seed=int(column.seed_value or 1),
                increment=int(column.increment_value or 1),
            )
        return IntegerPropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=parse_default(column.default_definition),
            autogenerate=autogenerate,
        )

    def _decimal(self, column: ColumnRecord) -> DecimalPropertyType:
        return DecimalPropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=parse_default(column.default_definition),
            precision=column.precision,
            scale=column.scale,
        )

    def _datetime(self, column: ColumnRecord) -> DateTimePropertyType:
        default = parse_default(column.default_definition)
        if default and default.lower() in self.NOW_DEFAULTS:
            default = NOW
        return DateTimePropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=default,
        )

    def _string(self, column: ColumnRecord) -> StringPropertyType:
        # max_length counts bytes; unicode types store two bytes per character
        max_length: Optional[int] = column.max_length
        if max_length == -1:
            max_length = None
        elif max_length > 0 and column.data_type.lower() in self.UNICODE_STRING_TYPES:
            max_length = max_length // 2

        return StringPropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=parse_default(column.default_definition),
            max_length=max_length,
        )

    def _unique_identifier(self, column: ColumnRecord) -> UniqueIdentifierPropertyType:
        return UniqueIdentifierPropertyType(
            nullable=column.is_nullable,
            is_primary_key=column.is_primary_key,
            default=column.default_definition is not None,
        )


def parse_default(definition: Optional[str]) -> Optional[str]:
    """Strip the parentheses SQL Server wraps around stored default expressions.

    ``((0))`` becomes ``0``; ``(1)+(2)`` is left alone because its outer
    parentheses do not pair with each other.
    """
    if not definition:
        return definition

    result = definition
    while _has_enclosing_parens(result):
        result = result[1:-1]
    return result


def parse_boolean_default(definition: Optional[str]) -> Optional[bool]:
    """Map a bit default to True/False, or None when there is no default."""
    result = parse_default(definition)
    if result is None:
        return None
    return result == "1"


def _has_enclosing_parens(expression: str) -> bool:
    if len(expression) < 3 or expression[0] != "(" or expression[-1] != ")":
        return False

    depth = 0
    in_string = False
    for index, char in enumerate(expression):
        if char == "'":
            in_string = not in_string
        elif in_string:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index < len(expression) - 1:
                return False
    return depth == 0
