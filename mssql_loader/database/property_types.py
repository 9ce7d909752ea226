"""Canonical, vendor-neutral property types produced from catalog columns."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

NOW = "NOW"


class PropertyKind(str, Enum):
    """Canonical property type tags."""
    INTEGER = "Integer"
    DECIMAL = "Decimal"
    STRING = "String"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    BINARY = "Binary"
    UNIQUE_IDENTIFIER = "UniqueIdentifier"


@dataclass(frozen=True)
class PropertyType:
    """Fields shared by every canonical property type."""
    kind: ClassVar[PropertyKind]

    nullable: bool = False
    is_primary_key: bool = False
    default: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dictionary, omitting unset facets."""
        result: Dict[str, Any] = {"type": self.kind.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Autogenerate):
                value = {"seed": value.seed, "increment": value.increment}
            result[_camel(f.name)] = value
        return result


@dataclass(frozen=True)
class Autogenerate:
    """Identity column seed and increment."""
    seed: int = 1
    increment: int = 1


@dataclass(frozen=True)
class IntegerPropertyType(PropertyType):
    kind: ClassVar[PropertyKind] = PropertyKind.INTEGER

    autogenerate: Optional[Autogenerate] = None


@dataclass(frozen=True)
class DecimalPropertyType(PropertyType):
    kind: ClassVar[PropertyKind] = PropertyKind.DECIMAL

    precision: int = 0
    scale: int = 0


@dataclass(frozen=True)
class StringPropertyType(PropertyType):
    """``max_length`` is in characters; ``None`` means unbounded."""
    kind: ClassVar[PropertyKind] = PropertyKind.STRING

    max_length: Optional[int] = None


@dataclass(frozen=True)
class BooleanPropertyType(PropertyType):
    kind: ClassVar[PropertyKind] = PropertyKind.BOOLEAN


@dataclass(frozen=True)
class DateTimePropertyType(PropertyType):
    """``default`` is the ``NOW`` sentinel for current-timestamp defaults."""
    kind: ClassVar[PropertyKind] = PropertyKind.DATETIME


@dataclass(frozen=True)
class BinaryPropertyType(PropertyType):
    kind: ClassVar[PropertyKind] = PropertyKind.BINARY

    max_length: Optional[int] = None


@dataclass(frozen=True)
class UniqueIdentifierPropertyType(PropertyType):
    """``default`` is True when the database generates the value."""
    kind: ClassVar[PropertyKind] = PropertyKind.UNIQUE_IDENTIFIER


def _camel(name: str) -> str:
    parts = name.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])
