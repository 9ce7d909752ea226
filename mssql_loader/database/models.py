"""Catalog data models for schema introspection."""

from typing import Optional, List, Dict, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field

if TYPE_CHECKING:
    from .property_types import PropertyType

DEFAULT_PORT = 1433


@dataclass(frozen=True)
class ConnectionParameters:
    """Structured form of a server address plus user identity.

    At most one of ``port`` and ``instance_name`` is set.
    """
    host: str
    user_name: str
    database_name: str = ""
    port: Optional[int] = None
    instance_name: Optional[str] = None
    domain: Optional[str] = None

    def __post_init__(self):
        if self.port is not None and self.instance_name is not None:
            raise ValueError("port and instance_name are mutually exclusive")

    @property
    def server_spec(self) -> str:
        """Server value in ODBC form: ``host,port`` or ``host\\instance``."""
        if self.instance_name:
            return f"{self.host}\\{self.instance_name}"
        return f"{self.host},{self.port or DEFAULT_PORT}"

    @property
    def login(self) -> str:
        """Login name, prefixed with the domain when there is one."""
        if self.domain:
            return f"{self.domain}\\{self.user_name}"
        return self.user_name


@dataclass(frozen=True)
class ColumnRecord:
    """A column as described by sys.columns and its joined catalog views."""
    name: str
    data_type: str
    max_length: int = 0
    precision: int = 0
    scale: int = 0
    is_nullable: bool = True
    is_primary_key: bool = False
    is_identity: bool = False
    seed_value: Optional[int] = None
    increment_value: Optional[int] = None
    default_definition: Optional[str] = None


@dataclass(frozen=True)
class ForeignKeyRow:
    """One column pair of a foreign key constraint, as returned by the catalog."""
    name: str
    local_column: str
    ref_table: str
    ref_column: str
    object_id: Optional[int] = None
    local_table: Optional[str] = None


@dataclass
class ReferenceRecord:
    """A foreign key constraint, possibly spanning several columns."""
    name: str
    ref_table: str
    columns: List[Tuple[str, str]] = field(default_factory=list)
    object_id: Optional[int] = None

    @property
    def local_columns(self) -> List[str]:
        return [local for local, _ in self.columns]

    @property
    def ref_columns(self) -> List[str]:
        return [ref for _, ref in self.columns]


@dataclass
class TableRecord:
    """Represents a catalog table.

    ``columns`` and ``references`` stay ``None`` until fetched, so an empty
    table can be told apart from one that was never introspected.
    """
    object_id: int
    name: str
    schema_name: str
    columns: Optional[List[ColumnRecord]] = None
    references: Optional[Dict[str, ReferenceRecord]] = None
    property_types: Dict[str, "PropertyType"] = field(default_factory=dict, repr=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"

    def get_column(self, column_name: str) -> Optional[ColumnRecord]:
        """Find a fetched column by name."""
        for column in self.columns or []:
            if column.name == column_name:
                return column
        return None


@dataclass(frozen=True)
class ModelReference:
    """Resolved reference from one model to another."""
    name: str
    target_model: str
    columns: Tuple[Tuple[str, str], ...] = ()

    @property
    def local_property(self) -> str:
        """Local column names joined by commas."""
        return ",".join(local for local, _ in self.columns)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "targetModel": self.target_model,
            "localProperty": self.local_property,
            "columns": [{"local": local, "target": target} for local, target in self.columns],
        }
