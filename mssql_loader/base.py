"""Abstract base class for schema loaders."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .database.models import ModelReference
from .database.property_types import PropertyType
from .sink import LogSink


class SchemaLoader(ABC):
    """Capability interface a host framework drives to read a schema.

    The host calls ``prepare`` once, then any number of reads, then
    ``finalize``. Subclasses provide database-specific behavior.
    """

    @abstractmethod
    async def prepare(self, options: Dict[str, Any], sink: Optional[LogSink] = None) -> None:
        """Validate options and open a session.

        Args:
            options: Host-supplied connection options
            sink: Where pool and row-level failures are reported
        """
        pass

    @abstractmethod
    async def list_model_names(self) -> List[str]:
        """Get all model names in catalog order."""
        pass

    @abstractmethod
    async def list_property_names(self, model_name: str) -> List[str]:
        """Get the property names of a model.

        Args:
            model_name: Model (table) name
        """
        pass

    @abstractmethod
    async def resolve_property_type(self, model_name: str, property_name: str) -> PropertyType:
        """Get the canonical type of a property.

        Requires a prior ``list_property_names`` call for the model.
        """
        pass

    @abstractmethod
    async def list_reference_names(self, model_name: str) -> List[str]:
        """Get the names of the references declared on a model."""
        pass

    @abstractmethod
    async def resolve_reference(self, model_name: str, reference_name: str) -> ModelReference:
        """Get target model and column pairs of a reference.

        Requires a prior ``list_reference_names`` call for the model.
        """
        pass

    @abstractmethod
    async def get_metadata(self, model_name: str) -> Dict[str, Any]:
        """Get free-form metadata for a model (schema, table, raw column types)."""
        pass

    @abstractmethod
    async def finalize(self) -> None:
        """Close the session and release every resource."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.finalize()
