"""Full schema load: every model with its properties and references."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .base import SchemaLoader
from .database.models import ModelReference
from .database.property_types import PropertyType
from .errors import UnsupportedType

logger = logging.getLogger(__name__)


@dataclass
class LoadedModel:
    """A model with its resolved properties and references."""
    name: str
    properties: Dict[str, PropertyType] = field(default_factory=dict)
    references: Dict[str, ModelReference] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "properties": {name: prop.to_dict() for name, prop in self.properties.items()},
            "references": {name: ref.to_dict() for name, ref in self.references.items()},
            "meta": self.metadata,
        }
        if self.errors:
            result["errors"] = self.errors
        return result


@dataclass
class LoadedSchema:
    """All models read in one loader session, in catalog order."""
    models: List[LoadedModel] = field(default_factory=list)

    def get_model(self, name: str) -> Optional[LoadedModel]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    @property
    def error_count(self) -> int:
        return sum(len(model.errors) for model in self.models)

    def to_dict(self) -> Dict[str, Any]:
        return {"models": {model.name: model.to_dict() for model in self.models}}


async def read_schema(loader: SchemaLoader, model_filter: Optional[Iterable[str]] = None) -> LoadedSchema:
    """Read every model (or the filtered subset) from a prepared loader.

    Models are fetched concurrently, each on its own pooled connections.
    Properties whose SQL type has no canonical mapping are recorded in the
    model's ``errors`` instead of aborting the load.
    """
    model_names = await loader.list_model_names()
    if model_filter is not None:
        wanted = set(model_filter)
        model_names = [name for name in model_names if name in wanted]

    models = await asyncio.gather(*(_read_model(loader, name) for name in model_names))
    schema = LoadedSchema(models=list(models))
    logger.info("Loaded %d models (%d unsupported properties)", len(schema.models), schema.error_count)
    return schema


async def _read_model(loader: SchemaLoader, model_name: str) -> LoadedModel:
    model = LoadedModel(name=model_name)
    property_names, reference_names = await asyncio.gather(
        loader.list_property_names(model_name),
        loader.list_reference_names(model_name),
    )

    for property_name in property_names:
        try:
            model.properties[property_name] = await loader.resolve_property_type(model_name, property_name)
        except UnsupportedType as e:
            logger.warning(e.message)
            model.errors[property_name] = e.message

    for reference_name in reference_names:
        model.references[reference_name] = await loader.resolve_reference(model_name, reference_name)

    model.metadata = await loader.get_metadata(model_name)
    return model
