"""Per-session store of catalog records keyed by model name."""

import logging
from typing import Dict, List, Optional

from .models import ColumnRecord, ReferenceRecord, TableRecord

logger = logging.getLogger(__name__)


class SchemaCache:
    """Model name -> TableRecord, filled in as catalog queries complete.

    Lives exactly as long as its session: no eviction, no expiry, entries are
    only added or overwritten. There is no lock. Two concurrent writers for
    the same model race and the last write wins; catalog data is assumed not
    to change while a session is open.

    Keys are bare table names. Tables with the same name in different schemas
    (``dbo.Users`` and ``audit.Users``) share one entry, and the one listed
    last by the catalog wins.
    """

    def __init__(self):
        self._tables: Dict[str, TableRecord] = {}

    def get(self, model_name: str) -> Optional[TableRecord]:
        return self._tables.get(model_name)

    def put(self, model_name: str, table: TableRecord) -> None:
        self._tables[model_name] = table

    def update_columns(self, model_name: str, columns: List[ColumnRecord]) -> bool:
        """Attach columns to a cached table. Returns False for unknown models."""
        table = self._tables.get(model_name)
        if table is None:
            logger.debug("Not caching columns for unknown model %s", model_name)
            return False
        table.columns = list(columns)
        table.property_types = {}
        return True

    def update_references(self, model_name: str, references: Dict[str, ReferenceRecord]) -> bool:
        """Attach references to a cached table. Returns False for unknown models."""
        table = self._tables.get(model_name)
        if table is None:
            logger.debug("Not caching references for unknown model %s", model_name)
            return False
        table.references = dict(references)
        return True

    def model_names(self) -> List[str]:
        return list(self._tables)

    def clear(self) -> None:
        self._tables.clear()

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._tables

    def __len__(self) -> int:
        return len(self._tables)
