"""One introspection run: a connection pool, a catalog reader and a cache."""

import logging
from typing import Any, Callable, Optional

from .config import Settings
from .database.cache import SchemaCache
from .database.catalog import CatalogReader
from .database.pool import ConnectionPool
from .errors import ConnectionUnavailable, ConnectivityFailed
from .sink import LogSink

logger = logging.getLogger(__name__)


class Session:
    """Owns the pool and cache of a single introspection run.

    Nothing here outlives ``close``; a new run needs a new session.
    """

    def __init__(self, connect: Callable[[], Any], settings: Settings, sink: Optional[LogSink] = None):
        self.pool = ConnectionPool(
            connect,
            min_size=settings.pool_min,
            max_size=settings.pool_max,
            acquire_timeout=settings.acquire_timeout,
            sink=sink,
        )
        self.catalog = CatalogReader(self.pool, sink)
        self.cache = SchemaCache()

    async def open(self) -> None:
        """Open the pool and check that a connection can be obtained.

        Raises:
            ConnectivityFailed: if no connection could be acquired
        """
        await self.pool.open()
        try:
            connection = await self.pool.acquire()
        except ConnectionUnavailable as e:
            raise ConnectivityFailed(
                f"Connectivity check failed: {e.message}",
                details=e.details,
            ) from e
        await self.pool.release(connection)
        logger.debug("Session opened with %d pooled connections", self.pool.size)

    async def close(self) -> None:
        """Drain the pool and discard cached catalog data."""
        await self.pool.drain()
        self.cache.clear()
