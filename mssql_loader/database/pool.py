"""Bounded asyncio pool over blocking DB-API connections.

Driver calls (connect, close) run in the default executor so the event loop
never blocks on the network. ``acquire`` is the only place callers wait.

Pool bookkeeping (``_size``, ``_idle``, ``_in_use``) is only changed by code
that does not await in between, so a cancelled caller cannot leave it half
updated. The condition is used for waiting, not for guarding those updates.
"""

import asyncio
import logging
from collections import deque
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Deque, Optional, Set

from ..errors import ConnectionUnavailable
from ..sink import LogSink, LoggingSink

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Hands out at most ``max_size`` live connections produced by ``connect``."""

    def __init__(
        self,
        connect: Callable[[], Any],
        min_size: int = 10,
        max_size: int = 30,
        acquire_timeout: float = 30.0,
        sink: Optional[LogSink] = None,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if min_size > max_size:
            raise ValueError(f"min_size ({min_size}) must not exceed max_size ({max_size})")

        self._connect = connect
        self.min_size = min_size
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout
        self._sink = sink or LoggingSink(logger)

        self._idle: Deque[Any] = deque()
        self._in_use: Set[int] = set()
        self._size = 0  # idle + in use + being established
        self._cond = asyncio.Condition()
        self._closed = False
        self._drain_task: Optional[asyncio.Task] = None
        self._wakeups: Set[asyncio.Task] = set()

    @property
    def size(self) -> int:
        return self._size

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    @property
    def in_use_count(self) -> int:
        return len(self._in_use)

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        """Establish connections up to ``min_size``.

        Failures are reported to the sink only; a later ``acquire`` surfaces
        them to the caller. If the caller is cancelled, connections still
        being established join the idle set when they arrive.
        """
        if self._closed:
            raise ConnectionUnavailable("Connection pool has been drained")
        missing = max(self.min_size - self._size, 0)
        self._size += missing

        establishing = [asyncio.ensure_future(self._establish()) for _ in range(missing)]
        try:
            await asyncio.shield(asyncio.gather(*establishing, return_exceptions=True))
        except asyncio.CancelledError:
            for future in establishing:
                future.add_done_callback(self._adopt)
            raise
        for future in establishing:
            self._adopt(future)

    async def acquire(self, timeout: Optional[float] = None) -> Any:
        """Get a connection, waiting up to ``timeout`` seconds for one.

        The timeout covers waiting for a free slot and establishing a new
        connection. A connection that arrives after the caller gave up is
        kept as idle.

        Raises:
            ConnectionUnavailable: on timeout, when the pool is drained, or
                when a new connection cannot be established
        """
        timeout = self.acquire_timeout if timeout is None else timeout
        loop = asyncio.get_event_loop()
        deadline = loop.time() + timeout

        connection = await self._reserve(deadline, timeout)
        if connection is not None:
            return connection

        establishing = asyncio.ensure_future(self._establish())
        try:
            connection = await asyncio.wait_for(
                asyncio.shield(establishing), max(deadline - loop.time(), 0)
            )
        except asyncio.TimeoutError:
            establishing.add_done_callback(self._adopt)
            raise self._timed_out(timeout)
        except asyncio.CancelledError:
            establishing.add_done_callback(self._adopt)
            raise
        except Exception as e:
            self._adopt(establishing)
            raise ConnectionUnavailable(
                f"Unable to establish a database connection: {e}",
                details={"error": str(e)},
            ) from e

        self._in_use.add(id(connection))
        return connection

    async def _reserve(self, deadline: float, timeout: float) -> Any:
        """Wait for an idle connection or a free slot.

        Returns the idle connection, already marked in use, or None when a
        slot was reserved for a new connection. Nothing is awaited after the
        reservation is made.
        """
        loop = asyncio.get_event_loop()
        async with self._cond:
            while True:
                if self._closed:
                    raise ConnectionUnavailable("Connection pool has been drained")
                if self._idle:
                    connection = self._idle.popleft()
                    self._in_use.add(id(connection))
                    return connection
                if self._size < self.max_size:
                    self._size += 1
                    return None

                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise self._timed_out(timeout)
                try:
                    await asyncio.wait_for(self._cond.wait(), remaining)
                except asyncio.TimeoutError:
                    pass
                except asyncio.CancelledError:
                    # pass on a wakeup this waiter may have consumed
                    self._cond.notify()
                    raise

    def _timed_out(self, timeout: float) -> ConnectionUnavailable:
        return ConnectionUnavailable(
            f"Timed out after {timeout}s waiting for a pooled connection",
            details={"timeout": timeout, "max_size": self.max_size},
        )

    def _adopt(self, future: "asyncio.Future[Any]") -> None:
        """Settle a reserved slot once its connection attempt has finished."""
        if future.cancelled() or future.exception() is not None:
            self._size -= 1
        else:
            # drain() closes whatever is idle, including late arrivals
            self._idle.append(future.result())
        self._wake()

    def _wake(self) -> None:
        """Notify waiters without making the caller wait for the lock."""
        task = asyncio.ensure_future(self._notify_all())
        self._wakeups.add(task)
        task.add_done_callback(self._wakeups.discard)

    async def _notify_all(self) -> None:
        async with self._cond:
            self._cond.notify_all()

    async def _establish(self) -> Any:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self._connect)
        except Exception as e:
            self._sink.error("ConnectionPool Error:", e)
            raise

    async def release(self, connection: Any, discard: bool = False) -> None:
        """Return a connection to the pool, closing it if discarded or drained."""
        if id(connection) not in self._in_use:
            raise ValueError("Connection was not acquired from this pool")
        self._in_use.discard(id(connection))
        if discard or self._closed:
            self._size -= 1
        else:
            self._idle.append(connection)
            connection = None
        self._wake()

        if connection is not None:
            await self._close_connection(connection)

    @asynccontextmanager
    async def connection(self, timeout: Optional[float] = None) -> AsyncIterator[Any]:
        """Scoped acquisition; the connection is discarded if the body raises."""
        conn = await self.acquire(timeout)
        failed = False
        try:
            yield conn
        except BaseException:
            failed = True
            raise
        finally:
            await self.release(conn, discard=failed)

    async def drain(self) -> None:
        """Stop handing out connections and close every connection.

        Waits for in-flight acquisitions and handed-out connections to come
        back first. Calling it again awaits the same drain.
        """
        if self._drain_task is None:
            self._drain_task = asyncio.ensure_future(self._drain())
        await asyncio.shield(self._drain_task)

    async def _drain(self) -> None:
        async with self._cond:
            self._closed = True
            self._cond.notify_all()
            await self._cond.wait_for(lambda: self._size == len(self._idle))
            connections = list(self._idle)
            self._idle.clear()
            self._size = 0

        for connection in connections:
            await self._close_connection(connection)
        logger.debug("Connection pool drained (%d connections closed)", len(connections))

    async def _close_connection(self, connection: Any) -> None:
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, connection.close)
        except Exception as e:
            self._sink.error("ConnectionPool Error:", e)
