"""Log sink used to report pool and row-level failures.

The host framework hands the loader a console-like object with ``log`` and
``error``. Anything satisfying :class:`LogSink` works; by default messages go
to the standard ``logging`` tree.
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class LogSink(Protocol):
    """Minimal logging capability the loader depends on."""

    def log(self, message: str) -> None:
        ...

    def error(self, message: str, detail: Any = None) -> None:
        ...


class LoggingSink:
    """LogSink backed by a standard library logger."""

    def __init__(self, target: Optional[logging.Logger] = None):
        self._logger = target or logger

    def log(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str, detail: Any = None) -> None:
        if detail is None:
            self._logger.error(message)
        elif isinstance(detail, BaseException):
            self._logger.error("%s %s", message, detail, exc_info=detail)
        else:
            self._logger.error("%s %s", message, detail)
