"""ODBC connection factory for SQL Server."""

from typing import Any, Callable

from ..config import Settings
from .models import ConnectionParameters


def build_connection_string(params: ConnectionParameters, password: str, settings: Settings) -> str:
    """Render an ODBC connection string for the given parameters."""
    parts = {
        "DRIVER": "{" + settings.odbc_driver + "}",
        "SERVER": params.server_spec,
        "DATABASE": params.database_name,
        "UID": params.login,
        "PWD": password,
        "APP": settings.app_name,
        "Encrypt": "yes" if settings.encrypt else "no",
        "TrustServerCertificate": "yes" if settings.trust_server_certificate else "no",
    }
    return ";".join(f"{key}={_quote(value)}" for key, value in parts.items())


def connection_factory(
    params: ConnectionParameters,
    password: str,
    settings: Settings,
) -> Callable[[], Any]:
    """Return a zero-argument callable that opens a new pyodbc connection."""
    connection_string = build_connection_string(params, password, settings)

    def connect() -> Any:
        try:
            import pyodbc
        except ImportError:
            raise ImportError(
                "pyodbc is required. "
                "Install it with: pip install pyodbc"
            )

        return pyodbc.connect(
            connection_string,
            autocommit=True,
            readonly=True,
            timeout=settings.login_timeout,
        )

    return connect


def _quote(value: str) -> str:
    # Values containing separators or braces must be brace-quoted, with } doubled
    if value.startswith("{") or not any(ch in value for ch in ";{}= "):
        return value
    return "{" + value.replace("}", "}}") + "}"
