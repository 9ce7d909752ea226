"""Configuration management for mssql-loader."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, StrictStr, ValidationError, model_validator
from pydantic_settings import BaseSettings

from .errors import ConfigurationInvalid


def _find_env_file() -> Optional[str]:
    """Find .env file in multiple locations.

    Search order:
    1. Current working directory
    2. ~/.mssql-loader/.env
    3. Package directory (where this file is located)
    """
    if os.path.exists(".env"):
        return ".env"

    user_env = Path.home() / ".mssql-loader" / ".env"
    if user_env.exists():
        return str(user_env)

    package_dir = Path(__file__).parent.parent
    package_env = package_dir / ".env"
    if package_env.exists():
        return str(package_env)

    return None


class Settings(BaseSettings):
    """Loader settings loaded from environment variables."""

    # Connection pool
    pool_min: int = Field(
        default=10,
        ge=0,
        description="Connections opened eagerly when a session starts"
    )
    pool_max: int = Field(
        default=30,
        ge=1,
        description="Upper bound on live connections per session"
    )
    acquire_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for a pooled connection"
    )

    # ODBC connection
    odbc_driver: str = Field(
        default="ODBC Driver 18 for SQL Server",
        description="ODBC driver name passed as DRIVER="
    )
    login_timeout: int = Field(
        default=15,
        ge=0,
        description="Seconds to wait while logging in to the server"
    )
    encrypt: bool = Field(
        default=False,
        description="Request an encrypted connection"
    )
    trust_server_certificate: bool = Field(
        default=True,
        description="Skip server certificate validation"
    )
    app_name: str = Field(
        default="mssql-loader",
        description="Application name reported to the server"
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level used by the command line interface"
    )

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        """Validate that the pool minimum does not exceed the maximum."""
        if self.pool_min > self.pool_max:
            raise ValueError(
                f"pool_min ({self.pool_min}) must not exceed pool_max ({self.pool_max})"
            )
        return self

    class Config:
        env_prefix = "MSSQL_LOADER_"
        env_file = _find_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


class LoaderOptions(BaseModel):
    """Connection options handed to ``prepare`` by the host."""

    server: StrictStr = Field(min_length=1, description="Server address, e.g. host, host:port or host\\instance")
    database_name: StrictStr = Field(min_length=1, alias="databaseName")
    user_name: StrictStr = Field(min_length=1, alias="userName", description="User name, optionally DOMAIN\\user")
    password: StrictStr = Field(min_length=1, repr=False)

    class Config:
        populate_by_name = True
        frozen = True

    @classmethod
    def parse(cls, options: Dict[str, Any]) -> "LoaderOptions":
        """Validate raw host options.

        Raises:
            ConfigurationInvalid: if a required option is missing, empty or not a string
        """
        if not isinstance(options, dict):
            raise ConfigurationInvalid(
                "Loader options must be a mapping",
                details={"type": type(options).__name__},
            )
        try:
            return cls.model_validate(options)
        except ValidationError as e:
            fields = sorted({
                cls._option_name(err["loc"][0]) for err in e.errors() if err.get("loc")
            })
            raise ConfigurationInvalid(
                f"Invalid loader options: {', '.join(fields)} required and should be non-empty strings",
                details={"fields": fields},
            ) from e

    @classmethod
    def _option_name(cls, loc: Any) -> str:
        field_info = cls.model_fields.get(loc)
        if field_info is not None and field_info.alias:
            return field_info.alias
        return str(loc)


def get_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, applying explicit overrides."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationInvalid(
            f"Invalid loader settings: {e.error_count()} error(s)",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
