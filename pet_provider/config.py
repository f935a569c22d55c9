"""
Runtime configuration for pet-provider.

Settings come from environment variables. A .env file in the working
directory is loaded first when present; variables already set in the
environment win over the file.
"""
import os
from typing import Any, Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, model_validator

# Environment variable -> settings field
ENV_VARS = {
    "PET_DB_BACKEND": "backend",
    "PET_DB_PATH": "sqlite_path",
    "DB_HOST": "db_host",
    "DB_PORT": "db_port",
    "DB_NAME": "db_name",
    "DB_USER": "db_user",
    "DB_PASSWORD": "db_password",
    "DB_POOL_MIN_SIZE": "pool_min_size",
    "DB_POOL_MAX_SIZE": "pool_max_size",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
}


class GatewaySettings(BaseModel):
    """
    Settings for the provider and its backing store.

    Attributes:
        backend: "sqlite" (default) or "postgres"
        sqlite_path: Database file for the SQLite backend (":memory:" allowed)
        db_host: PostgreSQL host
        db_port: PostgreSQL port
        db_name: PostgreSQL database name
        db_user: PostgreSQL user
        db_password: PostgreSQL password (required for the postgres backend)
        pool_min_size: Minimum connection pool size
        pool_max_size: Maximum connection pool size
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "json" or "text"
    """

    backend: Literal["sqlite", "postgres"] = "sqlite"
    sqlite_path: str = "pets.db"
    db_host: str = "localhost"
    db_port: int = Field(5432, ge=1, le=65535)
    db_name: str = "pets"
    db_user: str = "pets"
    db_password: str | None = None
    pool_min_size: int = Field(1, ge=1)
    pool_max_size: int = Field(4, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"

    @model_validator(mode="after")
    def check_backend(self) -> "GatewaySettings":
        if self.backend == "postgres" and not self.db_password:
            raise ValueError(
                "Database password must be provided for the postgres backend. "
                "Set DB_PASSWORD environment variable."
            )
        if self.pool_min_size > self.pool_max_size:
            raise ValueError("pool_min_size cannot exceed pool_max_size")
        return self


def load_settings(env_file: str | None = None, **overrides: Any) -> GatewaySettings:
    """
    Build settings from the environment.

    Args:
        env_file: Explicit .env path; defaults to a .env found from the
                  current working directory
        **overrides: Field values that take precedence over the environment

    Returns:
        Validated GatewaySettings

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    values: dict[str, Any] = {}
    for env_name, field_name in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field_name] = raw.upper() if field_name == "log_level" else raw

    values.update({k: v for k, v in overrides.items() if v is not None})
    return GatewaySettings(**values)
