"""
Connection settings for ff-data-access.

Settings come from FF_DATA_ACCESS_* environment variables, an optional
.env file, or keyword arguments. ``connect`` turns them into a DB-API
connection for the configured dialect.
"""

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {
    "mysql": 3306,
    "postgres": 5432,
}

_DIALECT_ALIASES = {
    "sqlite3": "sqlite",
    "pgsql": "postgres",
    "postgresql": "postgres",
}


class DataAccessSettings(BaseSettings):
    """Database connection configuration using Pydantic Settings."""

    model_config = SettingsConfigDict(
        env_prefix="FF_DATA_ACCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    dialect: Literal["sqlite", "mysql", "postgres"] = "sqlite"
    database: str = ":memory:"  # Database name, or file path for SQLite
    host: str = "localhost"
    port: Optional[int] = None
    user: Optional[str] = None
    password: SecretStr = SecretStr("")
    connect_timeout: int = 30
    log_level: str = "INFO"

    @field_validator("dialect", mode="before")
    @classmethod
    def normalize_dialect(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return _DIALECT_ALIASES.get(value, value)
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def resolved_port(self) -> Optional[int]:
        """Configured port, or the dialect's default server port."""
        return self.port or DEFAULT_PORTS.get(self.dialect)


@lru_cache
def get_settings() -> DataAccessSettings:
    """Return process-wide settings loaded from the environment."""
    return DataAccessSettings()


def connect(settings: Optional[DataAccessSettings] = None):
    """
    Open a DB-API connection for the configured dialect.

    Driver modules are imported lazily so only the driver in use needs to be
    importable.

    :param settings: Settings to use (default: environment settings).
    :return: An open DB-API 2.0 connection.
    :raises ConfigurationError: If the dialect has no known driver.
    """
    settings = settings or get_settings()
    password = settings.password.get_secret_value()

    if settings.dialect == "sqlite":
        import sqlite3

        connection = sqlite3.connect(settings.database, timeout=settings.connect_timeout)
    elif settings.dialect == "postgres":
        import psycopg2

        connection = psycopg2.connect(
            dbname=settings.database,
            user=settings.user,
            password=password,
            host=settings.host,
            port=settings.resolved_port,
            connect_timeout=settings.connect_timeout,
        )
    elif settings.dialect == "mysql":
        import pymysql

        connection = pymysql.connect(
            host=settings.host,
            port=settings.resolved_port,
            user=settings.user,
            password=password,
            database=settings.database,
            connect_timeout=settings.connect_timeout,
        )
    else:
        raise ConfigurationError(f"No driver configured for dialect: {settings.dialect}")

    logger.info(f"Connected to {settings.dialect} database: {settings.database}")
    return connection
