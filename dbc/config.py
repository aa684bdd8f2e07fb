"""Configuration management for dbc."""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _find_env_file() -> Optional[str]:
    """Find .env file in multiple locations.

    Search order:
    1. Current working directory
    2. ~/.dbc/.env
    """
    if os.path.exists(".env"):
        return ".env"

    user_env = Path.home() / ".dbc" / ".env"
    if user_env.exists():
        return str(user_env)

    return None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    connections_file: str = Field(
        default=str(Path.home() / ".dbc.yml"),
        description="YAML file mapping connection identifiers to connection parameters"
    )
    history_file: str = Field(
        default=str(Path.home() / ".dbc_history"),
        description="Prompt history file"
    )

    # Display limits for a new session
    row_limit: int = Field(default=20, ge=0, description="Rows shown per result")
    column_limit: int = Field(default=10, ge=0, description="Columns shown per result")

    # Statement logging configuration
    statement_logging_enabled: bool = Field(
        default=True,
        description="Record executed statements in a local SQLite database"
    )
    statement_log_db_path: Optional[str] = Field(
        default=None,
        description="Path to the statement log database (default: ~/.dbc/statements.db)"
    )
    statement_log_retention_days: int = Field(
        default=30,
        description="Number of days to retain statement log entries"
    )

    log_level: str = Field(default="WARNING", description="Python logging level")

    class Config:
        env_prefix = "DBC_"
        env_file = _find_env_file()
        env_file_encoding = "utf-8"


class DatabaseType(str, Enum):
    """Supported database types."""
    POSTGRES = "pg"
    ORACLE = "oracle"
    MYSQL = "mysql"
    SQLITE = "sqlite"


_TYPE_ALIASES = {
    "pg": DatabaseType.POSTGRES,
    "postgres": DatabaseType.POSTGRES,
    "postgresql": DatabaseType.POSTGRES,
    "ora": DatabaseType.ORACLE,
    "oracle": DatabaseType.ORACLE,
    "mysql": DatabaseType.MYSQL,
    "sqlite": DatabaseType.SQLITE,
}


class ConnectionParams(BaseModel):
    """Parameters of one configured connection."""

    model_config = ConfigDict(frozen=True)

    type: DatabaseType = DatabaseType.ORACLE
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    dbname: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if value is None:
            return DatabaseType.ORACLE
        if isinstance(value, DatabaseType):
            return value
        key = str(value).strip().lower()
        if key not in _TYPE_ALIASES:
            raise ValueError(f"Unknown database type {value!r}")
        return _TYPE_ALIASES[key]

    @field_validator("url", "username", "password", "dbname", mode="before")
    @classmethod
    def _stringify(cls, value):
        # YAML turns numeric passwords and names into ints
        if value is None:
            return None
        return str(value)


def load_connections(path: Optional[str] = None) -> Dict[str, ConnectionParams]:
    """Read the connections file.

    Args:
        path: YAML file; defaults to ``settings.connections_file``

    Returns:
        Mapping of identifier to ConnectionParams (empty if the file is missing)
    """
    config_path = Path(path or settings.connections_file).expanduser()
    if not config_path.exists():
        logger.debug("No connections file at %s", config_path)
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Cannot read connections file {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Connections file {config_path} must contain a mapping of identifiers",
            details={"path": str(config_path)},
        )

    connections = {}
    for identifier, entry in raw.items():
        try:
            connections[str(identifier)] = ConnectionParams.model_validate(entry or {})
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid connection {identifier!r} in {config_path}: {e}",
                details={"path": str(config_path), "identifier": str(identifier)},
            ) from e
    return connections


def get_connection_params(identifier: str, path: Optional[str] = None) -> ConnectionParams:
    """Look up one identifier in the connections file."""
    connections = load_connections(path)
    if identifier not in connections:
        raise ConfigurationError(
            f"No such identifier: {identifier}",
            details={"identifier": identifier, "known": sorted(connections)},
        )
    return connections[identifier]


# Global settings instance
settings = Settings()
