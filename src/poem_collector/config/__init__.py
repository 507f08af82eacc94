"""
Configuration Module
====================

Two layers of configuration:

- ``Settings``: process-level options from ``POEM_*`` environment variables
  (config file path, log file path, log level, HTTP timeout, pool sizing).
- ``PoemConfig``: the JSON configuration file with the API token, the
  schedule expression and the database connection parameters.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from poem_collector.core import ConfigError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field maps to ``POEM_<FIELD_NAME>``, e.g. ``POEM_CONFIG_PATH``.
    """

    app_name: str = Field(default="poem-collector", description="Application name")

    # ========== Files ==========
    config_path: Path = Field(
        default=Path("config/config.json"),
        description="Path to the JSON configuration file"
    )
    log_path: Path = Field(
        default=Path("logger/poem.log"),
        description="Path to the append-only log file"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # ========== Poem API ==========
    http_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for the poem API request",
        gt=0,
        le=120
    )

    # ========== Database ==========
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="POEM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is one of the standard names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# ========== JSON configuration file ==========

class DatabaseConfig(BaseModel):
    """Database connection parameters (the ``DB`` object)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(alias="ip_addr")
    port: str = Field(default="")
    driver: str
    user: str = Field(default="")
    password: str = Field(default="", alias="pass")
    name: str

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, v: Union[str, int, None]) -> str:
        """Accept ``"3306"`` as well as ``3306``."""
        if v is None:
            return ""
        return str(v)


class PoemConfig(BaseModel):
    """Root of the JSON configuration file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    schedule: str = Field(alias="time")
    database: DatabaseConfig = Field(alias="DB")


def load_config(path: Optional[Path] = None) -> PoemConfig:
    """
    Load and validate the JSON configuration file.

    Args:
        path: Config file path; defaults to ``Settings.config_path``

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    config_path = Path(path) if path is not None else get_settings().config_path

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Config file error or not exist: {config_path}",
            {"path": str(config_path), "error": str(e)}
        ) from e

    try:
        return PoemConfig.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(
            f"Config analyze error: {config_path}",
            {"path": str(config_path), "error": str(e)}
        ) from e
