"""Application configuration for the Carcassonne service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from the environment (``CARCASSONNE_`` prefix) or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="CARCASSONNE_"
    )

    data_dir: Path = Field(default=Path("games"), description="Where JSON game snapshots live")
    storage_backend: Literal["json", "sql"] = Field(
        default="json", description="Persistence adapter used by the HTTP service"
    )
    database_url: str = Field(
        default="sqlite:///carcassonne.db", description="SQLAlchemy URL for the sql backend"
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    database_pool_recycle: int = Field(default=3600, description="Seconds before reconnecting")
    database_pool_timeout: int = Field(default=30, ge=1)
    rules_version: str = Field(default="base-1", description="Ruleset version used by the domain")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    if settings.storage_backend == "json":
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
