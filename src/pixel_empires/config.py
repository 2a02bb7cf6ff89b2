"""Application configuration for the Pixel Empires service."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings, overridable through ``PIXEL_EMPIRES_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="PIXEL_EMPIRES_", env_file=".env", env_file_encoding="utf-8"
    )

    data_dir: Path = Field(default=Path("saves"), description="Where JSON save slots live")
    database_url: str = Field(
        default="sqlite:///pixel_empires.db",
        description="SQLAlchemy URL for the save slot database",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")
    save_backend: Literal["sql", "json"] = Field(
        default="sql", description="Store save slots in the database or as JSON files"
    )
    save_slots: int = Field(default=3, description="Save slots available per empire", ge=1)
    combat_report_history: int = Field(
        default=10,
        description="Combat reports kept on the empire and in saves",
        ge=1,
    )
    tick_interval_seconds: float = Field(
        default=1.0,
        description="Real-time seconds between automatic ticks when the ticker runs",
        gt=0.0,
    )
    debug_tick_speed_multiplier: float = Field(
        default=1.0,
        description="Multiplier applied to game time per automatic tick in development",
        gt=0.0,
    )
    auto_tick: bool = Field(default=False, description="Run the background ticker on startup")
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler at ``level``."""

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
