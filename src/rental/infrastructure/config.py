"""Application configuration from environment variables.

Every setting can be overridden with a ``RENTAL_`` prefixed variable
(e.g. ``RENTAL_DATA_DIR``) or from a ``.env`` file in the working
directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="RENTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(
        default=_DEFAULT_DATA_DIR,
        description="Directory holding the JSON tables",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application logging level",
    )

    log_json: bool = Field(
        default=False,
        description="Render log events as JSON instead of console text",
    )

    sweep_interval_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Pause between two overdue sweep runs",
    )

    sweep_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Time one sweep run may take before it is rolled back",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
