from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application-wide settings populated from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BITAXE_",
        extra="ignore",
    )

    addresses: str = ""
    output_format: Literal["rich", "json", "quiet"] | None = None
    view: Literal["auto", "matrix", "focus"] = "auto"
    refresh_interval: float = 30.0
