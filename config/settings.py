"""Centralised configuration handling for CashPulse."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    """Application settings sourced from env vars and an optional ``.env`` file."""

    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CASHPULSE_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CASHPULSE_OPENAI_BASE_URL", "OPENAI_BASE_URL"),
    )
    openai_model: str = DEFAULT_OPENAI_MODEL

    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"

    prorate_partial_periods: bool = False
    recurring_deal_end: Literal["open_ended", "contract"] = "open_ended"

    model_config = SettingsConfigDict(
        env_prefix="CASHPULSE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def openai_client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.openai_api_key:
            kwargs["api_key"] = self.openai_api_key
        if self.openai_base_url:
            kwargs["base_url"] = self.openai_base_url
        return kwargs


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
