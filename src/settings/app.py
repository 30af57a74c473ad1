"""Application settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.lastfm.constants import LASTFM_DEFAULT_ENDPOINT
from src.sorter.constants import (
    DEFAULT_COOLDOWN_EVERY,
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_MIN_INTERVAL_SECONDS,
)


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    lastfm_api_key: str | None = Field(default=None, validation_alias="LASTFM_API_KEY")
    lastfm_endpoint: str = Field(
        default=LASTFM_DEFAULT_ENDPOINT, validation_alias="LASTFM_ENDPOINT"
    )
    lastfm_timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = Field(
        default=30.0, validation_alias="LASTFM_TIMEOUT_SECONDS"
    )
    user_agent: str = Field(
        default="lastsort/0.1", validation_alias="LASTSORT_USER_AGENT"
    )
    min_interval_seconds: Annotated[float, Field(ge=0.0)] = Field(
        default=DEFAULT_MIN_INTERVAL_SECONDS,
        validation_alias="LASTSORT_MIN_INTERVAL_SECONDS",
    )
    cooldown_every: Annotated[int, Field(ge=1)] = Field(
        default=DEFAULT_COOLDOWN_EVERY, validation_alias="LASTSORT_COOLDOWN_EVERY"
    )
    cooldown_seconds: Annotated[float, Field(ge=0.0)] = Field(
        default=DEFAULT_COOLDOWN_SECONDS,
        validation_alias="LASTSORT_COOLDOWN_SECONDS",
    )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
