"""Application configuration using Pydantic settings."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the ranking service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    supabase_url: Optional[str] = Field(default=None, validation_alias="SUPABASE_URL")
    supabase_key: Optional[str] = Field(default=None, validation_alias="SUPABASE_ANON_KEY")
    cities_table: str = Field(default="cities", validation_alias="METROSCORE_CITIES_TABLE")
    request_timeout_seconds: float = Field(
        default=10.0, validation_alias="METROSCORE_REQUEST_TIMEOUT"
    )
    fallback_spread: float = Field(default=1.0, gt=0, validation_alias="METROSCORE_FALLBACK_SPREAD")
    score_precision: int = Field(default=2, ge=0, validation_alias="METROSCORE_SCORE_PRECISION")
    log_level: str = Field(default="INFO", validation_alias="METROSCORE_LOG_LEVEL")


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
