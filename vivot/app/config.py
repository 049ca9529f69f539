"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Store
    store_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite:///./vivot.db"

    # Cache (rate limiting)
    redis_url: str | None = None

    # Generator (OpenAI)
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    generator_timeout_seconds: float = 60.0
    generator_max_tokens: int = 4096

    # Geocoder (Nominatim)
    geocoder_base_url: str = "https://nominatim.openstreetmap.org/search"
    geocoder_user_agent: str = "VivotTravelPlanner/0.1"
    geocoder_timeout_seconds: float = 10.0
    geocode_max_lookups: int = 25

    # Mood pivot policy
    mood_pivot_policy: Literal["single_low", "low_fraction"] = "single_low"
    mood_window_size: int = 10
    mood_low_fraction_threshold: float = 0.4

    # Rate limiting (requests per window) for generator-backed routes
    generation_requests_per_min: int = 10
    rate_limit_window_seconds: int = 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
