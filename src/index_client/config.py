"""Client configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Index client settings loaded from HIVECACHE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HIVECACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = "http://localhost:8000"
    api_token: str | None = None
    index_path: Path = Field(default_factory=lambda: Path.home() / ".hivecache" / "index.json")

    sync_interval_seconds: float = Field(default=3600, gt=0)
    # Debounce after a local mutation before syncing
    mutation_sync_delay_seconds: float = Field(default=2, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)


@lru_cache
def get_client_settings() -> ClientSettings:
    """Get cached client settings instance."""
    return ClientSettings()
