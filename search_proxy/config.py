"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

PEXELS_SEARCH_URL = "https://api.pexels.com/videos/search"


class ProxySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    # Read from the bare PEXELS_API_KEY, the name the edge deployment injects.
    pexels_api_key: SecretStr = Field(validation_alias="PEXELS_API_KEY")
    upstream_url: str = PEXELS_SEARCH_URL
    search_path: str = "/videos/search"
    upstream_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    host: str = "127.0.0.1"
    port: int = Field(default=8787, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> ProxySettings:
    """Return cached settings instance."""

    return ProxySettings()  # type: ignore[call-arg]


__all__ = ["PEXELS_SEARCH_URL", "ProxySettings", "get_settings"]
