"""Configuration management for showfeed."""

from pydantic import PositiveInt, field_validator, model_validator
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse

ProviderName = Literal["tmdb", "tvmaze"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # TMDB (primary provider, only used when a key is configured)
    tmdb_api_key: str | None = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p"
    tmdb_language: str = "en-US"
    tmdb_rate_limit: PositiveInt = 40  # requests per second

    # TVmaze (keyless fallback provider)
    tvmaze_base_url: str = "https://api.tvmaze.com"
    tvmaze_rate_limit: PositiveInt = 20  # requests per 10 seconds

    # Provider selection
    primary_provider: ProviderName = "tmdb"
    fallback_provider: ProviderName = "tvmaze"
    default_country: str = "US"

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    @field_validator("tmdb_base_url", "tmdb_image_base_url", "tvmaze_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_distinct_providers(self) -> "Settings":
        if self.primary_provider == self.fallback_provider:
            raise ValueError("primary_provider and fallback_provider must differ")
        return self

    # App settings
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
