"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from dog_matcher.domain.search import SortKey

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    catalog_api_url: str = "https://frontend-take-home-service.fetch.com"
    request_timeout_seconds: float = 10.0
    page_size: int = 20
    default_sort: str = "breed:asc"
    breeds_ttl_seconds: int = 300
    breeds_retry_attempts: int = 2
    search_retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_sort_key(raw: str | None) -> SortKey:
    """Parse the configured default sort, falling back to breed ascending."""
    if raw is None:
        return SortKey()
    cleaned = raw.strip()
    if not cleaned:
        return SortKey()
    return SortKey.parse(cleaned)
