"""Breed list lookups with caching."""

import logging
from dataclasses import dataclass

from dog_matcher.adapters.catalog_client import CatalogClient
from dog_matcher.services.cache import Cache
from dog_matcher.services.retry import call_with_retry

_CACHE_KEY = "catalog:breeds"

_logger = logging.getLogger(__name__)


@dataclass
class BreedCatalog:
    """Service for the catalog's breed list."""

    client: CatalogClient
    cache: Cache
    ttl_seconds: float = 300
    retry_attempts: int = 2
    retry_delay_seconds: float = 0.3
    debug: bool = False

    async def list_breeds(self) -> list[str]:
        """Return every breed, fetching at most once per TTL."""
        cached = self.cache.get(_CACHE_KEY)
        if isinstance(cached, list):
            return cached

        payload = await call_with_retry(
            self.client.get_breeds,
            action="breeds",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        breeds = [str(breed) for breed in payload]
        self.cache.set(_CACHE_KEY, breeds, ttl_seconds=self.ttl_seconds)
        if self.debug:
            _logger.info("Loaded %s breeds", len(breeds))
        return breeds

    def cached_breeds(self) -> list[str] | None:
        """Return the breed list if it is cached, without fetching."""
        cached = self.cache.get(_CACHE_KEY)
        return cached if isinstance(cached, list) else None
