"""Expiring key-value cache."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL in seconds."""

    def clear(self) -> None:
        """Drop every cached value."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: float


@dataclass
class InMemoryCache(Cache):
    """Process-local cache keyed by string."""

    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL."""
        self._entries[key] = _CacheEntry(
            value=value, expires_at=self.clock() + ttl_seconds
        )

    def clear(self) -> None:
        """Drop every cached value."""
        self._entries.clear()
