"""ZIP code validation and location lookup."""

import logging
from dataclasses import dataclass, field

from dog_matcher.adapters.catalog_client import CatalogClient
from dog_matcher.domain.dogs import Location, parse_payload_list
from dog_matcher.domain.errors import InvalidZipFormatError, UnknownZipError
from dog_matcher.domain.search import FilterState, is_valid_zip
from dog_matcher.services.store import Store

_logger = logging.getLogger(__name__)


@dataclass
class LocationResolver:
    """Adds ZIP codes to the active filters once the catalog knows them.

    The location cache only ever holds ZIP codes that are part of the filter
    state. A ZIP being resolved is reserved so a concurrent add of the same
    ZIP is a no-op. Lookups that finish after ``clear`` are discarded.
    """

    client: CatalogClient
    filters: Store[FilterState]
    debug: bool = False
    _cache: dict[str, Location] = field(default_factory=dict, init=False)
    _pending: set[str] = field(default_factory=set, init=False)
    _generation: int = field(default=0, init=False)

    async def add_zip(self, zip_code: str) -> Location | None:
        """Resolve ``zip_code`` and add it to the filters.

        Returns the cached location when the ZIP is already filtered, or None
        while another call is still resolving it or when the resolver was
        cleared before the lookup finished.
        """
        if not is_valid_zip(zip_code):
            raise InvalidZipFormatError(zip_code)
        if zip_code in self.filters.state.zip_codes or zip_code in self._pending:
            return self.location_for(zip_code)

        generation = self._generation
        self._pending.add(zip_code)
        try:
            raw = await self.client.get_locations([zip_code])
        finally:
            if generation == self._generation:
                self._pending.discard(zip_code)
        if generation != self._generation:
            if self.debug:
                _logger.info("Discarding ZIP lookup after reset: %s", zip_code)
            return None

        locations = parse_payload_list(Location, raw, "/locations")
        location = next(
            (item for item in locations if item.zip_code == zip_code),
            locations[0] if locations else None,
        )
        if location is None:
            raise UnknownZipError(zip_code)

        self._cache[zip_code] = location
        self.filters.set_state(self.filters.state.with_zip(zip_code))
        if self.debug:
            _logger.info("Resolved ZIP %s to %s", zip_code, location.label)
        return location

    def remove_zip(self, zip_code: str) -> None:
        """Drop ``zip_code`` from the filters and the cache."""
        self._cache.pop(zip_code, None)
        self.filters.set_state(self.filters.state.without_zip(zip_code))

    def location_for(self, zip_code: str) -> Location | None:
        """Return the cached location for ``zip_code``."""
        return self._cache.get(zip_code)

    def label_for(self, zip_code: str) -> str:
        """Return "City, ST" for a resolved ZIP, or the ZIP itself."""
        location = self._cache.get(zip_code)
        return location.label if location else zip_code

    def locations(self) -> list[Location]:
        """Return cached locations in filter order."""
        return [
            self._cache[zip_code]
            for zip_code in self.filters.state.zip_codes
            if zip_code in self._cache
        ]

    def clear(self) -> None:
        """Forget every cached location and abandon lookups in flight."""
        self._generation += 1
        self._cache.clear()
        self._pending.clear()
