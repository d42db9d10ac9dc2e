"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from dog_matcher.adapters.catalog_client import CatalogClient, QueryParams
from dog_matcher.config import Settings
from dog_matcher.containers import AppContainer, build_session
from dog_matcher.services.breeds import BreedCatalog
from dog_matcher.services.cache import InMemoryCache


def make_dog(dog_id: str, **overrides: object) -> dict[str, object]:
    """Build a raw dog payload as the catalog returns it."""
    payload: dict[str, object] = {
        "id": dog_id,
        "img": f"https://images.test/{dog_id}.jpg",
        "name": f"Dog {dog_id}",
        "age": 3,
        "zip_code": "78701",
        "breed": "Labrador",
    }
    payload.update(overrides)
    return payload


def make_location(
    zip_code: str, city: str = "Austin", state: str = "TX"
) -> dict[str, object]:
    """Build a raw location payload."""
    return {
        "zip_code": zip_code,
        "latitude": 30.27,
        "longitude": -97.74,
        "city": city,
        "state": state,
        "county": "Travis",
    }


@dataclass
class FakeCatalogClient(CatalogClient):
    """In-memory catalog that records every call.

    Errors queued with ``fail`` are raised once each, in order, before the
    operation falls back to its normal payload.
    """

    dogs: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "d1": make_dog("d1", name="Rex"),
            "d2": make_dog("d2", name="Bella", breed="Beagle"),
        }
    )
    search_payload: dict[str, object] = field(
        default_factory=lambda: {"resultIds": ["d1", "d2"], "total": 2}
    )
    locations: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "78701": make_location("78701"),
            "60614": make_location("60614", city="Chicago", state="IL"),
        }
    )
    breeds: list[str] = field(default_factory=lambda: ["Beagle", "Labrador", "Poodle"])
    match_payload: dict[str, object] = field(default_factory=lambda: {"match": "d1"})
    reverse_hydration: bool = False
    errors: dict[str, list[Exception]] = field(default_factory=dict)
    calls: list[tuple[str, object]] = field(default_factory=list)

    def fail(self, operation: str, *errors: Exception) -> None:
        """Queue errors for the next calls to ``operation``."""
        self.errors.setdefault(operation, []).extend(errors)

    def calls_to(self, operation: str) -> list[object]:
        """Return the arguments of every call to ``operation``."""
        return [args for name, args in self.calls if name == operation]

    def _record(self, operation: str, args: object) -> None:
        self.calls.append((operation, args))
        queued = self.errors.get(operation)
        if queued:
            raise queued.pop(0)

    async def login(self, name: str, email: str) -> None:
        self._record("login", (name, email))

    async def logout(self) -> None:
        self._record("logout", None)

    async def get_breeds(self) -> list[str]:
        self._record("get_breeds", None)
        return list(self.breeds)

    async def search_dogs(self, params: QueryParams) -> dict[str, object]:
        self._record("search_dogs", list(params))
        return dict(self.search_payload)

    async def get_dogs(self, dog_ids: Sequence[str]) -> list[dict[str, object]]:
        self._record("get_dogs", list(dog_ids))
        found = [self.dogs[dog_id] for dog_id in dog_ids if dog_id in self.dogs]
        return list(reversed(found)) if self.reverse_hydration else found

    async def get_match(self, dog_ids: Sequence[str]) -> dict[str, object]:
        self._record("get_match", list(dog_ids))
        return dict(self.match_payload)

    async def get_locations(
        self, zip_codes: Sequence[str]
    ) -> list[dict[str, object]]:
        self._record("get_locations", list(zip_codes))
        return [
            self.locations[zip_code]
            for zip_code in zip_codes
            if zip_code in self.locations
        ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        catalog_api_url="https://catalog.test",
        retry_delay_seconds=0,
    )


@pytest.fixture
def catalog_client() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def container(settings: Settings, catalog_client: FakeCatalogClient) -> AppContainer:
    breed_catalog = BreedCatalog(
        client=catalog_client,
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )
    session = build_session(settings, catalog_client, breed_catalog)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        catalog_client=catalog_client,
        breed_catalog=breed_catalog,
        session=session,
        close_resources=close_resources,
    )
