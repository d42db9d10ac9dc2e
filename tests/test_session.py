"""Tests for the search session."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from dog_matcher.config import Settings
from dog_matcher.containers import AppContainer, build_session
from dog_matcher.domain.errors import (
    InvalidCredentialsError,
    InvalidSortError,
    NoFavoritesSelectedError,
    TransportError,
    UnknownBreedError,
)
from dog_matcher.domain.search import FilterState, SortKey
from dog_matcher.services.breeds import BreedCatalog
from dog_matcher.services.cache import InMemoryCache
from dog_matcher.services.session import SearchSession
from tests.conftest import FakeCatalogClient


def _login(container: AppContainer) -> None:
    asyncio.run(container.session.login("Ada", "ada@example.org"))


@pytest.mark.parametrize(
    ("name", "email", "message"),
    [
        ("", "ada@example.org", "Name is required"),
        ("   ", "ada@example.org", "Name is required"),
        ("Ada", "not-an-email", "Invalid email"),
    ],
)
def test_login_validates_before_calling_the_catalog(
    container: AppContainer,
    catalog_client: FakeCatalogClient,
    name: str,
    email: str,
    message: str,
) -> None:
    with pytest.raises(InvalidCredentialsError) as exc_info:
        asyncio.run(container.session.login(name, email))

    assert exc_info.value.message == message
    assert catalog_client.calls == []
    assert not container.session.authenticated


def test_login_trims_credentials(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    asyncio.run(container.session.login("  Ada ", " ada@example.org "))

    assert catalog_client.calls_to("login") == [("Ada", "ada@example.org")]
    assert container.session.authenticated


def test_login_starts_from_a_clean_state(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    _login(container)
    session.toggle_favorite("d1")
    asyncio.run(session.add_breed("Beagle"))

    _login(container)

    assert session.view().favorites == ()
    assert session.filters.state == FilterState()
    assert session.orchestrator.state.status == "idle"


def test_logout_clears_state_even_when_the_catalog_fails(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    _login(container)
    session.toggle_favorite("d1")
    asyncio.run(session.add_zip("78701"))
    catalog_client.fail("logout", TransportError("Network error", "/auth/logout"))

    acknowledged = asyncio.run(session.logout())

    assert acknowledged is False
    assert not session.authenticated
    assert session.view().favorites == ()
    assert session.view().locations == ()
    assert session.filters.state == FilterState()


def test_logout_success(container: AppContainer) -> None:
    _login(container)

    assert asyncio.run(container.session.logout()) is True
    assert not container.session.authenticated


def test_unknown_breed_is_rejected_once_breeds_are_loaded(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    _login(container)
    asyncio.run(session.list_breeds())

    with pytest.raises(UnknownBreedError):
        asyncio.run(session.add_breed("Unicorn"))

    assert session.filters.state.breeds == ()
    assert catalog_client.calls_to("search_dogs") == []


def test_breed_changes_trigger_a_search(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    _login(container)

    asyncio.run(session.add_breed("Beagle"))
    asyncio.run(session.add_breed("Beagle"))
    asyncio.run(session.remove_breed("Beagle"))

    searches = catalog_client.calls_to("search_dogs")
    assert len(searches) == 2
    assert ("breeds", "Beagle") in searches[0]
    assert ("breeds", "Beagle") not in searches[1]


def test_sort_change_resets_the_cursor(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    catalog_client.search_payload = {"resultIds": ["d1"], "total": 40, "next": "abc"}
    _login(container)
    asyncio.run(session.refresh())
    asyncio.run(session.next_page())
    assert session.filters.state.cursor == "abc"

    asyncio.run(session.set_sort("age:desc"))

    assert session.filters.state.cursor is None
    assert session.filters.state.sort == SortKey("age", "desc")
    last_search = catalog_client.calls_to("search_dogs")[-1]
    assert ("sort", "age:desc") in last_search
    assert all(name != "from" for name, _ in last_search)


def test_invalid_sort_is_rejected(container: AppContainer) -> None:
    _login(container)

    with pytest.raises(InvalidSortError):
        asyncio.run(container.session.set_sort("color:asc"))


def test_add_zip_refreshes_results(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    _login(container)

    location = asyncio.run(session.add_zip("78701"))
    asyncio.run(session.add_zip("78701"))

    assert location is not None
    assert location.label == "Austin, TX"
    searches = catalog_client.calls_to("search_dogs")
    assert len(searches) == 1
    assert ("zipCodes", "78701") in searches[0]

    asyncio.run(session.remove_zip("78701"))
    assert ("zipCodes", "78701") not in catalog_client.calls_to("search_dogs")[-1]


def test_match_uses_favorites_in_order(
    container: AppContainer, catalog_client: FakeCatalogClient
) -> None:
    session = container.session
    _login(container)

    with pytest.raises(NoFavoritesSelectedError):
        asyncio.run(session.generate_match())
    assert not session.view().can_generate_match

    session.toggle_favorite("d2")
    session.toggle_favorite("d1")
    dog = asyncio.run(session.generate_match())

    assert dog.id == "d1"
    assert catalog_client.calls_to("get_match") == [["d2", "d1"]]
    assert session.view().match.status == "matched"

    session.dismiss_match()
    assert session.view().match.status == "idle"


@dataclass
class SlowCatalogClient(FakeCatalogClient):
    """Catalog whose ZIP and match lookups wait for the test to release them."""

    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def get_locations(
        self, zip_codes: Sequence[str]
    ) -> list[dict[str, object]]:
        await self.release.wait()
        return await super().get_locations(zip_codes)

    async def get_match(self, dog_ids: Sequence[str]) -> dict[str, object]:
        await self.release.wait()
        return await super().get_match(dog_ids)


def _session(settings: Settings, client: FakeCatalogClient) -> SearchSession:
    breed_catalog = BreedCatalog(client=client, cache=InMemoryCache())
    return build_session(settings, client, breed_catalog)


def test_zip_lookup_finishing_after_logout_is_discarded(settings: Settings) -> None:
    async def scenario() -> tuple[SlowCatalogClient, SearchSession, object]:
        client = SlowCatalogClient()
        session = _session(settings, client)
        await session.login("Ada", "ada@example.org")
        await session.add_breed("Beagle")
        task = asyncio.create_task(session.add_zip("78701"))
        await asyncio.sleep(0)
        await session.logout()
        client.release.set()
        return client, session, await task

    client, session, location = asyncio.run(scenario())

    assert location is None
    assert session.filters.state == FilterState()
    assert session.view().locations == ()
    assert session.orchestrator.state.status == "idle"
    assert len(client.calls_to("search_dogs")) == 1


def test_zip_can_be_added_again_in_the_next_session(settings: Settings) -> None:
    async def scenario() -> SearchSession:
        client = SlowCatalogClient()
        session = _session(settings, client)
        await session.login("Ada", "ada@example.org")
        task = asyncio.create_task(session.add_zip("78701"))
        await asyncio.sleep(0)
        await session.logout()
        client.release.set()
        await task
        await session.login("Grace", "grace@example.org")
        await session.add_zip("78701")
        return session

    session = asyncio.run(scenario())

    assert session.filters.state.zip_codes == ("78701",)
    assert [location.label for location in session.view().locations] == [
        "Austin, TX"
    ]


def test_match_finishing_after_logout_is_discarded(settings: Settings) -> None:
    async def scenario() -> SearchSession:
        client = SlowCatalogClient()
        session = _session(settings, client)
        await session.login("Ada", "ada@example.org")
        session.toggle_favorite("d1")
        task = asyncio.create_task(session.generate_match())
        await asyncio.sleep(0)
        await session.logout()
        client.release.set()
        await task
        return session

    session = asyncio.run(scenario())

    assert session.view().match.status == "idle"
    assert session.view().match.dog is None
