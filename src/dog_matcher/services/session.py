"""One logged-in visit to the dog catalog."""

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from dog_matcher.adapters.catalog_client import CatalogClient
from dog_matcher.domain.auth import LoginCredentials
from dog_matcher.domain.dogs import DogRecord, Location
from dog_matcher.domain.errors import (
    ApiError,
    InvalidCredentialsError,
    UnknownBreedError,
)
from dog_matcher.domain.search import FilterState, SortKey
from dog_matcher.services.breeds import BreedCatalog
from dog_matcher.services.favorites import FavoritesTracker
from dog_matcher.services.locations import LocationResolver
from dog_matcher.services.match import MatchSnapshot, MatchWorkflow
from dog_matcher.services.search import (
    PageDirection,
    SearchOrchestrator,
    SearchSnapshot,
)
from dog_matcher.services.store import Store

_logger = logging.getLogger(__name__)

_CREDENTIAL_MESSAGES = {
    "name": "Name is required",
    "email": "Invalid email",
}


@dataclass(frozen=True)
class SessionView:
    """Everything a caller needs to display the search screen."""

    filters: FilterState
    locations: tuple[Location, ...]
    search: SearchSnapshot
    favorites: tuple[str, ...]
    match: MatchSnapshot

    @property
    def can_generate_match(self) -> bool:
        """Return True when a match may be requested."""
        return bool(self.favorites) and self.match.status != "generating"


@dataclass
class SearchSession:
    """Owns filters, favorites, locations and match state for one visit.

    Every filter change resets the cursor to the first page and re-runs the
    search. Logging out or logging in again drops all of it.
    """

    client: CatalogClient
    breed_catalog: BreedCatalog
    orchestrator: SearchOrchestrator
    default_filters: FilterState = field(default_factory=FilterState)
    debug: bool = False
    authenticated: bool = False
    filters: Store[FilterState] = field(init=False)
    resolver: LocationResolver = field(init=False)
    favorites: FavoritesTracker = field(init=False)
    matcher: MatchWorkflow = field(init=False)

    def __post_init__(self) -> None:
        self.filters = Store(self.default_filters)
        self.resolver = LocationResolver(
            client=self.client, filters=self.filters, debug=self.debug
        )
        self.favorites = FavoritesTracker()
        self.matcher = MatchWorkflow(client=self.client)

    async def login(self, name: str, email: str) -> None:
        """Validate the credentials and start a fresh authenticated session."""
        try:
            credentials = LoginCredentials(name=name, email=email)
        except ValidationError as exc:
            first = exc.errors()[0]
            field_name = str(first["loc"][0]) if first["loc"] else ""
            raise InvalidCredentialsError(
                _CREDENTIAL_MESSAGES.get(field_name, first["msg"])
            ) from exc
        await self.client.login(credentials.name, credentials.email)
        self.reset()
        self.authenticated = True
        _logger.info("Catalog session started")

    async def logout(self) -> bool:
        """End the session, returning whether the catalog acknowledged it.

        Local state is cleared even when the remote call fails.
        """
        try:
            await self.client.logout()
        except ApiError as exc:
            _logger.warning(
                "Logout failed (status=%s): %s", exc.status_code, exc.message
            )
            return False
        finally:
            self.reset()
            self.authenticated = False
        return True

    def reset(self) -> None:
        """Drop filters, favorites, cached locations, results and match."""
        self.filters.set_state(self.default_filters)
        self.resolver.clear()
        self.favorites.clear()
        self.matcher.dismiss()
        self.orchestrator.reset()

    async def list_breeds(self) -> list[str]:
        """Return the breeds available for filtering."""
        return await self.breed_catalog.list_breeds()

    async def add_breed(self, breed: str) -> SearchSnapshot:
        """Filter by an additional breed."""
        known = self.breed_catalog.cached_breeds()
        if known is not None and breed not in known:
            raise UnknownBreedError(breed)
        return await self._apply(self.filters.state.with_breed(breed))

    async def remove_breed(self, breed: str) -> SearchSnapshot:
        """Stop filtering by ``breed``."""
        return await self._apply(self.filters.state.without_breed(breed))

    async def set_sort(self, sort: SortKey | str) -> SearchSnapshot:
        """Change the result ordering."""
        sort_key = SortKey.parse(sort) if isinstance(sort, str) else sort
        return await self._apply(self.filters.state.with_sort(sort_key))

    async def add_zip(self, zip_code: str) -> Location | None:
        """Resolve and filter by a ZIP code, then refresh results."""
        before = self.filters.state
        location = await self.resolver.add_zip(zip_code)
        if location is not None and self.filters.state != before:
            await self.orchestrator.search(self.filters.state)
        return location

    async def remove_zip(self, zip_code: str) -> SearchSnapshot:
        """Stop filtering by a ZIP code."""
        before = self.filters.state
        self.resolver.remove_zip(zip_code)
        if self.filters.state == before:
            return self.orchestrator.state
        return await self.orchestrator.search(self.filters.state)

    async def next_page(self) -> SearchSnapshot:
        """Move to the following page of results."""
        return await self._paginate("next")

    async def previous_page(self) -> SearchSnapshot:
        """Move to the preceding page of results."""
        return await self._paginate("previous")

    async def refresh(self) -> SearchSnapshot:
        """Re-run the current query."""
        return await self.orchestrator.search(self.filters.state)

    def toggle_favorite(self, dog_id: str) -> frozenset[str]:
        """Add or remove a dog from the favorites."""
        return self.favorites.toggle(dog_id)

    async def generate_match(self) -> DogRecord:
        """Request a match among the current favorites."""
        dog = await self.matcher.generate_match(self.favorites.ids())
        _logger.info("Matched with dog %s", dog.id)
        return dog

    def dismiss_match(self) -> None:
        """Close the current match result."""
        self.matcher.dismiss()

    def view(self) -> SessionView:
        """Return a combined snapshot of the session."""
        return SessionView(
            filters=self.filters.state,
            locations=tuple(self.resolver.locations()),
            search=self.orchestrator.state,
            favorites=tuple(self.favorites.ids()),
            match=self.matcher.state,
        )

    async def _apply(self, filter_state: FilterState) -> SearchSnapshot:
        if filter_state == self.filters.state:
            return self.orchestrator.state
        self.filters.set_state(filter_state)
        return await self.orchestrator.search(filter_state)

    async def _paginate(self, direction: PageDirection) -> SearchSnapshot:
        target = self.orchestrator.adjacent_filters(direction)
        if target is None:
            return self.orchestrator.state
        self.filters.set_state(target)
        return await self.orchestrator.search(target)
