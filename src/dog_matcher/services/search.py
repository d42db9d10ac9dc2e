"""Search orchestration: id page fetch, hydration and pagination."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Literal

from dog_matcher.adapters.catalog_client import CatalogClient
from dog_matcher.domain.dogs import (
    DogRecord,
    SearchPage,
    parse_payload,
    parse_payload_list,
)
from dog_matcher.domain.errors import AuthExpiredError, DogMatcherError
from dog_matcher.domain.search import FilterState
from dog_matcher.services.query_builder import (
    DEFAULT_PAGE_SIZE,
    QueryRequest,
    build_query,
)
from dog_matcher.services.retry import call_with_retry
from dog_matcher.services.store import Listener, Store

SearchStatus = Literal["idle", "loading", "success", "error"]
PageDirection = Literal["next", "previous"]

SEARCH_FAILED_MESSAGE = "Failed to fetch search results. Please try again."
SESSION_EXPIRED_MESSAGE = "Please login first"

_logger = logging.getLogger(__name__)

SearchResult = tuple[SearchPage, tuple[DogRecord, ...]]


@dataclass(frozen=True)
class SearchSnapshot:
    """Immutable view of the search state.

    ``page`` and ``dogs`` always hold the last successful result so callers can
    keep showing it while a new query is loading or after it failed.
    ``filters`` is the most recently requested filter state.
    """

    status: SearchStatus = "idle"
    filters: FilterState | None = None
    page: SearchPage | None = None
    dogs: tuple[DogRecord, ...] = ()
    error: str | None = None
    error_kind: str | None = None

    @property
    def is_loading(self) -> bool:
        """Return True while a query is in flight."""
        return self.status == "loading"

    @property
    def is_empty(self) -> bool:
        """Return True when the latest query succeeded with no dogs."""
        return self.status == "success" and not self.dogs

    @property
    def auth_expired(self) -> bool:
        """Return True when the latest query failed on an expired session."""
        return self.error_kind == AuthExpiredError.kind

    @property
    def has_next(self) -> bool:
        """Return True when the "Next" action is available."""
        return (
            self.status == "success" and self.page is not None and self.page.has_next
        )

    @property
    def has_previous(self) -> bool:
        """Return True when the "Previous" action is available."""
        return (
            self.status == "success"
            and self.page is not None
            and self.page.has_previous
        )


@dataclass
class SearchOrchestrator:
    """State machine that runs dog searches against the catalog.

    Every search is tagged with its query key. Results that arrive for a key
    other than the latest requested one are dropped, and searches for a key
    that is already in flight join the existing request.
    """

    client: CatalogClient
    page_size: int = DEFAULT_PAGE_SIZE
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    debug: bool = False
    store: Store[SearchSnapshot] = field(
        default_factory=lambda: Store(SearchSnapshot())
    )
    _current_key: str | None = field(default=None, init=False)
    _inflight: dict[str, "asyncio.Future[SearchResult]"] = field(
        default_factory=dict, init=False
    )

    @property
    def state(self) -> SearchSnapshot:
        """Return the current search snapshot."""
        return self.store.state

    def subscribe(self, listener: Listener[SearchSnapshot]) -> Callable[[], None]:
        """Observe search snapshots."""
        return self.store.subscribe(listener)

    async def search(self, filter_state: FilterState) -> SearchSnapshot:
        """Run the query for ``filter_state`` and return the resulting snapshot."""
        query = build_query(filter_state, self.page_size)
        key = query.key
        self._current_key = key
        self.store.set_state(
            replace(
                self.state,
                status="loading",
                filters=filter_state,
                error=None,
                error_kind=None,
            )
        )

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(query))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        elif self.debug:
            _logger.info("Search joined in-flight query: %s", key)

        try:
            page, dogs = await asyncio.shield(task)
        except DogMatcherError as exc:
            if key != self._current_key:
                return self.state
            _logger.warning("Search failed for %s: %s", key, exc.message)
            self.store.set_state(
                replace(
                    self.state,
                    status="error",
                    error=_user_message(exc),
                    error_kind=exc.kind,
                )
            )
            return self.state

        if key != self._current_key:
            if self.debug:
                _logger.info("Discarding stale search result: %s", key)
            return self.state
        self.store.set_state(
            SearchSnapshot(
                status="success",
                filters=filter_state,
                page=page,
                dogs=dogs,
            )
        )
        if self.debug:
            _logger.info("Search %s: total=%s shown=%s", key, page.total, len(dogs))
        return self.state

    def adjacent_filters(self, direction: PageDirection) -> FilterState | None:
        """Return the filters for the next or previous page, or None if disabled."""
        snapshot = self.state
        if snapshot.filters is None or snapshot.page is None:
            return None
        if direction == "next" and snapshot.has_next:
            return snapshot.filters.with_cursor(snapshot.page.next_cursor)
        if direction == "previous" and snapshot.has_previous:
            return snapshot.filters.with_cursor(snapshot.page.prev_cursor)
        return None

    async def next_page(self) -> SearchSnapshot:
        """Load the following page, if any."""
        target = self.adjacent_filters("next")
        if target is None:
            return self.state
        return await self.search(target)

    async def previous_page(self) -> SearchSnapshot:
        """Load the preceding page, if any."""
        target = self.adjacent_filters("previous")
        if target is None:
            return self.state
        return await self.search(target)

    async def refresh(self) -> SearchSnapshot:
        """Re-run the most recently requested query."""
        return await self.search(self.state.filters or FilterState())

    def reset(self) -> None:
        """Forget all results; in-flight responses will be discarded."""
        self._current_key = None
        self.store.set_state(SearchSnapshot())

    async def _fetch(self, query: QueryRequest) -> SearchResult:
        raw_page = await call_with_retry(
            lambda: self.client.search_dogs(query.params),
            action="search",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        page = parse_payload(SearchPage, raw_page, "/dogs/search")
        if not page.dog_ids:
            return page, ()

        raw_dogs = await call_with_retry(
            lambda: self.client.get_dogs(page.dog_ids),
            action="hydrate",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        dogs = parse_payload_list(DogRecord, raw_dogs, "/dogs")
        return page, _in_ranked_order(page.dog_ids, dogs)


def _in_ranked_order(
    dog_ids: Sequence[str], dogs: Sequence[DogRecord]
) -> tuple[DogRecord, ...]:
    """Order hydrated records by the ranking of the id page."""
    by_id = {dog.id: dog for dog in dogs}
    return tuple(by_id[dog_id] for dog_id in dog_ids if dog_id in by_id)


def _user_message(exc: DogMatcherError) -> str:
    if isinstance(exc, AuthExpiredError):
        return SESSION_EXPIRED_MESSAGE
    return SEARCH_FAILED_MESSAGE
