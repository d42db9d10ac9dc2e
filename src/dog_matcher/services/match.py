"""Match generation workflow."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from dog_matcher.adapters.catalog_client import CatalogClient
from dog_matcher.domain.dogs import (
    DogRecord,
    MatchResult,
    parse_payload,
    parse_payload_list,
)
from dog_matcher.domain.errors import (
    DogMatcherError,
    MatchRecordMissingError,
    NoFavoritesSelectedError,
    NoMatchFoundError,
)
from dog_matcher.services.store import Listener, Store

MatchStatus = Literal["idle", "generating", "matched", "error"]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchSnapshot:
    """Immutable view of the match workflow."""

    status: MatchStatus = "idle"
    dog: DogRecord | None = None
    error: str | None = None
    error_kind: str | None = None


@dataclass
class MatchWorkflow:
    """Requests a match for the favorites and hydrates the chosen dog."""

    client: CatalogClient
    store: Store[MatchSnapshot] = field(
        default_factory=lambda: Store(MatchSnapshot())
    )
    _request_id: int = field(default=0, init=False)

    @property
    def state(self) -> MatchSnapshot:
        """Return the current match snapshot."""
        return self.store.state

    def subscribe(self, listener: Listener[MatchSnapshot]) -> Callable[[], None]:
        """Observe match snapshots."""
        return self.store.subscribe(listener)

    async def generate_match(self, favorite_ids: Sequence[str]) -> DogRecord:
        """Ask the catalog for a match and return the matched dog.

        Raises NoFavoritesSelectedError without calling the catalog when
        ``favorite_ids`` is empty. A result that arrives after ``dismiss`` or a
        newer request is returned to the caller but not published.
        """
        self._request_id += 1
        request_id = self._request_id
        if not favorite_ids:
            error = NoFavoritesSelectedError()
            self._fail(error)
            raise error

        self.store.set_state(MatchSnapshot(status="generating"))
        try:
            dog = await self._resolve(list(favorite_ids))
        except DogMatcherError as exc:
            _logger.warning("Match generation failed: %s", exc.message)
            if request_id == self._request_id:
                self._fail(exc)
            raise

        if request_id == self._request_id:
            self.store.set_state(MatchSnapshot(status="matched", dog=dog))
        return dog

    def dismiss(self) -> None:
        """Close the match result and return to idle."""
        self._request_id += 1
        self.store.set_state(MatchSnapshot())

    async def _resolve(self, favorite_ids: list[str]) -> DogRecord:
        raw_match = await self.client.get_match(favorite_ids)
        match = parse_payload(MatchResult, raw_match or {}, "/dogs/match")
        if not match.matched_dog_id:
            raise NoMatchFoundError()

        raw_dogs = await self.client.get_dogs([match.matched_dog_id])
        dogs = parse_payload_list(DogRecord, raw_dogs, "/dogs")
        if not dogs:
            raise MatchRecordMissingError(match.matched_dog_id)
        return dogs[0]

    def _fail(self, exc: DogMatcherError) -> None:
        self.store.set_state(
            MatchSnapshot(status="error", error=exc.message, error_kind=exc.kind)
        )
