"""In-memory favorite selection."""

from collections.abc import Callable
from dataclasses import dataclass, field

from dog_matcher.services.store import Listener, Store


@dataclass
class FavoritesTracker:
    """Tracks which dogs the user marked as favorites during a session."""

    store: Store[frozenset[str]] = field(default_factory=lambda: Store(frozenset()))
    _order: dict[str, None] = field(default_factory=dict, init=False)

    def toggle(self, dog_id: str) -> frozenset[str]:
        """Flip membership of ``dog_id`` and return the new set."""
        if dog_id in self._order:
            del self._order[dog_id]
        else:
            self._order[dog_id] = None
        self.store.set_state(frozenset(self._order))
        return self.store.state

    def is_favorite(self, dog_id: str) -> bool:
        """Return True when ``dog_id`` is a favorite."""
        return dog_id in self._order

    def count(self) -> int:
        """Return the number of favorites."""
        return len(self._order)

    def ids(self) -> list[str]:
        """Return favorite ids in the order they were added."""
        return list(self._order)

    def clear(self) -> None:
        """Remove every favorite."""
        self._order.clear()
        self.store.set_state(frozenset())

    def subscribe(self, listener: Listener[frozenset[str]]) -> Callable[[], None]:
        """Observe the favorite set."""
        return self.store.subscribe(listener)
