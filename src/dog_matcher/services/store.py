"""Observable state containers."""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

SnapshotT = TypeVar("SnapshotT")

Listener = Callable[[SnapshotT], None]

_logger = logging.getLogger(__name__)


class Store(Generic[SnapshotT]):
    """Holds one immutable snapshot and notifies subscribers on change."""

    def __init__(self, initial: SnapshotT) -> None:
        self._state = initial
        self._listeners: list[Listener[SnapshotT]] = []

    @property
    def state(self) -> SnapshotT:
        """Return the current snapshot."""
        return self._state

    def subscribe(self, listener: Listener[SnapshotT]) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_state(self, state: SnapshotT) -> None:
        """Replace the snapshot and notify listeners if it changed."""
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.exception("State listener failed")
