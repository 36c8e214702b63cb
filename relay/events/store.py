"""Event store: append-ordered events per key, bounded by a wall-clock retention window.

All methods are synchronous. On the event loop no other task can run while one of
them executes, so a reader never observes a half-pruned key.
"""

import logging
import time
from typing import Any, Callable

from relay.events.config import RETENTION_WINDOW_MS
from relay.events.models import Event, new_event_id

logger = logging.getLogger(__name__)


class EventStore:
    """Per-key event lists. Insertion order equals creation-time order."""

    def __init__(
        self,
        retention_window: float = RETENTION_WINDOW_MS / 1000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._retention_window = retention_window
        self._clock = clock
        self._events: dict[str, list[Event]] = {}

    @property
    def retention_window(self) -> float:
        return self._retention_window

    def append(self, key: str, payload: Any) -> Event:
        """Create an event with a fresh id and the current time, append it to key."""
        now = self._clock()
        event = Event(
            id=new_event_id(key, now),
            key=key,
            payload={} if payload is None else payload,
            created_at=now,
        )
        self._events.setdefault(key, []).append(event)
        return event

    def snapshot(self, key: str, through: Event | None = None) -> list[Event]:
        """Return a copy of key's unexpired events in order. Unknown key -> [].

        With through, stop after that event: later pushes are left out.
        """
        events = self._events.get(key)
        if not events:
            return []
        now = self._clock()
        retained = [e for e in events if e.age(now) < self._retention_window]
        if through is None:
            return retained
        for i, e in enumerate(retained):
            if e.id == through.id:
                return retained[: i + 1]
        return [e for e in retained if e.created_at <= through.created_at]

    def prune_expired(self, now: float | None = None) -> list[Event]:
        """Drop events older than the retention window; remove keys left empty.

        Each key's list is replaced in one assignment. Returns the removed events.
        """
        if now is None:
            now = self._clock()
        removed: list[Event] = []
        for key, events in list(self._events.items()):
            valid = [e for e in events if e.age(now) < self._retention_window]
            if len(valid) == len(events):
                continue
            removed.extend(e for e in events if e.age(now) >= self._retention_window)
            if valid:
                self._events[key] = valid
            else:
                del self._events[key]
        if removed:
            logger.debug("EventStore: pruned %d expired events", len(removed))
        return removed

    def keys(self) -> list[str]:
        return list(self._events)

    def __len__(self) -> int:
        return sum(len(events) for events in self._events.values())
