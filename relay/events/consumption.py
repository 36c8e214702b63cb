"""Consumption tracker: which event ids each (key, group) has already received."""

import logging
from typing import Iterable

from relay.events.models import Event

logger = logging.getLogger(__name__)


class ConsumptionTracker:
    """Per-key, per-group sets of delivered event ids. Broadcast across groups."""

    def __init__(self) -> None:
        self._consumed: dict[str, dict[str, set[str]]] = {}

    def unconsumed(
        self, key: str, group_id: str, candidates: Iterable[Event]
    ) -> list[Event]:
        """Subsequence of candidates not yet delivered to the group. Creates no record."""
        consumed = self._consumed.get(key, {}).get(group_id, ())
        return [e for e in candidates if e.id not in consumed]

    def mark_consumed(self, key: str, group_id: str, events: Iterable[Event]) -> None:
        """Record events as delivered to the group. Idempotent."""
        ids = [e.id for e in events]
        if not ids:
            return
        self._consumed.setdefault(key, {}).setdefault(group_id, set()).update(ids)

    def claim(self, key: str, group_id: str, candidates: Iterable[Event]) -> list[Event]:
        """Filter and mark in one step, so two callers of a group cannot share an event."""
        fresh = self.unconsumed(key, group_id, candidates)
        self.mark_consumed(key, group_id, fresh)
        return fresh

    def forget(self, expired: Iterable[Event]) -> int:
        """Remove ids of expired events from their key's records; drop empty records.

        Only the keys of the given events are visited. Returns the number of
        (group, id) entries removed.
        """
        by_key: dict[str, set[str]] = {}
        for event in expired:
            by_key.setdefault(event.key, set()).add(event.id)
        removed = 0
        for key, ids in by_key.items():
            groups = self._consumed.get(key)
            if not groups:
                continue
            for group_id, consumed in list(groups.items()):
                hits = consumed & ids
                if not hits:
                    continue
                consumed -= hits
                removed += len(hits)
                if not consumed:
                    del groups[group_id]
            if not groups:
                del self._consumed[key]
        return removed

    def groups(self, key: str) -> list[str]:
        """Group ids holding a consumption record for key."""
        return list(self._consumed.get(key, {}))

    def __len__(self) -> int:
        return sum(len(groups) for groups in self._consumed.values())
