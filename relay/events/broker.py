"""Broker API: push to a keyed topic, long-poll unconsumed events per consumer group.

blocking_get runs CHECK -> WAIT -> CHECK -> RETURN. The second check is bounded by the
event whose push woke the call, keeping per-key causal order. Each check claims events
(filter + mark) without an await in between, and the waiter is registered in the
same synchronous block as the first empty check, so a push cannot slip between
them. The only suspension point is Waiter.wait().
"""

import logging
from typing import Any

from relay.events.config import BrokerConfig
from relay.events.consumption import ConsumptionTracker
from relay.events.errors import InvalidArgumentError
from relay.events.models import Event
from relay.events.store import EventStore
from relay.events.sweeper import RetentionSweeper
from relay.events.waiters import WaiterRegistry

logger = logging.getLogger(__name__)


class EventBroker:
    """Owns the event store, consumption tracker, waiter registry and sweeper."""

    def __init__(
        self,
        config: BrokerConfig | None = None,
        store: EventStore | None = None,
    ) -> None:
        self._config = config or BrokerConfig()
        self._store = (
            store
            if store is not None
            else EventStore(retention_window=self._config.retention_window)
        )
        self._tracker = ConsumptionTracker()
        self._waiters = WaiterRegistry(timeout=self._config.poll_timeout)
        self._sweeper = RetentionSweeper(
            self._store, self._tracker, interval=self._config.sweep_interval
        )

    @property
    def config(self) -> BrokerConfig:
        return self._config

    @property
    def store(self) -> EventStore:
        return self._store

    @property
    def tracker(self) -> ConsumptionTracker:
        return self._tracker

    @property
    def waiters(self) -> WaiterRegistry:
        return self._waiters

    @property
    def sweeper(self) -> RetentionSweeper:
        return self._sweeper

    async def push(self, key: str, payload: Any = None) -> Event:
        """Append an event to key and wake its pending long-polls. Never suspends.

        Raises InvalidArgumentError for a missing or empty key; nothing is stored then.
        """
        if not key or not isinstance(key, str):
            raise InvalidArgumentError("Missing key")
        event = self._store.append(key, payload)
        woken = self._waiters.notify(key, event)
        logger.debug("push %s -> %s (woke %d)", key, event.id, woken)
        return event

    async def blocking_get(
        self, key: str, group_id: str, timeout: float | None = None
    ) -> list[Event]:
        """Return events on key not yet delivered to group_id.

        Waits up to the poll timeout when none are available; [] on timeout.
        A missing key or group_id returns [] at once without registering.
        """
        if not key or not group_id:
            return []

        events = self._claim(key, group_id)
        if events:
            return events

        waiter = self._waiters.register(key, timeout)
        waking = await waiter.wait()

        # a consumer woken by push A must not see pushes made after A
        events = self._claim(key, group_id, through=waking)
        if not events and waiter.woken:
            logger.debug("blocking_get %s/%s woken with nothing new", key, group_id)
        return events

    def _claim(
        self, key: str, group_id: str, through: Event | None = None
    ) -> list[Event]:
        return self._tracker.claim(key, group_id, self._store.snapshot(key, through))

    def start(self) -> None:
        """Start the retention sweeper. Requires a running event loop."""
        self._sweeper.start()

    async def stop(self) -> None:
        """Stop the sweeper and release every parked long-poll."""
        await self._sweeper.stop()
        released = self._waiters.notify_all()
        if released:
            logger.info("EventBroker: released %d pending long-polls on stop", released)

    async def __aenter__(self) -> "EventBroker":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    def stats(self) -> dict[str, int]:
        """Counts for health/debug endpoints."""
        return {
            "keys": len(self._store.keys()),
            "events": len(self._store),
            "waiters": len(self._waiters),
            "groups": len(self._tracker),
        }


__all__ = ["EventBroker"]
