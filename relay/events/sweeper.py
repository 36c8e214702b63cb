"""Retention sweeper: periodic prune of the event store, independent of traffic."""

import asyncio
import logging

from relay.events.config import SWEEP_INTERVAL_MS
from relay.events.consumption import ConsumptionTracker
from relay.events.store import EventStore

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Background task: prune expired events, then forget their consumption ids."""

    def __init__(
        self,
        store: EventStore,
        tracker: ConsumptionTracker,
        interval: float = SWEEP_INTERVAL_MS / 1000,
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self, now: float | None = None) -> int:
        """One prune pass. Returns number of events removed."""
        removed = self._store.prune_expired(now)
        if not removed:
            return 0
        forgotten = self._tracker.forget(removed)
        logger.info(
            "RetentionSweeper: removed %d expired events, %d consumption entries",
            len(removed),
            forgotten,
        )
        return len(removed)

    def start(self) -> None:
        """Start the sweep loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("RetentionSweeper started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        """Cancel and await the sweep loop."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("RetentionSweeper stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep()
            except Exception as e:
                logger.exception("RetentionSweeper: sweep failed: %s", e)
