"""Waiter registry: long-poll calls parked on a key until a push or their deadline.

notify() is a one-shot broadcast: it detaches the key's current waiters in a single
step and wakes each of them with the pushed event. A waiter registered after that
lands in a fresh list. Every waiter leaves the registry exactly once, either
detached by notify() or discarded by itself on timeout or cancellation.
"""

import asyncio
import logging

from relay.events.config import POLL_TIMEOUT_MS
from relay.events.models import Event

logger = logging.getLogger(__name__)


class Waiter:
    """Handle for one pending long-poll. Resolves on wake() or at its deadline."""

    def __init__(self, registry: "WaiterRegistry", key: str, timeout: float) -> None:
        loop = asyncio.get_running_loop()
        self.key = key
        self._registry = registry
        self._future: asyncio.Future[Event | None] = loop.create_future()
        self._deadline = loop.time() + timeout

    @property
    def done(self) -> bool:
        return self._future.done()

    @property
    def woken(self) -> bool:
        """True if resolved by wake(), False while pending or after timeout."""
        return self._future.done() and not self._future.cancelled()

    def wake(self, event: Event | None = None) -> bool:
        """Resolve as notified by event. No-op (returns False) if already resolved."""
        if self._future.done():
            return False
        self._future.set_result(event)
        return True

    async def wait(self) -> Event | None:
        """Suspend until woken or the deadline passes.

        Returns the event passed to wake(), or None on timeout and on a wake
        without event. Once resolved, further calls return the same outcome at once.
        Cancellation of the caller propagates; the registration is removed either way.
        """
        if not self._future.done():
            remaining = max(0.0, self._deadline - asyncio.get_running_loop().time())
            try:
                await asyncio.wait_for(self._future, timeout=remaining)
            except asyncio.TimeoutError:
                pass
            finally:
                self._registry.discard(self)
        return self._future.result() if self.woken else None


class WaiterRegistry:
    """Per-key lists of pending waiters."""

    def __init__(self, timeout: float = POLL_TIMEOUT_MS / 1000) -> None:
        self._timeout = timeout
        self._waiters: dict[str, list[Waiter]] = {}

    @property
    def timeout(self) -> float:
        return self._timeout

    def register(self, key: str, timeout: float | None = None) -> Waiter:
        """Park a new waiter on key. Deadline counts from now. Needs a running loop."""
        waiter = Waiter(self, key, self._timeout if timeout is None else timeout)
        self._waiters.setdefault(key, []).append(waiter)
        return waiter

    def notify(self, key: str, event: Event | None = None) -> int:
        """Wake every waiter registered on key right now with event. Returns how many were woken."""
        waiters = self._waiters.pop(key, None)
        if not waiters:
            return 0
        woken = sum(1 for w in waiters if w.wake(event))
        logger.debug("WaiterRegistry: woke %d waiters on %s", woken, key)
        return woken

    def notify_all(self) -> int:
        """Wake every waiter on every key without an event. Used on shutdown."""
        return sum(self.notify(key) for key in list(self._waiters))

    def discard(self, waiter: Waiter) -> None:
        """Remove a waiter that finished on its own. Absent waiters are ignored."""
        waiters = self._waiters.get(waiter.key)
        if not waiters:
            return
        try:
            waiters.remove(waiter)
        except ValueError:
            return
        if not waiters:
            del self._waiters[waiter.key]

    def pending(self, key: str) -> int:
        return len(self._waiters.get(key, ()))

    def keys(self) -> list[str]:
        return list(self._waiters)

    def __len__(self) -> int:
        return sum(len(w) for w in self._waiters.values())
