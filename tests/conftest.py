"""Shared fixtures for broker tests."""

import pytest

from relay.events import BrokerConfig, EventBroker
from relay.events.store import EventStore


class FakeClock:
    """Manually advanced wall clock for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_config() -> BrokerConfig:
    return BrokerConfig(retention_window=120, sweep_interval=0.05, poll_timeout=0.2)


@pytest.fixture
async def broker(fast_config: BrokerConfig) -> EventBroker:
    b = EventBroker(config=fast_config)
    b.start()
    yield b
    await b.stop()


@pytest.fixture
async def clocked_broker(fast_config: BrokerConfig, clock: FakeClock) -> EventBroker:
    store = EventStore(retention_window=fast_config.retention_window, clock=clock)
    b = EventBroker(config=fast_config, store=store)
    yield b
    await b.stop()
