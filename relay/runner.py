"""Bootstrap helpers for a process that hosts the broker behind an HTTP or RPC layer."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable

from relay.events import BrokerConfig, EventBroker
from relay.logging_config import setup_logging
from relay.settings import load_settings

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

logger = logging.getLogger(__name__)


def build_broker(settings: dict[str, Any]) -> EventBroker:
    """Create a broker from the 'broker' settings section. Invalid values raise ValidationError."""
    return EventBroker(config=BrokerConfig.from_settings(settings))


async def run_broker(
    shutdown_event: asyncio.Event,
    settings: dict[str, Any] | None = None,
    on_ready: Callable[[EventBroker], None] | None = None,
) -> None:
    """Load settings, set up logging, run the broker until shutdown_event is set.

    on_ready, if given, is called with the started broker so the hosting layer
    can route requests to it.
    """
    if settings is None:
        settings = load_settings()
        setup_logging(_PROJECT_ROOT, settings)
    broker = build_broker(settings)
    broker.start()
    logger.info(
        "EventBroker started (retention=%.0fs, poll_timeout=%.0fs)",
        broker.config.retention_window,
        broker.config.poll_timeout,
    )
    if on_ready is not None:
        on_ready(broker)
    try:
        await shutdown_event.wait()
    except asyncio.CancelledError:
        pass
    finally:
        await broker.stop()
        logger.info("EventBroker stopped")


__all__ = ["build_broker", "run_broker"]
