"""Keyed topics with consumer groups and long-poll delivery, held in memory."""

from relay.events.broker import EventBroker
from relay.events.config import BrokerConfig
from relay.events.errors import InvalidArgumentError, RelayError
from relay.events.models import Event

__all__ = ["BrokerConfig", "Event", "EventBroker", "InvalidArgumentError", "RelayError"]
