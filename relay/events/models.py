"""Event model for the broker."""

import uuid
from dataclasses import dataclass
from typing import Any

__all__ = ["Event", "new_event_id"]


def new_event_id(key: str, created_at: float) -> str:
    """Build an id from key, creation time (ms) and a random suffix."""
    return f"{key}-{int(created_at * 1000)}-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class Event:
    """Immutable event appended to a topic."""

    id: str
    key: str
    payload: Any
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def to_dict(self) -> dict[str, Any]:
        """Wire shape for an outer HTTP layer: payload is exposed as 'data'."""
        return {
            "id": self.id,
            "key": self.key,
            "data": self.payload,
            "created_at": self.created_at,
        }
