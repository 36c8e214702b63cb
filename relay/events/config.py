"""Broker timing constants and the validated `broker` settings section."""

from typing import Any

from pydantic import BaseModel, Field

__all__ = [
    "POLL_TIMEOUT_MS",
    "RETENTION_WINDOW_MS",
    "SWEEP_INTERVAL_MS",
    "BrokerConfig",
]

RETENTION_WINDOW_MS = 120_000
SWEEP_INTERVAL_MS = 10_000
POLL_TIMEOUT_MS = 30_000


class BrokerConfig(BaseModel):
    """Timing knobs in seconds. Defaults mirror the *_MS constants."""

    retention_window: float = Field(default=RETENTION_WINDOW_MS / 1000, gt=0)
    sweep_interval: float = Field(default=SWEEP_INTERVAL_MS / 1000, gt=0)
    poll_timeout: float = Field(default=POLL_TIMEOUT_MS / 1000, gt=0)

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "BrokerConfig":
        """Build from the 'broker' section of loaded settings; missing keys use defaults."""
        section = settings.get("broker") or {}
        return cls(**{k: v for k, v in section.items() if v is not None})
