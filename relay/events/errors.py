"""Errors raised by the broker API."""

__all__ = ["InvalidArgumentError", "RelayError"]


class RelayError(Exception):
    """Base class for broker errors."""


class InvalidArgumentError(RelayError, ValueError):
    """Raised synchronously when a call cannot be accepted (e.g. push without a key)."""
