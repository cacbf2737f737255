"""Exception hierarchy for the uptime monitor."""

from __future__ import annotations


class MonitorError(Exception):
    """Base exception for all monitor errors."""


class QueueEmpty(MonitorError):
    """Non-blocking dequeue (or an expired timeout) found no item."""


class ConfigError(MonitorError):
    """Configuration could not be read or failed validation."""
