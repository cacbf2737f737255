"""Alert events and the dispatcher that fans them out to notification sinks."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Iterable, Tuple

import structlog

logger = structlog.get_logger(__name__)

ALERT = "alert"
RECOVERED = "recovered"


@dataclass(frozen=True)
class AlertEvent:
    message: str
    site_name: str = ""
    kind: str = ALERT


class NotificationSink(abc.ABC):
    """A single notification backend."""

    @abc.abstractmethod
    def notify(self, event: AlertEvent) -> bool:
        """Deliver the event. Returns True on success."""

    def close(self) -> None:
        """Release resources (HTTP clients, etc.)."""


class AlertDispatcher:
    """Broadcasts alert events to a fixed, ordered set of sinks.

    A sink that reports failure or raises is logged and skipped; delivery
    continues with the remaining sinks and nothing propagates to the caller.
    """

    def __init__(self, sinks: Iterable[NotificationSink] = ()) -> None:
        self._sinks: Tuple[NotificationSink, ...] = tuple(sinks)

    @property
    def sinks(self) -> Tuple[NotificationSink, ...]:
        return self._sinks

    def broadcast(self, event: AlertEvent) -> int:
        """Send *event* to every sink. Returns the number of successful deliveries."""
        delivered = 0
        for sink in self._sinks:
            try:
                ok = sink.notify(event)
            except Exception:
                logger.exception(
                    "sink_error",
                    sink=type(sink).__name__,
                    site=event.site_name,
                )
                continue
            if ok:
                delivered += 1
            else:
                logger.warning(
                    "sink_failed",
                    sink=type(sink).__name__,
                    site=event.site_name,
                )
        logger.info(
            "alert_broadcast",
            site=event.site_name,
            kind=event.kind,
            delivered=delivered,
            sinks=len(self._sinks),
        )
        return delivered

    def close(self) -> None:
        for sink in self._sinks:
            try:
                sink.close()
            except Exception:
                logger.exception("sink_close_error", sink=type(sink).__name__)
