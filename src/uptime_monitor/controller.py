from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

import structlog

from . import config
from .alerts import ALERT, RECOVERED, AlertDispatcher, AlertEvent
from .config import SiteConfig
from .network_errors import RecoverableNetworkError
from .result_queue import ResultQueue
from .state import PollResult, SiteRuntimeState

logger = structlog.get_logger(__name__)

# Enqueued by stop(); everything queued before it is still processed
_STOP = object()


def format_alert(site_name: str, error: Optional[RecoverableNetworkError]) -> str:
    reason = error.description if error is not None else "unknown failure"
    message = f"ALERT! {site_name}: {reason}"
    if len(message) > config.MAX_ALERT_MESSAGE_LEN:
        message = message[: config.MAX_ALERT_MESSAGE_LEN - 3] + "..."
    return message


def format_recovery(site_name: str) -> str:
    return f"RECOVERED: {site_name} is reachable again"


class Controller:
    """Single consumer of poll results and sole owner of per-site state.

    A site alerts once when its consecutive failures exceed its threshold
    and stays quiet until a success resets it.
    """

    def __init__(
        self,
        sites: Iterable[SiteConfig],
        dispatcher: AlertDispatcher,
        results: Optional[ResultQueue] = None,
        notify_recovery: bool = False,
    ):
        self.sites: Dict[str, SiteConfig] = {s.name: s for s in sites}
        self.results: ResultQueue = results if results is not None else ResultQueue()
        self._dispatcher = dispatcher
        self._notify_recovery = notify_recovery
        self._states: Dict[str, SiteRuntimeState] = {
            name: SiteRuntimeState(name, site.threshold)
            for name, site in self.sites.items()
        }
        self._thread: Optional[threading.Thread] = None
        self.processed = 0

    @property
    def states(self) -> Mapping[str, SiteRuntimeState]:
        return MappingProxyType(self._states)

    def state_for(self, site_name: str) -> SiteRuntimeState:
        return self._states[site_name]

    def handle_result(self, result: PollResult) -> None:
        state = self._states.get(result.site_name)
        if state is None:
            logger.warning("unknown_site_result", site=result.site_name)
            return
        self.processed += 1

        if result.ok:
            was_alerting = state.record_ok(result.rtt_ms)
            if was_alerting:
                logger.info("site_recovered", site=state.name)
                if self._notify_recovery:
                    self._dispatcher.broadcast(
                        AlertEvent(format_recovery(state.name), state.name, RECOVERED)
                    )
            return

        if state.record_error(result.error):
            logger.warning(
                "alert_raised",
                site=state.name,
                consecutive_failures=state.consecutive_failures,
                threshold=state.threshold,
                error=result.error.description if result.error else None,
            )
            self._dispatcher.broadcast(
                AlertEvent(format_alert(state.name, result.error), state.name, ALERT)
            )
        else:
            logger.debug(
                "site_failure",
                site=state.name,
                consecutive_failures=state.consecutive_failures,
                alerting=state.is_alerting,
            )

    def run(self) -> None:
        """Consume results until stop() is called."""
        while True:
            item = self.results.dequeue()
            if item is _STOP:
                logger.info("controller_stopped", processed=self.processed)
                return
            self.handle_result(item)

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="controller", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Let the consumer thread finish the queued results, then exit.

        A no-op when the thread was never started or has already exited.
        """
        if self._thread is None or not self._thread.is_alive():
            return
        self.results.enqueue(_STOP)
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
