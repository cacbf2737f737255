from __future__ import annotations

import threading
from typing import Optional

import structlog

from .config import SiteConfig
from .network_errors import classify_error
from .probe import Probe, tcp_probe
from .result_queue import ResultQueue
from .state import PollResult

logger = structlog.get_logger(__name__)


class SiteMonitor:
    """Polls one site on its own thread and pushes outcomes to the result queue.

    Recoverable connect failures become ``PollResult`` failures; anything
    the classifier does not recognise stops this poller only and is kept
    on ``fatal_error``.
    """

    def __init__(
        self,
        site: SiteConfig,
        results: ResultQueue,
        terminate: threading.Event,
        probe: Probe = tcp_probe,
    ):
        self.site = site
        self._results = results
        self._terminate = terminate
        self._probe = probe
        self._thread: Optional[threading.Thread] = None
        self.fatal_error: Optional[BaseException] = None

    def poll_once(self) -> PollResult:
        """Probe the site once and enqueue the outcome.

        Raises the original exception if it is not a recoverable network error.
        """
        site = self.site
        try:
            res = self._probe(site.name, site.port, site.connect_timeout)
        except Exception as e:
            kind = classify_error(e)
            if kind is None:
                raise
            result = PollResult.failure(site.name, kind)
            logger.debug("poll_failed", site=site.name, port=site.port, error=kind.description)
        else:
            result = PollResult.success(site.name, res.rtt_ms)
            logger.debug("poll_ok", site=site.name, port=site.port, rtt_ms=round(res.rtt_ms, 1))
        self._results.enqueue(result)
        return result

    def run(self) -> None:
        """Probe, then sleep for the polling interval, until terminate is set."""
        while not self._terminate.is_set():
            self.poll_once()
            # wakes early on shutdown instead of sleeping out the interval
            self._terminate.wait(self.site.polling_interval)

    def _run_guarded(self) -> None:
        try:
            self.run()
        except Exception as e:
            self.fatal_error = e
            logger.exception("poller_fatal", site=self.site.name, port=self.site.port)
        else:
            logger.info("poller_stopped", site=self.site.name)

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run_guarded,
            name=f"poller-{self.site.name}",
            daemon=True,
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
