"""Notification sinks: Discord webhook delivery and console output."""

from __future__ import annotations

from typing import Optional

import httpx
import structlog
from rich.console import Console

from . import config
from .alerts import RECOVERED, AlertEvent, NotificationSink

logger = structlog.get_logger(__name__)


class DiscordWebhookSink(NotificationSink):
    """Posts ``{"content": message}`` to a Discord webhook.

    Transport errors and 4xx/5xx responses are logged delivery failures;
    nothing is retried.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = config.WEBHOOK_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def notify(self, event: AlertEvent) -> bool:
        try:
            resp = self._client.post(self._webhook_url, json={"content": event.message})
        except httpx.HTTPError as e:
            logger.warning("discord_send_error", site=event.site_name, error=str(e))
            return False
        if resp.is_error:
            logger.warning(
                "discord_send_failed",
                site=event.site_name,
                status=resp.status_code,
                body=resp.text[:200],
            )
            return False
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class ConsoleSink(NotificationSink):
    """Prints alerts to the terminal."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, event: AlertEvent) -> bool:
        style = "bold green" if event.kind == RECOVERED else "bold red"
        self._console.print(event.message, style=style, markup=False, highlight=False)
        return True
