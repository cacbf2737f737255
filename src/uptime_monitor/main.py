from __future__ import annotations

import argparse
import signal
import sys
import threading
import time
from typing import List, Optional

import structlog
from rich.console import Console
from rich.markup import escape

from .alerts import AlertDispatcher, NotificationSink
from .config import AlertsConfig, Settings, load_settings
from .controller import Controller
from .exceptions import ConfigError
from .logging import setup_logging
from .poller import SiteMonitor
from .sinks import ConsoleSink, DiscordWebhookSink
from .ui import build_table, format_duration

console = Console()
logger = structlog.get_logger(__name__)


def build_sinks(alerts: AlertsConfig) -> List[NotificationSink]:
    sinks: List[NotificationSink] = []
    if alerts.console:
        sinks.append(ConsoleSink())
    if alerts.discord.enabled:
        sinks.append(DiscordWebhookSink(alerts.discord.webhook_url.get_secret_value()))
    return sinks


def run(settings: Settings, terminate: threading.Event) -> Controller:
    """Start the controller and one poller per site; return after terminate is set."""
    dispatcher = AlertDispatcher(build_sinks(settings.alerts))
    controller = Controller(
        settings.sites,
        dispatcher,
        notify_recovery=settings.alerts.notify_recovery,
    )
    pollers = [SiteMonitor(site, controller.results, terminate) for site in settings.sites]

    started = time.monotonic()
    controller.start()
    for poller in pollers:
        poller.start()
    logger.info("monitor_started", sites=[s.name for s in settings.sites])

    terminate.wait()

    logger.info("monitor_stopping")
    for poller in pollers:
        poller.join()
    controller.stop()
    dispatcher.close()

    fatal = {p.site.name: p.fatal_error for p in pollers if p.fatal_error is not None}
    console.print(
        build_table(
            controller.sites,
            controller.states,
            fatal=fatal,
            caption=f"Monitored for {format_duration(time.monotonic() - started)}",
        )
    )
    return controller


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="TCP uptime monitor with threshold alerts")
    parser.add_argument("--config", "-c", default=None, help="Path to YAML config (default: config/sites.yaml)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--log-format", choices=("console", "json"), default=None)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        console.print(f"[bold red]Invalid configuration:[/] {escape(str(e))}", highlight=False)
        return 2
    setup_logging(settings.logging, level=args.log_level, fmt=args.log_format)
    if not settings.sites:
        logger.error("no_sites_configured", config=args.config)
        return 2

    terminate = threading.Event()

    def _signal_handler(signum, frame):
        terminate.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _signal_handler)

    run(settings, terminate)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
