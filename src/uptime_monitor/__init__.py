"""TCP uptime monitor with per-site consecutive-failure alerting."""

from .alerts import AlertDispatcher, AlertEvent, NotificationSink
from .config import SiteConfig, Settings, load_settings
from .controller import Controller
from .exceptions import ConfigError, MonitorError, QueueEmpty
from .network_errors import RecoverableNetworkError, classify_error, describe
from .poller import SiteMonitor
from .result_queue import ResultQueue
from .sinks import ConsoleSink, DiscordWebhookSink
from .state import PollResult, SiteRuntimeState, SiteStatus

__all__ = [
    "AlertDispatcher",
    "AlertEvent",
    "ConfigError",
    "ConsoleSink",
    "Controller",
    "DiscordWebhookSink",
    "MonitorError",
    "NotificationSink",
    "PollResult",
    "QueueEmpty",
    "RecoverableNetworkError",
    "ResultQueue",
    "Settings",
    "SiteConfig",
    "SiteMonitor",
    "SiteRuntimeState",
    "SiteStatus",
    "classify_error",
    "describe",
    "load_settings",
]
