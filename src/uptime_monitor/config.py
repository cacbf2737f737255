from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigError

# Per-site defaults
DEFAULT_PORT = 443
DEFAULT_THRESHOLD = 10  # consecutive failures tolerated before alerting
DEFAULT_POLLING_INTERVAL_MS = 5000

# Alerts
MAX_ALERT_MESSAGE_LEN = 1024
DISCORD_WEBHOOK_ENV = "DISCORD_WEBHOOK"
WEBHOOK_TIMEOUT_SECONDS = 10.0

# Console
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_CONFIG_PATH = Path("config/sites.yaml")


class SiteConfig(BaseModel):
    """One monitored endpoint. Shared read-only between threads."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    threshold: int = Field(default=DEFAULT_THRESHOLD, ge=0)
    polling_interval_ms: int = Field(default=DEFAULT_POLLING_INTERVAL_MS, gt=0)
    # None leaves the connect timeout to the OS
    connect_timeout: Optional[float] = Field(default=None, gt=0)

    @property
    def polling_interval(self) -> float:
        return self.polling_interval_ms / 1000.0


class DiscordConfig(BaseModel):
    enabled: bool = False
    webhook_url: SecretStr = SecretStr("")

    @model_validator(mode="after")
    def _webhook_from_env(self) -> "DiscordConfig":
        if self.enabled and not self.webhook_url.get_secret_value():
            env_url = os.environ.get(DISCORD_WEBHOOK_ENV, "")
            if not env_url:
                raise ValueError(
                    f"discord alerts enabled but no webhook_url or ${DISCORD_WEBHOOK_ENV} set"
                )
            self.webhook_url = SecretStr(env_url)
        return self


class AlertsConfig(BaseModel):
    console: bool = True
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    notify_recovery: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"

    @field_validator("format")
    @classmethod
    def _known_format(cls, v: str) -> str:
        if v not in ("console", "json"):
            raise ValueError("format must be 'console' or 'json'")
        return v


class Settings(BaseModel):
    """Top-level configuration: process-wide defaults plus the site list."""

    polling_interval_ms: int = Field(default=DEFAULT_POLLING_INTERVAL_MS, gt=0)
    sites: List[SiteConfig] = Field(default_factory=list)
    alerts: AlertsConfig = Field(default_factory=AlertsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="before")
    @classmethod
    def _expand_sites(cls, data: Any) -> Any:
        # Sites may be bare host strings; missing intervals inherit the default
        if not isinstance(data, dict):
            return data
        default_interval = data.get("polling_interval_ms", DEFAULT_POLLING_INTERVAL_MS)
        sites = data.get("sites") or []
        if not isinstance(sites, list):
            return data
        expanded = []
        for entry in sites:
            if isinstance(entry, str):
                entry = {"name": entry}
            if isinstance(entry, dict):
                entry = {"polling_interval_ms": default_interval, **entry}
            expanded.append(entry)
        return {**data, "sites": expanded}

    @field_validator("sites")
    @classmethod
    def _unique_names(cls, sites: List[SiteConfig]) -> List[SiteConfig]:
        seen = set()
        for site in sites:
            if site.name in seen:
                raise ValueError(f"duplicate site name: {site.name}")
            seen.add(site.name)
        return sites


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """Load and validate settings from a YAML file.

    A missing file yields the defaults (no sites). Malformed YAML or invalid
    values raise ConfigError.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"{config_path}: {e}") from e
        if isinstance(raw, dict):
            data = raw
        elif raw is not None:
            raise ConfigError(f"{config_path}: top level must be a mapping")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
