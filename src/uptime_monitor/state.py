from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .network_errors import RecoverableNetworkError


class SiteStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADING = "degrading"
    ALERTING = "alerting"


@dataclass(frozen=True)
class PollResult:
    """One probe outcome, produced by a poller and consumed once by the controller."""

    site_name: str
    ok: bool
    error: Optional[RecoverableNetworkError] = None
    rtt_ms: Optional[float] = None

    @classmethod
    def success(cls, site_name: str, rtt_ms: Optional[float] = None) -> "PollResult":
        return cls(site_name, True, None, rtt_ms)

    @classmethod
    def failure(cls, site_name: str, error: RecoverableNetworkError) -> "PollResult":
        return cls(site_name, False, error, None)


@dataclass
class SiteRuntimeState:
    """Failure bookkeeping for one site. Only the controller thread writes it."""

    name: str
    threshold: int
    consecutive_failures: int = 0
    is_alerting: bool = False
    # informational, not used for alert decisions
    success_count: int = 0
    failure_count: int = 0
    last_rtt_ms: Optional[float] = None
    last_error: Optional[RecoverableNetworkError] = None

    def record_ok(self, rtt_ms: Optional[float]) -> bool:
        """Reset the failure streak. Returns True if the site was alerting."""
        was_alerting = self.is_alerting
        self.success_count += 1
        self.consecutive_failures = 0
        self.is_alerting = False
        self.last_rtt_ms = rtt_ms
        self.last_error = None
        return was_alerting

    def record_error(self, error: Optional[RecoverableNetworkError]) -> bool:
        """Extend the failure streak.

        Returns True only on the transition into alerting, i.e. the first
        failure that pushes the streak past the threshold.
        """
        self.failure_count += 1
        self.consecutive_failures += 1
        self.last_rtt_ms = None
        self.last_error = error
        if self.consecutive_failures > self.threshold and not self.is_alerting:
            self.is_alerting = True
            return True
        return False

    @property
    def status(self) -> SiteStatus:
        if self.consecutive_failures == 0:
            return SiteStatus.HEALTHY
        if self.consecutive_failures > self.threshold:
            return SiteStatus.ALERTING
        return SiteStatus.DEGRADING
