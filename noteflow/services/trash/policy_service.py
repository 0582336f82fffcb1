# noteflow/services/trash/policy_service.py
"""
Trash retention policy.

Pure date arithmetic: no I/O, no clock reads. Callers pass "now" in, which
keeps expiration checks deterministic under test. Urgency is presentation
only; the sweeper is the sole enforcer of the retention window.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from noteflow.config import get_settings

ONE_DAY = timedelta(days=1)

TRASH_RETENTION_DAYS = 30
EXPIRATION_WARNING_THRESHOLD_DAYS = 7
EXPIRATION_URGENT_THRESHOLD_DAYS = 3
AUDIT_LOG_RETENTION_DAYS = 365


class Urgency(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"


@dataclass(frozen=True)
class RetentionPolicy:
    """Retention window and urgency thresholds, all in days."""

    retention_days: int = TRASH_RETENTION_DAYS
    warning_days: int = EXPIRATION_WARNING_THRESHOLD_DAYS
    urgent_days: int = EXPIRATION_URGENT_THRESHOLD_DAYS

    @classmethod
    def from_settings(cls, settings=None) -> "RetentionPolicy":
        settings = settings or get_settings()
        return cls(
            retention_days=settings.TRASH_RETENTION_DAYS,
            warning_days=settings.EXPIRATION_WARNING_DAYS,
            urgent_days=settings.EXPIRATION_URGENT_DAYS,
        )

    @property
    def retention_period(self) -> timedelta:
        return timedelta(days=self.retention_days)

    def expiration_of(self, deleted_at: datetime) -> datetime:
        """When an item deleted at deleted_at becomes eligible for purge."""
        return deleted_at + self.retention_period

    def expiration_threshold(self, now: datetime) -> datetime:
        """Items deleted before this instant have outlived the retention window."""
        return now - self.retention_period

    def days_remaining(self, deleted_at: datetime, now: datetime) -> int:
        """
        Whole days left before expiration, rounded up.

        Zero or negative once expired; stays negative until a sweep runs.
        """
        remaining = self.expiration_of(deleted_at) - now
        return math.ceil(remaining / ONE_DAY)

    def is_expired(self, deleted_at: datetime, now: datetime) -> bool:
        return self.days_remaining(deleted_at, now) <= 0

    def is_expiring_soon(self, deleted_at: datetime, now: datetime, threshold: int | None = None) -> bool:
        """True while the item is still recoverable but within threshold days of expiry."""
        if threshold is None:
            threshold = self.warning_days
        days = self.days_remaining(deleted_at, now)
        return 0 < days <= threshold

    def urgency(self, deleted_at: datetime, now: datetime) -> Urgency:
        days = self.days_remaining(deleted_at, now)
        if days <= self.urgent_days:
            return Urgency.URGENT
        if days <= self.warning_days:
            return Urgency.WARNING
        return Urgency.NORMAL

    def format_expiration_message(self, deleted_at: datetime, now: datetime) -> str:
        days = self.days_remaining(deleted_at, now)
        if days <= 0:
            return "Expiring soon"
        if days == 1:
            return "1 day left"
        return f"{days} days left"


DEFAULT_POLICY = RetentionPolicy()


def expiration_of(deleted_at: datetime) -> datetime:
    return DEFAULT_POLICY.expiration_of(deleted_at)


def days_remaining(deleted_at: datetime, now: datetime) -> int:
    return DEFAULT_POLICY.days_remaining(deleted_at, now)


def is_expired(deleted_at: datetime, now: datetime) -> bool:
    return DEFAULT_POLICY.is_expired(deleted_at, now)


def urgency(deleted_at: datetime, now: datetime) -> Urgency:
    return DEFAULT_POLICY.urgency(deleted_at, now)
