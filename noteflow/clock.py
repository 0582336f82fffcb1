# noteflow/clock.py
"""
Clock abstraction for every time-dependent trash decision.

Expiration, sweeping and audit timestamps all read "now" through a Clock so
tests can move time forward deterministically. Timestamps are naive UTC,
matching how the models store DateTime columns.
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in naive UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)


class FrozenClock:
    """
    Clock that only moves when told to.

    Usage:
        clock = FrozenClock(datetime(2025, 1, 1))
        clock.advance(days=31)
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or SystemClock().now()

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, **delta) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now


system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a FrozenClock."""
    return system_clock
