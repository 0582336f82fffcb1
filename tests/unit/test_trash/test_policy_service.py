# tests/unit/test_trash/test_policy_service.py
"""Unit tests for trash retention policy arithmetic."""

from datetime import datetime, timedelta

import pytest

from noteflow.services.trash.policy_service import (
    DEFAULT_POLICY,
    RetentionPolicy,
    Urgency,
    days_remaining,
    expiration_of,
    is_expired,
    urgency,
)

DELETED_AT = datetime(2025, 3, 1, 9, 30, 0)


class TestExpiration:
    """Tests for expiration_of() and days_remaining()."""

    def test_expires_thirty_days_after_deletion(self):
        assert expiration_of(DELETED_AT) == DELETED_AT + timedelta(days=30)

    def test_full_window_right_after_deletion(self):
        assert days_remaining(DELETED_AT, DELETED_AT) == 30

    def test_partial_day_rounds_up(self):
        """One second into the window still shows 30 days left."""
        assert days_remaining(DELETED_AT, DELETED_AT + timedelta(seconds=1)) == 30
        assert days_remaining(DELETED_AT, DELETED_AT + timedelta(days=29, hours=23)) == 1

    def test_zero_exactly_at_expiration(self):
        assert days_remaining(DELETED_AT, DELETED_AT + timedelta(days=30)) == 0
        assert is_expired(DELETED_AT, DELETED_AT + timedelta(days=30))

    def test_negative_when_sweep_is_late(self):
        """A delayed sweep leaves negative days remaining; no error."""
        assert days_remaining(DELETED_AT, DELETED_AT + timedelta(days=33)) == -3
        assert is_expired(DELETED_AT, DELETED_AT + timedelta(days=33))

    def test_not_expired_inside_window(self):
        assert not is_expired(DELETED_AT, DELETED_AT + timedelta(days=29, hours=23, minutes=59))

    def test_days_remaining_never_increases_as_time_passes(self):
        previous = None
        for hours in range(0, 24 * 35, 7):
            current = days_remaining(DELETED_AT, DELETED_AT + timedelta(hours=hours))
            if previous is not None:
                assert current <= previous
            previous = current

    def test_expiration_threshold(self):
        now = datetime(2025, 4, 1)
        assert DEFAULT_POLICY.expiration_threshold(now) == now - timedelta(days=30)


class TestUrgency:
    """Tests for urgency()."""

    @pytest.mark.parametrize(
        "elapsed_days,expected",
        [
            (0, Urgency.NORMAL),
            (22, Urgency.NORMAL),
            (23, Urgency.WARNING),  # 7 left
            (26, Urgency.WARNING),  # 4 left
            (27, Urgency.URGENT),  # 3 left
            (30, Urgency.URGENT),
            (45, Urgency.URGENT),
        ],
    )
    def test_thresholds(self, elapsed_days, expected):
        assert urgency(DELETED_AT, DELETED_AT + timedelta(days=elapsed_days)) == expected

    def test_custom_thresholds(self):
        policy = RetentionPolicy(retention_days=10, warning_days=5, urgent_days=1)
        assert policy.urgency(DELETED_AT, DELETED_AT + timedelta(days=4)) == Urgency.NORMAL
        assert policy.urgency(DELETED_AT, DELETED_AT + timedelta(days=5)) == Urgency.WARNING
        assert policy.urgency(DELETED_AT, DELETED_AT + timedelta(days=9)) == Urgency.URGENT

    def test_serializes_as_plain_string(self):
        assert Urgency.WARNING == "warning"


class TestExpiringSoon:
    """Tests for is_expiring_soon() and format_expiration_message()."""

    def test_within_warning_window(self):
        assert DEFAULT_POLICY.is_expiring_soon(DELETED_AT, DELETED_AT + timedelta(days=25))

    def test_outside_warning_window(self):
        assert not DEFAULT_POLICY.is_expiring_soon(DELETED_AT, DELETED_AT + timedelta(days=10))

    def test_expired_items_are_not_expiring_soon(self):
        assert not DEFAULT_POLICY.is_expiring_soon(DELETED_AT, DELETED_AT + timedelta(days=31))

    def test_custom_threshold(self):
        now = DELETED_AT + timedelta(days=25)  # 5 left
        assert not DEFAULT_POLICY.is_expiring_soon(DELETED_AT, now, threshold=3)
        assert DEFAULT_POLICY.is_expiring_soon(DELETED_AT, now, threshold=5)

    def test_messages(self):
        assert DEFAULT_POLICY.format_expiration_message(DELETED_AT, DELETED_AT) == "30 days left"
        assert DEFAULT_POLICY.format_expiration_message(DELETED_AT, DELETED_AT + timedelta(days=29)) == "1 day left"
        assert DEFAULT_POLICY.format_expiration_message(DELETED_AT, DELETED_AT + timedelta(days=30)) == "Expiring soon"


class TestFromSettings:
    """Tests for RetentionPolicy.from_settings()."""

    def test_reads_settings(self):
        from noteflow.config import Settings

        settings = Settings(
            DATABASE_URL="sqlite:///:memory:",
            TRASH_RETENTION_DAYS=14,
            EXPIRATION_WARNING_DAYS=4,
            EXPIRATION_URGENT_DAYS=2,
        )
        policy = RetentionPolicy.from_settings(settings)

        assert policy == RetentionPolicy(retention_days=14, warning_days=4, urgent_days=2)

    def test_defaults_match_module_constants(self):
        policy = RetentionPolicy.from_settings()
        assert policy == DEFAULT_POLICY
