"""Unit tests for alert eligibility and cadence tracking."""

from datetime import datetime, timedelta, timezone

import pytest

from resume_matcher.alerts import (
    activate,
    deactivate,
    interval_end,
    mark_sent,
    next_due_at,
    should_process,
)
from resume_matcher.domain.models import AlertCadenceState, AlertFrequency


def make_alert(**overrides):
    fields = {
        "alert_id": "a1",
        "user_id": "u1",
        "job_title": "Backend Engineer",
        "frequency": AlertFrequency.DAILY,
    }
    fields.update(overrides)
    return AlertCadenceState(**fields)


T = datetime(2025, 3, 3, 8, 0, tzinfo=timezone.utc)


class TestIntervalEnd:
    """Tests for interval_end."""

    def test_daily(self):
        assert interval_end(T, AlertFrequency.DAILY) == T + timedelta(days=1)

    def test_weekly(self):
        assert interval_end(T, AlertFrequency.WEEKLY) == T + timedelta(days=7)

    def test_monthly_is_calendar_month(self):
        start = datetime(2025, 1, 31, 8, 0, tzinfo=timezone.utc)
        assert interval_end(start, AlertFrequency.MONTHLY) == datetime(
            2025, 2, 28, 8, 0, tzinfo=timezone.utc
        )

    def test_monthly_across_year_end(self):
        start = datetime(2024, 12, 15, tzinfo=timezone.utc)
        assert interval_end(start, "MONTHLY") == datetime(2025, 1, 15, tzinfo=timezone.utc)

    def test_naive_start_is_treated_as_utc(self):
        naive = datetime(2025, 3, 3, 8, 0)
        assert interval_end(naive, AlertFrequency.DAILY) == T + timedelta(days=1)


class TestShouldProcess:
    """Tests for should_process."""

    def test_never_sent_active_alert_is_due(self):
        assert should_process(make_alert(), T) is True

    def test_inactive_alert_is_never_due(self):
        assert should_process(make_alert(is_active=False), T) is False
        assert should_process(make_alert(is_active=False, last_sent_at=T), T + timedelta(days=90)) is False

    def test_daily_cadence(self):
        alert = mark_sent(make_alert(frequency=AlertFrequency.DAILY), T)

        assert should_process(alert, T) is False
        assert should_process(alert, T + timedelta(hours=23)) is False
        assert should_process(alert, T + timedelta(hours=25)) is True

    def test_interval_boundary_is_exclusive(self):
        alert = make_alert(last_sent_at=T)

        assert should_process(alert, T + timedelta(days=1)) is False
        assert should_process(alert, T + timedelta(days=1, seconds=1)) is True

    def test_weekly_scenario(self):
        now = T
        six_days = make_alert(frequency=AlertFrequency.WEEKLY, last_sent_at=now - timedelta(days=6))
        eight_days = make_alert(frequency=AlertFrequency.WEEKLY, last_sent_at=now - timedelta(days=8))

        assert should_process(six_days, now) is False
        assert should_process(eight_days, now) is True

    def test_monthly_cadence(self):
        alert = make_alert(frequency=AlertFrequency.MONTHLY, last_sent_at=datetime(2025, 1, 31, tzinfo=timezone.utc))

        assert should_process(alert, datetime(2025, 2, 27, tzinfo=timezone.utc)) is False
        assert should_process(alert, datetime(2025, 2, 28, 0, 1, tzinfo=timezone.utc)) is True


class TestMarkSent:
    """Tests for mark_sent and the other commands."""

    def test_sets_last_sent_and_returns_new_state(self):
        alert = make_alert()

        updated = mark_sent(alert, T)

        assert updated.last_sent_at == T
        assert alert.last_sent_at is None
        assert updated is not alert

    def test_successive_calls_advance_stamp(self):
        first = mark_sent(make_alert(), T)
        second = mark_sent(first, T + timedelta(minutes=1))

        assert second.last_sent_at == T + timedelta(minutes=1)

    def test_stamp_never_moves_backwards(self):
        alert = mark_sent(make_alert(), T)

        updated = mark_sent(alert, T - timedelta(hours=3))

        assert updated.last_sent_at == T

    def test_inactive_alert_is_still_marked(self, caplog):
        updated = mark_sent(make_alert(is_active=False), T)

        assert updated.last_sent_at == T
        assert any("inactive" in record.getMessage() for record in caplog.records)

    def test_naive_now_is_stored_as_utc(self):
        updated = mark_sent(make_alert(), datetime(2025, 3, 3, 8, 0))
        assert updated.last_sent_at == T

    def test_next_due_at(self):
        assert next_due_at(make_alert()) is None
        assert next_due_at(make_alert(frequency=AlertFrequency.WEEKLY, last_sent_at=T)) == T + timedelta(days=7)

    def test_activate_and_deactivate(self):
        alert = make_alert(last_sent_at=T)

        inactive = deactivate(alert)
        active = activate(inactive)

        assert inactive.is_active is False
        assert active.is_active is True
        assert active.last_sent_at == T
        assert alert.is_active is True

    def test_state_is_frozen(self):
        with pytest.raises(Exception):
            make_alert().last_sent_at = T
