"""Alert cadence tracking: when an alert is due and recording sends.

All functions take an injected ``now`` and never mutate their input; the
command functions return a new ``AlertCadenceState``.
"""

from datetime import datetime, timedelta
from typing import Optional

from resume_matcher.domain.models import AlertCadenceState, AlertFrequency
from resume_matcher.logging import get_logger
from resume_matcher.utils.timestamps import add_months, ensure_utc

logger = get_logger(__name__, component="alerts")


def interval_end(last_sent_at: datetime, frequency: AlertFrequency) -> datetime:
    """Return the end of the quiet interval that starts at ``last_sent_at``.

    DAILY adds one day, WEEKLY seven days, MONTHLY one calendar month with the
    day clamped to the end of the target month.
    """
    start = ensure_utc(last_sent_at)
    frequency = AlertFrequency(frequency)

    if frequency == AlertFrequency.DAILY:
        return start + timedelta(days=1)
    if frequency == AlertFrequency.WEEKLY:
        return start + timedelta(days=7)
    return add_months(start, 1)


def should_process(alert: AlertCadenceState, now: datetime) -> bool:
    """Whether an alert is due for processing at ``now``.

    Inactive alerts are never due. An active alert that has never been sent is
    always due; otherwise it becomes due once ``now`` is past the end of its
    interval.
    """
    if not alert.is_active:
        return False
    if alert.last_sent_at is None:
        return True
    return ensure_utc(now) > interval_end(alert.last_sent_at, alert.frequency)


def next_due_at(alert: AlertCadenceState) -> Optional[datetime]:
    """When the alert next becomes due, or None if it has never been sent."""
    if alert.last_sent_at is None:
        return None
    return interval_end(alert.last_sent_at, alert.frequency)


def mark_sent(alert: AlertCadenceState, now: datetime) -> AlertCadenceState:
    """Record a successful send.

    The new stamp is ``max(previous, now)`` so an out-of-order call can never
    move ``last_sent_at`` backwards. Marking an inactive alert is allowed but
    logged.

    Args:
        alert: Current state
        now: Time of the send

    Returns:
        New AlertCadenceState with ``last_sent_at`` advanced
    """
    now = ensure_utc(now)

    if not alert.is_active:
        logger.warning(
            f"Marking inactive alert as sent: {alert.alert_id}",
            extra={"event": "alerts.mark_sent.inactive", "alert_id": alert.alert_id},
        )

    previous = alert.last_sent_at
    stamp = now if previous is None or now > previous else previous
    return alert.model_copy(update={"last_sent_at": stamp})


def activate(alert: AlertCadenceState) -> AlertCadenceState:
    return alert.model_copy(update={"is_active": True})


def deactivate(alert: AlertCadenceState) -> AlertCadenceState:
    return alert.model_copy(update={"is_active": False})
