"""Notification eligibility decisions over a user's preferences.

Queries are pure reads. Mutators (opt in/out, digest stamp, updates) return a
new ``NotificationPreferenceState`` and take an injected ``now``.
"""

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from resume_matcher.alerts.cadence import interval_end
from resume_matcher.domain.models import AlertFrequency, NotificationPreferenceState
from resume_matcher.logging import get_logger
from resume_matcher.matching.models import MatchResult
from resume_matcher.utils.timestamps import ensure_utc

logger = get_logger(__name__, component="preferences")

# Fields callers may not change through update_preferences
_IMMUTABLE_FIELDS = {"user_id"}


def should_notify(pref: NotificationPreferenceState) -> bool:
    """Whether job alert emails may be sent to this user at all."""
    return pref.email_enabled and pref.job_alert_email_enabled and pref.opted_in


def should_digest(pref: NotificationPreferenceState) -> bool:
    """Whether this user receives digests at all."""
    return pref.email_enabled and pref.weekly_digest_enabled and pref.opted_in


def should_digest_now(pref: NotificationPreferenceState, now: datetime) -> bool:
    """Whether a digest is due at ``now`` according to the digest cadence."""
    if not should_digest(pref):
        return False
    if pref.last_digest_sent_at is None:
        return True
    return ensure_utc(now) > interval_end(pref.last_digest_sent_at, pref.digest_frequency)


def should_notify_match(pref: NotificationPreferenceState, result: MatchResult) -> bool:
    """Whether an individual email is warranted for this match result.

    Requires job alert emails to be allowed, match notifications enabled, a
    matched verdict, and a score at or above the user's own minimum.
    """
    return (
        should_notify(pref)
        and pref.match_notification_enabled
        and result.matched
        and result.score >= pref.min_match_threshold
    )


def is_preferred_digest_slot(pref: NotificationPreferenceState, now: datetime) -> bool:
    """Whether ``now`` falls in the user's preferred digest slot.

    ``now`` is converted to the user's timezone. Weekly digests also require
    the preferred weekday (1=Monday). The slot opens at the preferred local
    time and stays open for the rest of that day.
    """
    local = ensure_utc(now).astimezone(ZoneInfo(pref.timezone))

    if (
        pref.digest_frequency == AlertFrequency.WEEKLY
        and local.isoweekday() != pref.preferred_day_of_week
    ):
        return False
    return (local.hour, local.minute) >= (pref.preferred_hour, pref.preferred_minute)


def digest_period(pref: NotificationPreferenceState, moment: datetime) -> tuple:
    """Calendar period containing ``moment`` in the user's timezone.

    DAILY keys on the local date, WEEKLY on the ISO (year, week) and MONTHLY
    on the local (year, month).
    """
    local = ensure_utc(moment).astimezone(ZoneInfo(pref.timezone))
    if pref.digest_frequency == AlertFrequency.DAILY:
        return (local.year, local.month, local.day)
    if pref.digest_frequency == AlertFrequency.WEEKLY:
        iso = local.isocalendar()
        return (iso[0], iso[1])
    return (local.year, local.month)


def is_digest_due(pref: NotificationPreferenceState, now: datetime) -> bool:
    """Whether the scheduled digest should go out at ``now``.

    Due when ``now`` is inside the preferred slot and no digest has been sent
    yet in the current calendar period.
    """
    if not should_digest(pref) or not is_preferred_digest_slot(pref, now):
        return False
    if pref.last_digest_sent_at is None:
        return True
    return digest_period(pref, pref.last_digest_sent_at) < digest_period(pref, now)


def opt_out(pref: NotificationPreferenceState, now: datetime) -> NotificationPreferenceState:
    logger.info(
        f"User opted out of notifications: {pref.user_id}",
        extra={"event": "preferences.opted_out", "user_id": pref.user_id},
    )
    return pref.model_copy(update={"opted_in": False, "opted_out_at": ensure_utc(now)})


def opt_in(pref: NotificationPreferenceState, now: datetime) -> NotificationPreferenceState:
    logger.info(
        f"User opted in to notifications: {pref.user_id}",
        extra={"event": "preferences.opted_in", "user_id": pref.user_id},
    )
    return pref.model_copy(
        update={"opted_in": True, "opted_in_at": ensure_utc(now), "opted_out_at": None}
    )


def mark_digest_sent(
    pref: NotificationPreferenceState, now: datetime
) -> NotificationPreferenceState:
    """Record a digest send; the stamp never moves backwards."""
    now = ensure_utc(now)
    previous = pref.last_digest_sent_at
    stamp = now if previous is None or now > previous else previous
    return pref.model_copy(update={"last_digest_sent_at": stamp})


def update_preferences(
    pref: NotificationPreferenceState, **changes: Any
) -> NotificationPreferenceState:
    """Return a validated copy with ``changes`` applied.

    Raises:
        ValueError: On an unknown or immutable field, or a value that fails
            validation (pydantic's ValidationError is a ValueError)
    """
    unknown = set(changes) - set(NotificationPreferenceState.model_fields)
    if unknown:
        raise ValueError(f"Unknown preference fields: {sorted(unknown)}")

    frozen = set(changes) & _IMMUTABLE_FIELDS
    if frozen:
        raise ValueError(f"Preference fields cannot be changed: {sorted(frozen)}")

    return NotificationPreferenceState.model_validate({**pref.model_dump(), **changes})


def default_preferences(user_id: str, now: datetime) -> NotificationPreferenceState:
    """Preferences for a newly registered user: everything on, opted in."""
    return NotificationPreferenceState(user_id=user_id, opted_in=True, opted_in_at=ensure_utc(now))
