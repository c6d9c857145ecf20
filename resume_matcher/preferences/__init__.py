"""Notification preference eligibility and updates."""

from .eligibility import (
    default_preferences,
    digest_period,
    is_digest_due,
    is_preferred_digest_slot,
    mark_digest_sent,
    opt_in,
    opt_out,
    should_digest,
    should_digest_now,
    should_notify,
    should_notify_match,
    update_preferences,
)

__all__ = [
    "should_notify",
    "should_digest",
    "should_digest_now",
    "should_notify_match",
    "is_preferred_digest_slot",
    "digest_period",
    "is_digest_due",
    "opt_in",
    "opt_out",
    "mark_digest_sent",
    "update_preferences",
    "default_preferences",
]
