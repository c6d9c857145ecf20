"""Payload builders for digest notifications.

Individual match payloads are built by
``resume_matcher.matching.utils.build_notification_payload``; this module
batches several of them into one digest.
"""

from datetime import datetime
from typing import Any, Dict, List, Sequence, Tuple

from resume_matcher.domain.models import AlertCadenceState, NotificationPreferenceState, UserProfile
from resume_matcher.matching.models import MatchResult
from resume_matcher.utils.timestamps import format_timestamp


def build_digest_entry(alert: AlertCadenceState, match_result: MatchResult) -> Dict[str, Any]:
    """Summarize one matched alert for a digest."""
    return {
        "alert_id": alert.alert_id,
        "job_title": alert.job_title,
        "company": alert.company,
        "url": alert.job_url,
        "score": round(match_result.score, 1),
        "matched_skills": sorted(match_result.matched_skills),
        "missing_skills": sorted(match_result.missing_skills),
    }


def build_digest_payload(
    profile: UserProfile,
    pref: NotificationPreferenceState,
    matches: Sequence[Tuple[AlertCadenceState, MatchResult]],
    generated_at: datetime,
) -> Dict[str, Any]:
    """Build the digest payload for one user.

    Entries are ordered best score first, ties broken by alert id.

    Args:
        profile: Recipient
        pref: Recipient's preferences (for the cadence label)
        matches: (alert, result) pairs that matched
        generated_at: Time the digest was assembled

    Returns:
        Dict with keys:
        - user_id, recipient_email, recipient_name
        - digest_frequency: "DAILY", "WEEKLY" or "MONTHLY"
        - match_count: Number of entries
        - matches: List of entries from build_digest_entry
        - generated_at: ISO formatted time
    """
    entries: List[Dict[str, Any]] = [
        build_digest_entry(alert, result) for alert, result in matches
    ]
    entries.sort(key=lambda entry: (-entry["score"], entry["alert_id"]))

    return {
        "user_id": profile.user_id,
        "recipient_email": profile.email,
        "recipient_name": profile.full_name or profile.email,
        "digest_frequency": pref.digest_frequency.value,
        "match_count": len(entries),
        "matches": entries,
        "generated_at": format_timestamp(generated_at),
    }
