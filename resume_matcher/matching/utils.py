"""Utility functions for preparing match results for downstream consumers.

This module provides helpers for building notifier payloads and a loggable
rationale for a score.
"""

from typing import Dict

from resume_matcher.domain.models import AlertCadenceState, UserProfile
from resume_matcher.utils.timestamps import format_timestamp

from .models import MatchResult


def build_notification_payload(
    profile: UserProfile, alert: AlertCadenceState, match_result: MatchResult
) -> Dict:
    """Build a notification payload for a matched alert.

    Args:
        profile: Recipient of the notification
        alert: The alert that matched
        match_result: MatchResult from the matching engine

    Returns:
        Dict with keys:
        - recipient_email, recipient_name
        - alert_id, job_title, company, location, url
        - score: Overall score rounded to one decimal
        - matched_skills, missing_skills: Sorted lists
        - match_quality: "perfect", "partial" or "no-match"
        - evaluated_at: ISO formatted evaluation time
    """
    return {
        "recipient_email": profile.email,
        "recipient_name": profile.full_name or profile.email,
        "alert_id": alert.alert_id,
        "job_title": alert.job_title,
        "company": alert.company,
        "location": alert.location if alert.location else "Any",
        "url": alert.job_url,
        "score": round(match_result.score, 1),
        "matched_skills": sorted(match_result.matched_skills),
        "missing_skills": sorted(match_result.missing_skills),
        "match_quality": match_result.match_quality,
        "evaluated_at": format_timestamp(match_result.evaluated_at),
    }


def build_rationale_dict(match_result: MatchResult) -> Dict:
    """Build a lightweight rationale dict for a match result.

    Useful for logs: every factor score plus the skill counts behind the skill
    factor.
    """
    return {
        "matched": match_result.matched,
        "score": round(match_result.score, 2),
        "threshold": match_result.threshold,
        "skill_score": round(match_result.skill_score, 2),
        "salary_score": round(match_result.salary_score, 2),
        "experience_score": round(match_result.experience_score, 2),
        "location_score": round(match_result.location_score, 2),
        "skills_matched": len(match_result.matched_skills),
        "skills_required": len(match_result.matched_skills) + len(match_result.missing_skills),
        "missing_skills": sorted(match_result.missing_skills),
    }
