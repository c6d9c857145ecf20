"""Core domain models for users, alerts, and notification preferences.

This module defines the state records the dispatch cycle reads and writes:
- UserProfile: resume text and candidate signals supplied by ingestion
- AlertCadenceState: a job-opening subscription and when it last notified
- NotificationPreferenceState: a user's email toggles, threshold and digest slot

All state models are frozen. Cadence and preference changes go through the
command functions in ``resume_matcher.alerts`` and
``resume_matcher.preferences``, which return new instances.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from resume_matcher.utils.timestamps import ensure_utc


class AlertFrequency(str, Enum):
    """How often an alert may re-notify."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


# Digests share the alert cadence values
DigestFrequency = AlertFrequency


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    stripped = v.strip()
    return stripped if stripped else None


class UserProfile(BaseModel):
    """Candidate data used to score alerts for one user."""

    user_id: str = Field(..., description="Stable user identifier")
    email: str = Field(..., description="Notification recipient address")
    full_name: str = Field("", description="Display name used in notifications")
    resume_text: Optional[str] = Field(None, description="Plain text of the current resume")
    location: Optional[str] = Field(None, description="Candidate location")
    expected_salary: Optional[float] = Field(None, ge=0, description="Candidate salary signal")
    experience_years: Optional[float] = Field(
        None, ge=0, description="Years of experience; parsed from the resume when unset"
    )

    @field_validator("user_id", "email")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from identifier fields."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("location")
    @classmethod
    def strip_location(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)

    model_config = {"frozen": True}


class AlertCadenceState(BaseModel):
    """A job alert subscription and its notification cadence.

    The cadence fields (``frequency``, ``last_sent_at``, ``is_active``) drive
    eligibility; the descriptive fields feed scoring and the notifier.
    """

    alert_id: str = Field(..., description="Stable alert identifier")
    user_id: str = Field(..., description="Owner of the alert")
    job_title: str = Field(..., description="Job title of the opening")
    company: str = Field("", description="Hiring company")
    required_skills: str = Field("", description="Free-text required skills of the opening")
    salary_min: Optional[float] = Field(None, ge=0, description="Lower salary bound")
    salary_max: Optional[float] = Field(None, ge=0, description="Upper salary bound")
    location: Optional[str] = Field(None, description="Required job location")
    job_url: Optional[str] = Field(None, description="Link to the opening")
    frequency: AlertFrequency = Field(AlertFrequency.DAILY, description="Re-notify cadence")
    last_sent_at: Optional[datetime] = Field(None, description="When this alert last notified (UTC)")
    last_evaluated_at: Optional[datetime] = Field(
        None, description="When a dispatch cycle last picked this alert up (UTC)"
    )
    last_digested_at: Optional[datetime] = Field(
        None, description="When this alert was last reported in a digest (UTC)"
    )
    is_active: bool = Field(True, description="Inactive alerts are never due")
    match_threshold: float = Field(60.0, ge=0, le=100, description="Minimum score to notify")
    send_email_notification: bool = Field(True, description="Per-alert email toggle")

    @field_validator("alert_id", "user_id", "job_title")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from required string fields."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("location")
    @classmethod
    def strip_location(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)

    @field_validator("last_sent_at", "last_evaluated_at", "last_digested_at")
    @classmethod
    def normalize_stamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure stamps are timezone-aware UTC."""
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_salary_range(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError(
                f"salary_min ({self.salary_min}) cannot exceed salary_max ({self.salary_max})"
            )
        return self

    model_config = {"frozen": True}


class NotificationPreferenceState(BaseModel):
    """Per-user email preferences and digest scheduling state."""

    user_id: str = Field(..., description="Owner of these preferences")
    email_enabled: bool = Field(True, description="Master email toggle")
    job_alert_email_enabled: bool = Field(True, description="Job alert emails")
    match_notification_enabled: bool = Field(True, description="Individual match emails")
    weekly_digest_enabled: bool = Field(True, description="Periodic digest emails")
    min_match_threshold: float = Field(
        60.0, ge=0, le=100, description="Lowest score worth an individual email"
    )
    digest_frequency: DigestFrequency = Field(AlertFrequency.WEEKLY, description="Digest cadence")
    opted_in: bool = Field(True, description="Whether the user accepts email at all")
    opted_in_at: Optional[datetime] = Field(None, description="Last opt-in time (UTC)")
    opted_out_at: Optional[datetime] = Field(None, description="Last opt-out time (UTC)")
    last_digest_sent_at: Optional[datetime] = Field(None, description="Last digest time (UTC)")
    preferred_hour: int = Field(9, ge=0, le=23, description="Local hour for digests")
    preferred_minute: int = Field(0, ge=0, le=59, description="Local minute for digests")
    preferred_day_of_week: int = Field(
        1, ge=1, le=7, description="Weekday for weekly digests (1=Monday, 7=Sunday)"
    )
    timezone: str = Field("UTC", description="IANA timezone name")

    @field_validator("user_id")
    @classmethod
    def strip_user_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("opted_in_at", "opted_out_at", "last_digest_sent_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject names the tz database does not know."""
        name = (v or "").strip()
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v!r}") from e
        return name

    model_config = {"frozen": True}
