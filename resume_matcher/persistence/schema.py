"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the state store and the
conversions between ORM rows and domain models.

Timestamps are stored as fixed-width ISO 8601 UTC strings
(``YYYY-MM-DDTHH:MM:SS.ffffffZ``), so string comparison in SQL orders them
chronologically.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from resume_matcher.domain.models import (
    AlertCadenceState,
    AlertFrequency,
    NotificationPreferenceState,
    UserProfile,
)
from resume_matcher.logging import get_logger
from resume_matcher.utils.timestamps import parse_iso_datetime

logger = get_logger(__name__, component="database")

Base = declarative_base()

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class UserModel(Base):
    """ORM model for users table."""

    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True, nullable=False)
    email = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False, default="")
    resume_text = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    expected_salary = Column(Float, nullable=True)
    experience_years = Column(Float, nullable=True)

    def to_domain(self) -> UserProfile:
        return UserProfile(
            user_id=self.user_id,
            email=self.email,
            full_name=self.full_name or "",
            resume_text=self.resume_text,
            location=self.location,
            expected_salary=self.expected_salary,
            experience_years=self.experience_years,
        )

    @classmethod
    def from_domain(cls, profile: UserProfile) -> "UserModel":
        return cls(
            user_id=profile.user_id,
            email=profile.email,
            full_name=profile.full_name,
            resume_text=profile.resume_text,
            location=profile.location,
            expected_salary=profile.expected_salary,
            experience_years=profile.experience_years,
        )


class AlertModel(Base):
    """ORM model for alerts table.

    One row per job alert subscription, including its cadence state.
    """

    __tablename__ = "alerts"

    alert_id = Column(String(64), primary_key=True, nullable=False)
    user_id = Column(String(64), ForeignKey("users.user_id"), nullable=False)

    # Opening details
    job_title = Column(Text, nullable=False)
    company = Column(String(255), nullable=False, default="")
    required_skills = Column(Text, nullable=False, default="")
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    location = Column(String(255), nullable=True)
    job_url = Column(Text, nullable=True)

    # Cadence
    frequency = Column(String(16), nullable=False, default=AlertFrequency.DAILY.value)
    last_sent_at = Column(String(50), nullable=True)
    last_evaluated_at = Column(String(50), nullable=True)
    last_digested_at = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    match_threshold = Column(Float, nullable=False, default=60.0)
    send_email_notification = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_alerts_user", "user_id"),
        Index("idx_alerts_active", "is_active"),
    )

    def to_domain(self) -> AlertCadenceState:
        return AlertCadenceState(
            alert_id=self.alert_id,
            user_id=self.user_id,
            job_title=self.job_title,
            company=self.company or "",
            required_skills=self.required_skills or "",
            salary_min=self.salary_min,
            salary_max=self.salary_max,
            location=self.location,
            job_url=self.job_url,
            frequency=AlertFrequency(self.frequency),
            last_sent_at=_parse_datetime(self.last_sent_at),
            last_evaluated_at=_parse_datetime(self.last_evaluated_at),
            last_digested_at=_parse_datetime(self.last_digested_at),
            is_active=bool(self.is_active),
            match_threshold=self.match_threshold,
            send_email_notification=bool(self.send_email_notification),
        )

    @classmethod
    def from_domain(cls, alert: AlertCadenceState) -> "AlertModel":
        return cls(
            alert_id=alert.alert_id,
            user_id=alert.user_id,
            job_title=alert.job_title,
            company=alert.company,
            required_skills=alert.required_skills,
            salary_min=alert.salary_min,
            salary_max=alert.salary_max,
            location=alert.location,
            job_url=alert.job_url,
            frequency=AlertFrequency(alert.frequency).value,
            last_sent_at=_format_datetime(alert.last_sent_at),
            last_evaluated_at=_format_datetime(alert.last_evaluated_at),
            last_digested_at=_format_datetime(alert.last_digested_at),
            is_active=alert.is_active,
            match_threshold=alert.match_threshold,
            send_email_notification=alert.send_email_notification,
        )


class PreferenceModel(Base):
    """ORM model for notification_preferences table (one row per user)."""

    __tablename__ = "notification_preferences"

    user_id = Column(String(64), ForeignKey("users.user_id"), primary_key=True, nullable=False)

    email_enabled = Column(Boolean, nullable=False, default=True)
    job_alert_email_enabled = Column(Boolean, nullable=False, default=True)
    match_notification_enabled = Column(Boolean, nullable=False, default=True)
    weekly_digest_enabled = Column(Boolean, nullable=False, default=True)
    min_match_threshold = Column(Float, nullable=False, default=60.0)
    digest_frequency = Column(String(16), nullable=False, default=AlertFrequency.WEEKLY.value)

    opted_in = Column(Boolean, nullable=False, default=True)
    opted_in_at = Column(String(50), nullable=True)
    opted_out_at = Column(String(50), nullable=True)
    last_digest_sent_at = Column(String(50), nullable=True)

    preferred_hour = Column(Integer, nullable=False, default=9)
    preferred_minute = Column(Integer, nullable=False, default=0)
    preferred_day_of_week = Column(Integer, nullable=False, default=1)
    timezone = Column(String(64), nullable=False, default="UTC")

    def to_domain(self) -> NotificationPreferenceState:
        return NotificationPreferenceState(
            user_id=self.user_id,
            email_enabled=bool(self.email_enabled),
            job_alert_email_enabled=bool(self.job_alert_email_enabled),
            match_notification_enabled=bool(self.match_notification_enabled),
            weekly_digest_enabled=bool(self.weekly_digest_enabled),
            min_match_threshold=self.min_match_threshold,
            digest_frequency=AlertFrequency(self.digest_frequency),
            opted_in=bool(self.opted_in),
            opted_in_at=_parse_datetime(self.opted_in_at),
            opted_out_at=_parse_datetime(self.opted_out_at),
            last_digest_sent_at=_parse_datetime(self.last_digest_sent_at),
            preferred_hour=self.preferred_hour,
            preferred_minute=self.preferred_minute,
            preferred_day_of_week=self.preferred_day_of_week,
            timezone=self.timezone,
        )

    def apply(self, pref: NotificationPreferenceState) -> None:
        """Copy every preference field from the domain model onto this row."""
        self.email_enabled = pref.email_enabled
        self.job_alert_email_enabled = pref.job_alert_email_enabled
        self.match_notification_enabled = pref.match_notification_enabled
        self.weekly_digest_enabled = pref.weekly_digest_enabled
        self.min_match_threshold = pref.min_match_threshold
        self.digest_frequency = AlertFrequency(pref.digest_frequency).value
        self.opted_in = pref.opted_in
        self.opted_in_at = _format_datetime(pref.opted_in_at)
        self.opted_out_at = _format_datetime(pref.opted_out_at)
        self.last_digest_sent_at = _format_datetime(pref.last_digest_sent_at)
        self.preferred_hour = pref.preferred_hour
        self.preferred_minute = pref.preferred_minute
        self.preferred_day_of_week = pref.preferred_day_of_week
        self.timezone = pref.timezone

    @classmethod
    def from_domain(cls, pref: NotificationPreferenceState) -> "PreferenceModel":
        row = cls(user_id=pref.user_id)
        row.apply(pref)
        return row


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as a fixed-width ISO 8601 UTC string, or None."""
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime(TIMESTAMP_FORMAT)


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO 8601 string back into an aware UTC datetime."""
    if not dt_str:
        return None

    parsed = parse_iso_datetime(dt_str)
    if parsed is None:
        raise ValueError(f"Unreadable stored timestamp: {dt_str!r}")
    return parsed


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
