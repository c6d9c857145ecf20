"""Tests for notifiers and notification payloads."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from resume_matcher.config.models import DispatchConfig
from resume_matcher.domain.models import (
    AlertCadenceState,
    AlertFrequency,
    NotificationPreferenceState,
    UserProfile,
)
from resume_matcher.matching import MatchResult
from resume_matcher.matching.utils import build_notification_payload, build_rationale_dict
from resume_matcher.notifications import (
    LoggingNotifier,
    Notifier,
    NotifierError,
    build_digest_entry,
    build_digest_payload,
    get_notifier,
)

EVALUATED_AT = datetime(2025, 3, 3, 10, 0, tzinfo=timezone.utc)


class RecordingNotifier(Notifier):
    """Importable notifier used by the factory tests."""

    def send_match(self, payload):
        return True

    def send_digest(self, payload):
        return True


class NotANotifier:
    pass


class BrokenNotifier(RecordingNotifier):
    def __init__(self):
        raise RuntimeError("no credentials")


@pytest.fixture
def profile():
    return UserProfile(user_id="u1", email="ada@example.com", full_name="Ada Lovelace")


def make_alert(alert_id="a1", **overrides):
    data = {
        "alert_id": alert_id,
        "user_id": "u1",
        "job_title": "Backend Engineer",
        "company": "Acme",
        "required_skills": "Python, Django",
        "job_url": f"https://jobs.example.com/{alert_id}",
    }
    data.update(overrides)
    return AlertCadenceState(**data)


def make_result(score=82.456, matched_skills=("python",), missing_skills=("django",)):
    return MatchResult(
        score=score,
        skill_score=50.0,
        salary_score=75.0,
        experience_score=100.0,
        location_score=80.0,
        matched_skills=frozenset(matched_skills),
        missing_skills=frozenset(missing_skills),
        matched=True,
        threshold=60.0,
        evaluated_at=EVALUATED_AT,
    )


class TestMatchPayload:
    """Tests for the individual match payload."""

    def test_fields(self, profile):
        payload = build_notification_payload(
            profile, make_alert(), make_result(matched_skills=("python", "docker"))
        )

        assert payload["recipient_email"] == "ada@example.com"
        assert payload["recipient_name"] == "Ada Lovelace"
        assert payload["alert_id"] == "a1"
        assert payload["company"] == "Acme"
        assert payload["location"] == "Any"
        assert payload["url"] == "https://jobs.example.com/a1"
        assert payload["score"] == 82.5
        assert payload["matched_skills"] == ["docker", "python"]
        assert payload["missing_skills"] == ["django"]
        assert payload["match_quality"] == "partial"
        assert payload["evaluated_at"] == "2025-03-03T10:00:00Z"

    def test_name_falls_back_to_email(self):
        profile = UserProfile(user_id="u1", email="ada@example.com")
        payload = build_notification_payload(profile, make_alert(location="Berlin"), make_result())

        assert payload["recipient_name"] == "ada@example.com"
        assert payload["location"] == "Berlin"

    def test_rationale(self):
        rationale = build_rationale_dict(make_result())

        assert rationale["score"] == 82.46
        assert rationale["skills_matched"] == 1
        assert rationale["skills_required"] == 2
        assert rationale["missing_skills"] == ["django"]


class TestDigestPayload:
    """Tests for digest payloads."""

    def test_entry(self):
        entry = build_digest_entry(make_alert(), make_result())

        assert entry == {
            "alert_id": "a1",
            "job_title": "Backend Engineer",
            "company": "Acme",
            "url": "https://jobs.example.com/a1",
            "score": 82.5,
            "matched_skills": ["python"],
            "missing_skills": ["django"],
        }

    def test_entries_sorted_by_score_then_id(self, profile):
        pref = NotificationPreferenceState(user_id="u1", digest_frequency=AlertFrequency.DAILY)
        matches = [
            (make_alert("b"), make_result(score=70.0)),
            (make_alert("c"), make_result(score=90.0)),
            (make_alert("a"), make_result(score=70.0)),
        ]

        payload = build_digest_payload(profile, pref, matches, EVALUATED_AT)

        assert [m["alert_id"] for m in payload["matches"]] == ["c", "a", "b"]
        assert payload["match_count"] == 3
        assert payload["digest_frequency"] == "DAILY"
        assert payload["user_id"] == "u1"
        assert payload["recipient_email"] == "ada@example.com"
        assert payload["generated_at"] == "2025-03-03T10:00:00Z"


class TestLoggingNotifier:
    """Tests for the dry-run notifier."""

    def test_send_match_logs_and_records(self, caplog):
        notifier = LoggingNotifier()
        payload = {"alert_id": "a1", "recipient_email": "ada@example.com", "score": 82.5}

        with caplog.at_level("INFO", logger="resume_matcher.notifications"):
            assert notifier.send_match(payload) is True

        assert notifier.sent_matches == [payload]
        assert any(
            getattr(r, "event", None) == "notification.match.logged" for r in caplog.records
        )

    def test_send_digest_records(self):
        notifier = LoggingNotifier()
        assert notifier.send_digest({"user_id": "u1", "match_count": 2}) is True
        assert notifier.sent_digests == [{"user_id": "u1", "match_count": 2}]

    def test_custom_logger(self):
        custom = Mock()
        LoggingNotifier(logger_instance=custom).send_match({"alert_id": "a1"})
        custom.info.assert_called_once()


class TestGetNotifier:
    """Tests for the notifier factory."""

    def test_dry_run_uses_logging_notifier(self):
        notifier = get_notifier(DispatchConfig(dry_run=True, notifier=f"{__name__}:RecordingNotifier"))
        assert isinstance(notifier, LoggingNotifier)

    def test_live_run_imports_class(self):
        notifier = get_notifier(
            DispatchConfig(dry_run=False, notifier=f"{__name__}:RecordingNotifier")
        )
        assert isinstance(notifier, RecordingNotifier)

    def test_live_run_requires_notifier(self):
        with pytest.raises(NotifierError, match="not set"):
            get_notifier(DispatchConfig(dry_run=False))

    @pytest.mark.parametrize("target", ["no_colon_here", ":Missing", "module:"])
    def test_malformed_path(self, target):
        with pytest.raises(NotifierError, match="Invalid notifier path"):
            get_notifier(DispatchConfig(dry_run=False, notifier=target))

    @pytest.mark.parametrize(
        "target", ["resume_matcher.nonexistent:Notifier", f"{__name__}:Missing"]
    )
    def test_unloadable(self, target):
        with pytest.raises(NotifierError, match="Cannot load notifier"):
            get_notifier(DispatchConfig(dry_run=False, notifier=target))

    def test_not_a_notifier(self):
        with pytest.raises(NotifierError, match="not a Notifier subclass"):
            get_notifier(DispatchConfig(dry_run=False, notifier=f"{__name__}:NotANotifier"))

    def test_constructor_failure(self):
        with pytest.raises(NotifierError, match="no credentials"):
            get_notifier(DispatchConfig(dry_run=False, notifier=f"{__name__}:BrokenNotifier"))
