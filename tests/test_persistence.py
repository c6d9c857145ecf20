"""Unit tests for persistence layer."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect, text

from resume_matcher.domain.models import (
    AlertCadenceState,
    AlertFrequency,
    NotificationPreferenceState,
    UserProfile,
)
from resume_matcher.persistence import (
    AlertRepository,
    DatabaseConnectionError,
    DataIntegrityError,
    PreferenceRepository,
    RecordNotFoundError,
    UserRepository,
    close_database,
    get_engine,
    get_session,
    init_database,
)
from resume_matcher.persistence.schema import _format_datetime, _parse_datetime

T0 = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def make_user(user_id="u1", **overrides):
    data = {"user_id": user_id, "email": f"{user_id}@example.com", "resume_text": "Python"}
    data.update(overrides)
    return UserProfile(**data)


def make_alert(alert_id="a1", user_id="u1", **overrides):
    data = {
        "alert_id": alert_id,
        "user_id": user_id,
        "job_title": "Backend Engineer",
        "required_skills": "Python, Django",
    }
    data.update(overrides)
    return AlertCadenceState(**data)


@pytest.fixture
def seeded(database):
    with get_session() as session:
        UserRepository(session).upsert(make_user("u1"))
        UserRepository(session).upsert(make_user("u2"))


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_init_database_creates_file_and_parents(self, tmp_path):
        db_file = tmp_path / "nested" / "dir" / "state.db"

        init_database(f"sqlite:///{db_file}")
        try:
            assert db_file.exists()
            with get_session() as session:
                assert session.execute(text("SELECT 1")).scalar() == 1
        finally:
            close_database()

    def test_init_database_in_memory(self):
        init_database("sqlite:///:memory:")
        try:
            with get_session() as session:
                assert session is not None
        finally:
            close_database()

    def test_init_database_empty_url(self):
        with pytest.raises(DatabaseConnectionError):
            init_database("")

    def test_get_session_before_init(self):
        close_database()
        with pytest.raises(DatabaseConnectionError, match="not initialized"):
            with get_session():
                pass

    def test_tables_created(self, database):
        names = set(inspect(get_engine()).get_table_names())
        assert {"users", "alerts", "notification_preferences"} <= names

    def test_session_rolls_back_on_error(self, seeded):
        with pytest.raises(RuntimeError):
            with get_session() as session:
                UserRepository(session).upsert(make_user("u3"))
                raise RuntimeError("boom")

        with get_session() as session:
            assert UserRepository(session).get("u3") is None


class TestTimestampColumns:
    """Tests for the fixed-width timestamp encoding."""

    def test_round_trip(self):
        dt = datetime(2025, 3, 1, 8, 0, 5, 123456, tzinfo=timezone.utc)
        assert _parse_datetime(_format_datetime(dt)) == dt

    def test_naive_is_treated_as_utc(self):
        assert _format_datetime(datetime(2025, 3, 1, 8, 0)) == "2025-03-01T08:00:00.000000Z"

    def test_offset_is_converted(self):
        dt = datetime(2025, 3, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert _format_datetime(dt) == "2025-03-01T08:00:00.000000Z"

    def test_string_order_is_chronological(self):
        earlier = _format_datetime(datetime(2025, 3, 1, 8, 0, 0, 999999, tzinfo=timezone.utc))
        later = _format_datetime(datetime(2025, 3, 1, 8, 0, 1, tzinfo=timezone.utc))
        assert earlier < later

    def test_empty_values(self):
        assert _format_datetime(None) is None
        assert _parse_datetime(None) is None
        assert _parse_datetime("") is None


class TestUserRepository:
    """Tests for UserRepository."""

    def test_get_missing(self, database):
        with get_session() as session:
            assert UserRepository(session).get("nobody") is None

    def test_upsert_replaces(self, seeded):
        with get_session() as session:
            UserRepository(session).upsert(make_user("u1", resume_text="Go and Rust"))

        with get_session() as session:
            profile = UserRepository(session).get("u1")

        assert profile.resume_text == "Go and Rust"
        assert profile.email == "u1@example.com"


class TestAlertRepository:
    """Tests for AlertRepository."""

    def test_add_and_get(self, seeded):
        alert = make_alert(frequency=AlertFrequency.WEEKLY, salary_min=50000, salary_max=70000)

        with get_session() as session:
            AlertRepository(session).add(alert)

        with get_session() as session:
            stored = AlertRepository(session).get("a1")

        assert stored == alert

    def test_add_duplicate(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert())

        with pytest.raises(DataIntegrityError):
            with get_session() as session:
                AlertRepository(session).add(make_alert())

    def test_add_for_unknown_user(self, seeded):
        with pytest.raises(DataIntegrityError):
            with get_session() as session:
                AlertRepository(session).add(make_alert(user_id="ghost"))

    def test_get_active_order_and_filter(self, seeded):
        with get_session() as session:
            repo = AlertRepository(session)
            repo.add(make_alert("a-recent", last_evaluated_at=T0))
            repo.add(make_alert("a-old", last_evaluated_at=T0 - timedelta(days=3)))
            repo.add(make_alert("a-never"))
            repo.add(make_alert("a-off", is_active=False))

        with get_session() as session:
            active = AlertRepository(session).get_active()

        assert [a.alert_id for a in active] == ["a-never", "a-old", "a-recent"]

    def test_get_active_limit(self, seeded):
        with get_session() as session:
            repo = AlertRepository(session)
            for i in range(3):
                repo.add(make_alert(f"a{i}"))

        with get_session() as session:
            assert len(AlertRepository(session).get_active(limit=2)) == 2

    def test_get_for_user(self, seeded):
        with get_session() as session:
            repo = AlertRepository(session)
            repo.add(make_alert("a1", "u1"))
            repo.add(make_alert("a2", "u2"))
            repo.add(make_alert("a3", "u1", is_active=False))

        with get_session() as session:
            alerts = AlertRepository(session).get_for_user("u1")

        assert [a.alert_id for a in alerts] == ["a1", "a3"]

    def test_mark_sent_first_time(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert())

        with get_session() as session:
            assert AlertRepository(session).mark_sent("a1", T0) is True

        with get_session() as session:
            assert AlertRepository(session).get("a1").last_sent_at == T0

    def test_mark_sent_never_moves_backwards(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert(last_sent_at=T0))

        with get_session() as session:
            assert AlertRepository(session).mark_sent("a1", T0 - timedelta(hours=1)) is False

        with get_session() as session:
            assert AlertRepository(session).get("a1").last_sent_at == T0

    def test_mark_sent_same_time_is_accepted(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert(last_sent_at=T0))

        with get_session() as session:
            assert AlertRepository(session).mark_sent("a1", T0) is True

    def test_mark_sent_advances(self, seeded):
        later = T0 + timedelta(days=1)
        with get_session() as session:
            AlertRepository(session).add(make_alert(last_sent_at=T0))

        with get_session() as session:
            AlertRepository(session).mark_sent("a1", later)

        with get_session() as session:
            assert AlertRepository(session).get("a1").last_sent_at == later

    def test_mark_sent_unknown_alert(self, database):
        with pytest.raises(RecordNotFoundError):
            with get_session() as session:
                AlertRepository(session).mark_sent("missing", T0)

    def test_mark_evaluated_stamps_listed_alerts(self, seeded):
        with get_session() as session:
            repo = AlertRepository(session)
            for alert_id in ("a1", "a2", "a3"):
                repo.add(make_alert(alert_id))

        with get_session() as session:
            assert AlertRepository(session).mark_evaluated(["a1", "a3", "missing"], T0) == 2

        with get_session() as session:
            repo = AlertRepository(session)
            assert repo.get("a1").last_evaluated_at == T0
            assert repo.get("a2").last_evaluated_at is None
            assert repo.get("a3").last_evaluated_at == T0

    def test_mark_evaluated_never_moves_backwards(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert(last_evaluated_at=T0))

        with get_session() as session:
            assert AlertRepository(session).mark_evaluated(["a1"], T0 - timedelta(hours=1)) == 0

        with get_session() as session:
            assert AlertRepository(session).get("a1").last_evaluated_at == T0

    def test_mark_evaluated_empty_list(self, database):
        with get_session() as session:
            assert AlertRepository(session).mark_evaluated([], T0) == 0

    def test_mark_digested(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert())

        with get_session() as session:
            assert AlertRepository(session).mark_digested(["a1"], T0) == 1

        with get_session() as session:
            stored = AlertRepository(session).get("a1")

        assert stored.last_digested_at == T0
        assert stored.last_sent_at is None

    def test_set_active(self, seeded):
        with get_session() as session:
            AlertRepository(session).add(make_alert())

        with get_session() as session:
            AlertRepository(session).set_active("a1", False)

        with get_session() as session:
            assert AlertRepository(session).get("a1").is_active is False
            assert AlertRepository(session).get_active() == []

    def test_set_active_unknown_alert(self, database):
        with pytest.raises(RecordNotFoundError):
            with get_session() as session:
                AlertRepository(session).set_active("missing", True)


class TestPreferenceRepository:
    """Tests for PreferenceRepository."""

    def test_save_and_get(self, seeded):
        pref = NotificationPreferenceState(
            user_id="u1",
            min_match_threshold=75,
            digest_frequency=AlertFrequency.DAILY,
            opted_in_at=T0,
            timezone="Europe/Helsinki",
            preferred_hour=7,
        )

        with get_session() as session:
            PreferenceRepository(session).save(pref)

        with get_session() as session:
            assert PreferenceRepository(session).get("u1") == pref

    def test_save_replaces(self, seeded):
        with get_session() as session:
            PreferenceRepository(session).save(NotificationPreferenceState(user_id="u1"))

        with get_session() as session:
            PreferenceRepository(session).save(
                NotificationPreferenceState(user_id="u1", email_enabled=False)
            )

        with get_session() as session:
            assert PreferenceRepository(session).get("u1").email_enabled is False

    def test_save_for_unknown_user(self, seeded):
        with pytest.raises(DataIntegrityError):
            with get_session() as session:
                PreferenceRepository(session).save(NotificationPreferenceState(user_id="ghost"))

    def test_get_all_ordered(self, seeded):
        with get_session() as session:
            repo = PreferenceRepository(session)
            repo.save(NotificationPreferenceState(user_id="u2"))
            repo.save(NotificationPreferenceState(user_id="u1"))

        with get_session() as session:
            assert [p.user_id for p in PreferenceRepository(session).get_all()] == ["u1", "u2"]

    def test_mark_digest_sent_is_monotonic(self, seeded):
        with get_session() as session:
            PreferenceRepository(session).save(
                NotificationPreferenceState(user_id="u1", last_digest_sent_at=T0)
            )

        with get_session() as session:
            repo = PreferenceRepository(session)
            assert repo.mark_digest_sent("u1", T0 - timedelta(days=1)) is False
            assert repo.mark_digest_sent("u1", T0 + timedelta(days=1)) is True

        with get_session() as session:
            stored = PreferenceRepository(session).get("u1")
        assert stored.last_digest_sent_at == T0 + timedelta(days=1)

    def test_mark_digest_sent_without_preferences(self, seeded):
        with pytest.raises(RecordNotFoundError):
            with get_session() as session:
                PreferenceRepository(session).mark_digest_sent("u1", T0)
