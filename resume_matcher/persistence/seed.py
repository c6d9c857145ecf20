"""Seed the state store from a YAML file.

Stands in for the ingestion layer during manual runs and demos. The file
holds three optional lists::

    users:
      - user_id: u1
        email: ada@example.com
        resume_text: "7 years of Python, Django and PostgreSQL"
    alerts:
      - alert_id: a1
        user_id: u1
        job_title: Backend Engineer
        required_skills: "Python, Django, REST"
        frequency: WEEKLY
    preferences:
      - user_id: u1
        min_match_threshold: 70

Users are upserted. Alerts and preferences that already exist are left alone
so re-seeding never resets cadence state. Alerts without a
``match_threshold`` get the configured default; users without preferences
get ``default_preferences``.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError
from sqlalchemy.orm import Session

from resume_matcher.domain.models import (
    AlertCadenceState,
    NotificationPreferenceState,
    UserProfile,
)
from resume_matcher.logging import get_logger
from resume_matcher.preferences import default_preferences

from .exceptions import PersistenceError
from .repositories import AlertRepository, PreferenceRepository, UserRepository

logger = get_logger(__name__, component="database")


@dataclass
class SeedResult:
    """Counts of records written by ``load_seed_file``."""

    users: int = 0
    alerts_added: int = 0
    alerts_existing: int = 0
    preferences_added: int = 0


def read_seed_file(path: Union[str, Path]) -> Dict[str, List[Dict[str, Any]]]:
    """Read and shape-check a seed file.

    Raises:
        PersistenceError: If the file is unreadable or not a mapping of lists
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise PersistenceError(f"Cannot read seed file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise PersistenceError(f"Seed file {path} must contain a mapping")

    data = {}
    for key in ("users", "alerts", "preferences"):
        entries = raw.get(key) or []
        if not isinstance(entries, list):
            raise PersistenceError(f"'{key}' in seed file {path} must be a list")
        data[key] = entries
    return data


def load_seed_file(
    session: Session,
    path: Union[str, Path],
    default_match_threshold: float,
    now: datetime,
) -> SeedResult:
    """Write the users, alerts and preferences of a seed file.

    Args:
        session: Open session; the caller commits
        path: YAML seed file
        default_match_threshold: Threshold for alerts that do not set one
        now: Opt-in time recorded on generated default preferences

    Returns:
        SeedResult with counts

    Raises:
        PersistenceError: If the file is invalid or a record fails validation
    """
    data = read_seed_file(path)
    users = UserRepository(session)
    alerts = AlertRepository(session)
    preferences = PreferenceRepository(session)
    result = SeedResult()

    try:
        for entry in data["users"]:
            users.upsert(UserProfile.model_validate(entry))
            result.users += 1

        for entry in data["alerts"]:
            alert = AlertCadenceState.model_validate(
                {"match_threshold": default_match_threshold, **entry}
            )
            if alerts.get(alert.alert_id) is not None:
                result.alerts_existing += 1
                continue
            alerts.add(alert)
            result.alerts_added += 1

        explicit = {}
        for entry in data["preferences"]:
            pref = NotificationPreferenceState.model_validate(entry)
            explicit[pref.user_id] = pref

        for entry in data["users"]:
            user_id = str(entry["user_id"]).strip()
            if preferences.get(user_id) is not None:
                continue
            preferences.save(explicit.get(user_id) or default_preferences(user_id, now))
            result.preferences_added += 1

    except ValidationError as e:
        raise PersistenceError(f"Invalid record in seed file {path}: {e}") from e

    logger.info(
        f"Seeded {result.users} users and {result.alerts_added} alerts from {path}",
        extra={
            "event": "database.seeded",
            "users": result.users,
            "alerts_added": result.alerts_added,
            "alerts_existing": result.alerts_existing,
            "preferences_added": result.preferences_added,
        },
    )
    return result
