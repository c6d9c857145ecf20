"""Shared fixtures for the resume matcher test suite."""

from datetime import datetime, timezone

import pytest

from resume_matcher.logging.context import clear_log_context
from resume_matcher.matching import MatchingEngine
from resume_matcher.persistence import close_database, init_database
from resume_matcher.skills import SkillExtractor, SkillMatcher, SkillRegistry


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture(scope="session")
def registry():
    """Built-in registry; deterministic regardless of the packaged skills file."""
    return SkillRegistry.builtin()


@pytest.fixture
def extractor(registry):
    return SkillExtractor(registry)


@pytest.fixture
def engine(extractor):
    return MatchingEngine(extractor, SkillMatcher())


@pytest.fixture
def now():
    """Fixed cycle time: Monday 2025-03-03 10:00 UTC."""
    return datetime(2025, 3, 3, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def database(tmp_path):
    """Initialise a fresh SQLite state store for one test."""
    init_database(f"sqlite:///{tmp_path / 'state.db'}")
    yield
    close_database()
