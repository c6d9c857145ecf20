"""State store for users, alert cadence state and notification preferences.

This module provides the public API for database operations including:
- Database initialization and connection management
- Repository classes returning frozen domain models
- Custom exceptions for error handling

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - UserRepository: candidate profiles
    - AlertRepository: alerts, including the monotonic mark_sent update
    - PreferenceRepository: notification preferences and digest stamps

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from resume_matcher.persistence import init_database, get_session, AlertRepository
    >>>
    >>> init_database("sqlite:///./data/resume_matcher.db")
    >>>
    >>> with get_session() as session:
    ...     repo = AlertRepository(session)
    ...     alerts = repo.get_active()
"""

# Database initialization and session management
from .database import close_database, get_engine, get_session, init_database

# Repository classes
from .repositories import AlertRepository, PreferenceRepository, UserRepository

# Exceptions
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "UserRepository",
    "AlertRepository",
    "PreferenceRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
