"""Environment variable loading and validation."""

import os
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/resume_matcher.db"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Settings that come from the process environment."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
        skills_file: Optional[Path] = None,
        environment: Optional[str] = None,
    ):
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.log_level = log_level
        self.skills_file = skills_file
        self.environment = environment or "local"


def load_environment_config() -> EnvironmentConfig:
    """Read and validate environment variables.

    All variables are optional:
    - DATABASE_URL: state store URL (default: sqlite:///./data/resume_matcher.db)
    - LOG_LEVEL: overrides the configured log level
    - SKILLS_FILE: overrides the configured skill registry file
    - ENVIRONMENT: label attached to log records (default: local)

    Raises:
        ConfigurationError: If a variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("LOG_LEVEL")
    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    skills_file = os.getenv("SKILLS_FILE")
    skills_path = Path(skills_file) if skills_file else None
    if skills_path is not None and not skills_path.is_file():
        errors.append(f"SKILLS_FILE does not point to a readable file: '{skills_file}'")

    database_url = os.getenv("DATABASE_URL")
    if database_url is not None and "://" not in database_url:
        errors.append(f"Invalid DATABASE_URL: '{database_url}'. Expected a SQLAlchemy URL")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Unset variables you do not need; all of them are optional",
            ],
        )

    return EnvironmentConfig(
        database_url=database_url,
        log_level=log_level.upper() if log_level else None,
        skills_file=skills_path,
        environment=os.getenv("ENVIRONMENT"),
    )
