"""Configuration schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class DispatchConfig(BaseModel):
    """Settings for the periodic alert dispatch cycle."""

    dry_run: bool = Field(
        True, description="Log notifications instead of handing them to a real notifier"
    )
    max_alerts_per_cycle: int = Field(
        0, ge=0, description="Maximum due alerts processed per cycle (0 = unlimited)"
    )
    send_digests: bool = Field(True, description="Whether the cycle also sends digests")
    notifier: Optional[str] = Field(
        None, description="Notifier class for live runs, as 'package.module:ClassName'"
    )


class AppConfig(BaseModel):
    """Root configuration object for the resume matcher service."""

    skills_file: Optional[Path] = Field(
        None, description="YAML or JSON skill registry; built-in list is used when unset"
    )
    dispatch_interval: str = Field("6h", description="How often the dispatch cycle runs")
    default_match_threshold: float = Field(
        60.0, ge=0, le=100, description="Threshold applied to alerts that do not set one"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)

    # Computed from dispatch_interval
    dispatch_interval_seconds: Optional[int] = None

    model_config = {"extra": "forbid"}

    @field_validator("dispatch_interval")
    @classmethod
    def validate_dispatch_interval(cls, v: str) -> str:
        """Parse the interval and keep it between 5 minutes and 24 hours."""
        try:
            validate_duration_range(parse_duration(v))
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_interval_seconds(self):
        """Fill dispatch_interval_seconds from dispatch_interval."""
        self.dispatch_interval_seconds = parse_duration(self.dispatch_interval)
        return self
