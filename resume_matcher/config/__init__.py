"""Configuration management for the resume matcher."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config
from .models import AppConfig, DispatchConfig, LogFormat, LoggingConfig, LogLevel

__all__ = [
    "load_config",
    "load_environment_config",
    "AppConfig",
    "DispatchConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    "LogLevel",
    "LogFormat",
    "ConfigurationError",
]
