"""Unit tests for configuration loading and validation."""

import warnings
from pathlib import Path

import pytest

from resume_matcher.config import AppConfig, ConfigurationError, load_config, load_environment_config
from resume_matcher.config.duration import (
    DurationParseError,
    describe_seconds,
    parse_duration,
    validate_duration_range,
)
from resume_matcher.config.validators import check_for_warnings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "LOG_LEVEL", "SKILLS_FILE", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


class TestParseDuration:
    """Tests for duration parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("30m", 1800),
            ("6h", 21600),
            ("1d", 86400),
            ("1h30m", 5400),
            ("45s", 45),
            ("PT6H", 21600),
            ("PT15M", 900),
            ("P1D", 86400),
            ("PT1H30M", 5400),
            (" 2H ", 7200),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "6x", "PT", "0h", "P1W", "6h foo"])
    def test_invalid(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_range(self):
        validate_duration_range(300)
        validate_duration_range(86400)
        with pytest.raises(DurationParseError, match="too short"):
            validate_duration_range(299)
        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(86401)

    @pytest.mark.parametrize(
        "seconds,expected",
        [(1, "1 second"), (90, "1 minute"), (900, "15 minutes"), (7200, "2 hours"), (86400, "1 day")],
    )
    def test_describe_seconds(self, seconds, expected):
        assert describe_seconds(seconds) == expected


class TestAppConfig:
    """Tests for the configuration schema."""

    def test_defaults(self):
        config = AppConfig()

        assert config.dispatch_interval == "6h"
        assert config.dispatch_interval_seconds == 21600
        assert config.default_match_threshold == 60.0
        assert config.logging.level == "INFO"
        assert config.logging.format == "key-value"
        assert config.dispatch.dry_run is True
        assert config.dispatch.max_alerts_per_cycle == 0
        assert config.dispatch.notifier is None
        assert config.skills_file is None

    def test_interval_out_of_range(self):
        with pytest.raises(ValueError, match="too short"):
            AppConfig(dispatch_interval="1m")

    def test_unknown_top_level_field(self):
        with pytest.raises(ValueError):
            AppConfig(scan_interval="6h")

    @pytest.mark.parametrize("threshold", [-1, 101])
    def test_threshold_range(self, threshold):
        with pytest.raises(ValueError):
            AppConfig(default_match_threshold=threshold)


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_full_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
dispatch_interval: "PT2H"
default_match_threshold: 70
skills_file: ./skills.yaml
logging:
  level: DEBUG
  format: json
dispatch:
  dry_run: true
  max_alerts_per_cycle: 25
  send_digests: false
"""
        )

        app_config, env_config = load_config(config_file)

        assert app_config.dispatch_interval_seconds == 7200
        assert app_config.default_match_threshold == 70
        assert app_config.skills_file == Path("./skills.yaml")
        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"
        assert app_config.dispatch.max_alerts_per_cycle == 25
        assert app_config.dispatch.send_digests is False
        assert env_config.database_url == "sqlite:///./data/resume_matcher.db"

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        app_config, _ = load_config(config_file)
        assert app_config.dispatch_interval_seconds == 21600

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        app_config, _ = load_config()
        assert app_config.dispatch_interval == "6h"

    def test_discovers_config_directory(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("dispatch_interval: 30m\n")
        monkeypatch.chdir(tmp_path)

        app_config, _ = load_config()
        assert app_config.dispatch_interval_seconds == 1800

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("dispatch: [unclosed")

        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config(config_file)

    def test_non_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file)

    def test_validation_errors_are_collected(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
dispatch_interval: "10s"
default_match_threshold: 150
unknown_key: 1
"""
        )

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)

        error = exc_info.value
        assert len(error.errors) == 3
        assert any("Unknown field: unknown_key" in e for e in error.errors)
        assert "Validation Errors:" in str(error)
        assert "Suggestions:" in str(error)

    def test_skills_file_env_overrides_config(self, tmp_path, monkeypatch):
        skills = tmp_path / "skills.yaml"
        skills.write_text("skills: [Java]\n")
        config_file = tmp_path / "config.yaml"
        config_file.write_text("skills_file: ./other.yaml\n")
        monkeypatch.setenv("SKILLS_FILE", str(skills))

        app_config, env_config = load_config(config_file)

        assert app_config.skills_file == skills
        assert env_config.skills_file == skills

    def test_warnings_emitted(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("default_match_threshold: 10\n")

        with pytest.warns(UserWarning, match="Low default_match_threshold"):
            load_config(config_file)


class TestCheckForWarnings:
    """Tests for non-fatal configuration checks."""

    def test_clean_config(self):
        assert check_for_warnings({"dispatch_interval": "6h", "default_match_threshold": 60}) == []

    def test_long_interval(self):
        assert any("Long dispatch_interval" in m for m in check_for_warnings({"dispatch_interval": "20h"}))

    def test_live_dispatch(self):
        messages = check_for_warnings({"dispatch": {"dry_run": False}})
        assert any("dry_run is false" in m for m in messages)

    def test_invalid_interval_is_left_to_validation(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert check_for_warnings({"dispatch_interval": "nonsense"}) == []


class TestEnvironmentConfig:
    """Tests for environment variable loading."""

    def test_defaults(self):
        env = load_environment_config()

        assert env.database_url == "sqlite:///./data/resume_matcher.db"
        assert env.log_level is None
        assert env.skills_file is None
        assert env.environment == "local"

    def test_values(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/matcher")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "staging")

        env = load_environment_config()

        assert env.database_url == "postgresql://u:p@db/matcher"
        assert env.log_level == "DEBUG"
        assert env.environment == "staging"

    def test_invalid_values_collected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        monkeypatch.setenv("DATABASE_URL", "not-a-url")
        monkeypatch.setenv("SKILLS_FILE", str(tmp_path / "missing.yaml"))

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert len(exc_info.value.errors) == 3
