"""
Tests for configuration module.
"""

import json
from pathlib import Path

import pytest

from getlogs.config import (
    DEFAULT_LOGFILE_REGEX,
    Settings,
    default_config_path,
    get_settings,
    load_or_create_settings,
    load_settings,
)
from getlogs.models import BatchPolicy
from getlogs.utils.errors import ConfigCreatedError, ConfigurationError, InvalidIssueIdError


def write_config(path: Path, **values) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(values))
    return path


class TestSettings:
    """Test the Settings configuration class."""

    def test_default_settings(self):
        """Test default settings initialization."""
        settings = Settings()

        assert settings.default_path == Path.home() / "logs"
        assert settings.logfile_regex == DEFAULT_LOGFILE_REGEX
        assert settings.archive_regex is None
        assert settings.batch_policy == BatchPolicy.ABORT
        assert settings.log_level == "INFO"
        assert settings.auth_mode == "none"

    def test_archive_regex_fallback(self):
        """The archive pattern defaults to the log file pattern."""
        settings = Settings(logfile_regex=r"\.dlt$")
        assert settings.effective_archive_regex == r"\.dlt$"

        settings = Settings(logfile_regex=r"\.dlt$", archive_regex=r"\.logcat$")
        assert settings.effective_archive_regex == r"\.logcat$"

    def test_auth_mode(self):
        """Bearer tokens win over basic credentials."""
        assert Settings(bearer_token="t", user_email="a@b", api_token="k").auth_mode == "bearer"
        assert Settings(user_email="a@b", api_token="k").auth_mode == "basic"
        assert Settings(user_email="a@b").auth_mode == "none"

    def test_jira_url_trailing_slash_stripped(self):
        settings = Settings(jira_url="https://jira.example.com/")
        assert settings.jira_url == "https://jira.example.com"

    def test_log_level_validation(self):
        """Log level is normalised and checked."""
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError, match="Unknown log level"):
            Settings(log_level="chatty")

    def test_batch_policy_validation(self):
        assert Settings(batch_policy="continue").batch_policy == BatchPolicy.CONTINUE
        with pytest.raises(ValueError):
            Settings(batch_policy="sometimes")

    def test_settings_are_immutable(self):
        settings = Settings()
        with pytest.raises(ValueError):
            settings.logfile_regex = "x"

    def test_issue_dir(self, tmp_path):
        settings = Settings(default_path=tmp_path)
        assert settings.issue_dir("PROJ-7") == tmp_path / "PROJ-7"

    @pytest.mark.parametrize("issue_id", ["../escape", "/etc", "a\\b", "..", ".", ""])
    def test_issue_dir_rejects_path_components(self, tmp_path, issue_id):
        settings = Settings(default_path=tmp_path)
        with pytest.raises(InvalidIssueIdError):
            settings.issue_dir(issue_id)


class TestLoading:
    """Test reading and creating the config file."""

    def test_missing_file_creates_default(self, tmp_path):
        """A default file is written and the caller is told to edit it."""
        config_file = tmp_path / "cfg" / "config.json"

        with pytest.raises(ConfigCreatedError) as exc_info:
            load_or_create_settings(config_file)

        assert exc_info.value.path == config_file
        assert "bearer_token" in str(exc_info.value)
        data = json.loads(config_file.read_text())
        assert data["logfile_regex"] == DEFAULT_LOGFILE_REGEX
        assert data["archive_regex"] is None
        assert data["bearer_token"] is None

    def test_default_location_honours_getlogs_home(self, tmp_path):
        assert default_config_path() == tmp_path / ".getlogs" / "config.json"

    def test_load_existing_file(self, tmp_path):
        config_file = write_config(
            tmp_path / "config.json",
            default_path=str(tmp_path / "logs"),
            jira_url="https://jira.example.com",
            bearer_token="abc",
            logfile_regex=r"\.txt$",
            batch_policy="continue",
        )

        settings = load_or_create_settings(config_file)

        assert settings.default_path == tmp_path / "logs"
        assert settings.bearer_token == "abc"
        assert settings.logfile_regex == r"\.txt$"
        assert settings.batch_policy == BatchPolicy.CONTINUE

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        """Credentials from the environment take precedence."""
        config_file = write_config(tmp_path / "config.json", bearer_token="from-file")
        monkeypatch.setenv("GETLOGS_BEARER_TOKEN", "from-env")
        monkeypatch.setenv("GETLOGS_DEFAULT_PATH", str(tmp_path / "elsewhere"))

        settings = load_settings(config_file)

        assert settings.bearer_token == "from-env"
        assert settings.default_path == tmp_path / "elsewhere"

    def test_dotenv_file_is_read(self, tmp_path):
        """A .env file in the working directory supplies overrides."""
        (tmp_path / ".env").write_text("GETLOGS_API_TOKEN=dotenv-token\n")
        config_file = write_config(tmp_path / "config.json", user_email="me@example.com")

        settings = load_settings(config_file)

        assert settings.api_token == "dotenv-token"
        assert settings.auth_mode == "basic"

    def test_invalid_json(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_settings(config_file)

    def test_invalid_values(self, tmp_path):
        config_file = write_config(tmp_path / "config.json", request_timeout=-1)

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(config_file)

        assert "request_timeout" in str(exc_info.value)

    def test_get_settings_singleton(self, tmp_path):
        """Test that get_settings returns the same instance."""
        config_file = write_config(tmp_path / "config.json", bearer_token="abc")

        settings1 = get_settings(config_file)
        settings2 = get_settings()

        assert settings1 is settings2
