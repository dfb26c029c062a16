"""
Configuration for getlogs.

Settings live in ``~/.getlogs/config.json`` (the directory can be moved with
``GETLOGS_HOME``). Credentials and paths may also be supplied through the
environment or a ``.env`` file, which take precedence over the file.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from getlogs.models import BatchPolicy
from getlogs.utils.errors import ConfigCreatedError, ConfigurationError, InvalidIssueIdError

CONFIG_DIR_NAME = ".getlogs"
CONFIG_FILE_NAME = "config.json"
DEFAULT_LOGFILE_REGEX = r".*\.(logcat|dlt|txt)$"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Environment variable -> settings field
ENV_OVERRIDES = {
    "GETLOGS_DEFAULT_PATH": "default_path",
    "GETLOGS_JIRA_URL": "jira_url",
    "GETLOGS_PROXY": "proxy",
    "GETLOGS_BEARER_TOKEN": "bearer_token",
    "GETLOGS_USER_EMAIL": "user_email",
    "GETLOGS_API_TOKEN": "api_token",
}


class Settings(BaseModel):
    """Settings for a getlogs run. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    # Storage
    default_path: Path = Field(default_factory=lambda: Path.home() / "logs")

    # Tracker
    jira_url: str = "https://your-jira-server.com"
    proxy: Optional[str] = None
    bearer_token: Optional[str] = None
    user_email: Optional[str] = None
    api_token: Optional[str] = None
    request_timeout: float = Field(60.0, gt=0)

    # Extraction
    logfile_regex: str = DEFAULT_LOGFILE_REGEX
    archive_regex: Optional[str] = None

    # Batch behaviour
    batch_policy: BatchPolicy = BatchPolicy.ABORT

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @field_validator("jira_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("default_path", "log_file")
    @classmethod
    def expand_user(cls, v: Optional[Path]) -> Optional[Path]:
        return v.expanduser() if v is not None else None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_archive_regex(self) -> str:
        """Pattern for archive entries, falling back to the log file pattern."""
        return self.archive_regex if self.archive_regex is not None else self.logfile_regex

    @property
    def auth_mode(self) -> str:
        """Which credentials will be sent to the tracker."""
        if self.bearer_token:
            return "bearer"
        if self.user_email and self.api_token:
            return "basic"
        return "none"

    def issue_dir(self, issue_id: str) -> Path:
        """
        Working directory for one issue.

        Raises:
            InvalidIssueIdError: If the ID would resolve outside ``default_path``
        """
        if issue_id in ("", ".", "..") or "/" in issue_id or "\\" in issue_id:
            raise InvalidIssueIdError(issue_id)
        return self.default_path / issue_id


def get_config_dir() -> Path:
    """Directory holding the config file."""
    override = os.getenv("GETLOGS_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_DIR_NAME


def default_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def _default_file_contents() -> Dict[str, Any]:
    return {
        "default_path": str(Path.home() / "logs"),
        "jira_url": "https://your-jira-server.com",
        "proxy": None,
        "bearer_token": None,
        "user_email": None,
        "api_token": None,
        "logfile_regex": DEFAULT_LOGFILE_REGEX,
        "archive_regex": None,
    }


def _env_overrides() -> Dict[str, str]:
    load_dotenv(find_dotenv(usecwd=True))
    overrides = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = value
    return overrides


def load_settings(config_file: Union[str, Path]) -> Settings:
    """
    Load settings from an existing JSON config file.

    Args:
        config_file: Path to the config file

    Returns:
        Validated settings with environment overrides applied

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    config_file = Path(config_file)
    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_file}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {config_file} is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a JSON object")

    data.update(_env_overrides())

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {config_file}",
            {"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
        )


def load_or_create_settings(config_file: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings, writing a default config file first if there is none.

    Raises:
        ConfigCreatedError: If the default file was just created
        ConfigurationError: If the existing file is invalid
    """
    config_file = Path(config_file) if config_file else default_config_path()

    if not config_file.exists():
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            config_file.write_text(
                json.dumps(_default_file_contents(), indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise ConfigurationError(f"Cannot create config file {config_file}: {e}")
        raise ConfigCreatedError(config_file)

    return load_settings(config_file)


# Singleton instance
_settings: Optional[Settings] = None


def get_settings(config_file: Optional[Union[str, Path]] = None) -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_or_create_settings(config_file)
    return _settings


def reset_settings() -> None:
    """Forget the cached settings."""
    global _settings
    _settings = None
