"""
Shared fixtures for getlogs tests.
"""

import zipfile
from pathlib import Path
from typing import Dict

import pytest

from getlogs.config import ENV_OVERRIDES, Settings, reset_settings


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    """Scratch directory for a test."""
    return tmp_path


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the real config, .env and settings cache out of tests."""
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.setenv("GETLOGS_HOME", str(tmp_path / ".getlogs"))
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings rooted in the test directory with bearer auth."""
    return Settings(
        default_path=tmp_path / "logs",
        jira_url="https://jira.example.com",
        bearer_token="secret-token",
    )


@pytest.fixture
def make_zip():
    """Factory writing a zip archive with the given entry names and contents."""

    def _make_zip(path: Path, entries: Dict[str, bytes]) -> Path:
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, data in entries.items():
                archive.writestr(name, data)
        return path

    return _make_zip


@pytest.fixture
def make_zip_with_undecodable_name():
    """Factory writing a zip whose single entry name is flagged UTF-8 but is not."""

    def _make_zip(path: Path) -> Path:
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as archive:
            archive.writestr("X.dlt", b"T")
        data = bytearray(path.read_bytes().replace(b"X.dlt", b"\x9e.dlt"))
        # Set general purpose flag bit 11 (UTF-8 names) in the local and central headers
        data[7] |= 0x08
        data[data.find(b"PK\x01\x02") + 9] |= 0x08
        path.write_bytes(bytes(data))
        return path

    return _make_zip
