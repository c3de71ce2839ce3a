"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from canonical_redirect.config import Settings
from canonical_redirect.models.canonical import CanonicalizationOptions


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove canonical rule variables from the environment."""
    for name in ("APPEND_TRAILING_SLASH", "LOWERCASE_URLS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(clean_env: None) -> None:
    """Strip trailing slashes and lowercase URLs by default."""
    settings = Settings(_env_file=None)
    assert settings.append_trailing_slash is False
    assert settings.lowercase_urls is True


def test_reads_env_vars(monkeypatch: pytest.MonkeyPatch, clean_env: None) -> None:
    """Read the canonical rules from the environment."""
    monkeypatch.setenv("APPEND_TRAILING_SLASH", "true")
    monkeypatch.setenv("LOWERCASE_URLS", "false")

    settings = Settings(_env_file=None)

    assert settings.append_trailing_slash is True
    assert settings.lowercase_urls is False


def test_invalid_bool_raises(monkeypatch: pytest.MonkeyPatch, clean_env: None) -> None:
    """Reject values that are not booleans."""
    monkeypatch.setenv("APPEND_TRAILING_SLASH", "sometimes")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_log_level_is_uppercased(monkeypatch: pytest.MonkeyPatch, clean_env: None) -> None:
    """Normalize the log level to uppercase."""
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings(_env_file=None).log_level == "DEBUG"


def test_canonicalization_options(clean_env: None) -> None:
    """Build canonicalization options from the settings."""
    settings = Settings(_env_file=None, append_trailing_slash=True, lowercase_urls=False)
    assert settings.canonicalization_options() == CanonicalizationOptions(
        append_trailing_slash=True, lowercase_urls=False
    )
