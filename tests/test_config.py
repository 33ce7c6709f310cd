import pytest

from roster_sync.config import DEFAULT_BASE_URL, Settings
from roster_sync.domain.errors import ConfigurationError


def test_from_env_reads_credentials_and_overrides():
    settings = Settings.from_env(
        {
            "EVENTLINK_USERNAME": "organizer@example.com",
            "EVENTLINK_PASSWORD": "secret",
            "EVENTLINK_BASE_URL": "https://eventlink.test",
            "EVENTLINK_TIMEOUT": "3.5",
        }
    )

    assert settings.username == "organizer@example.com"
    assert settings.password == "secret"
    assert settings.base_url == "https://eventlink.test"
    assert settings.timeout == 3.5


def test_from_env_lists_missing_credentials():
    with pytest.raises(ConfigurationError, match="EVENTLINK_USERNAME, EVENTLINK_PASSWORD"):
        Settings.from_env({})


def test_from_env_without_credentials_uses_defaults():
    settings = Settings.from_env({}, require_credentials=False)

    assert settings.username is None
    assert settings.base_url == DEFAULT_BASE_URL


def test_from_env_rejects_non_numeric_timeout():
    with pytest.raises(ConfigurationError, match="EVENTLINK_TIMEOUT"):
        Settings.from_env({"EVENTLINK_TIMEOUT": "soon"}, require_credentials=False)
