import pytest

from config import Settings
from domain.exceptions import ConfigurationError
from infrastructure.api import AuthConfig


@pytest.fixture
def clean_env(monkeypatch):
    for key in Settings.AUTH_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_missing_identity_keys_are_all_reported(clean_env):
    clean_env.setenv("AUTH_CLIENT_ID", "client")

    with pytest.raises(ConfigurationError) as exc:
        Settings().validate()

    assert "AUTH_CLIENT_ID" not in exc.value.missing
    assert "AUTH_CLIENT_SECRET" in exc.value.missing
    assert len(exc.value.missing) == len(Settings.AUTH_KEYS) - 1


def test_auth_config_from_complete_environment(clean_env):
    for key in Settings.AUTH_KEYS:
        clean_env.setenv(key, f"value-{key.lower()}")

    config = AuthConfig.from_settings(Settings())

    assert config.client_secret == "value-auth_client_secret"
    assert config.spartan_token_url == "value-spartan_token_url"


def test_defaults(clean_env):
    clean_env.delenv("SKILL_AUTO_DISPATCH", raising=False)
    clean_env.delenv("REQUEST_TIMEOUT", raising=False)

    settings = Settings()

    assert settings.MAX_PAGE_SIZE == 24
    assert settings.MATCH_HISTORY_CEILING == 10000
    assert settings.REQUEST_TIMEOUT == 30.0
    assert settings.SKILL_AUTO_DISPATCH is True
    assert settings.STATS_BASE_URL.startswith("https://")


def test_auto_dispatch_can_be_disabled(clean_env):
    clean_env.setenv("SKILL_AUTO_DISPATCH", "false")

    assert Settings().SKILL_AUTO_DISPATCH is False
