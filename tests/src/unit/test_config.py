"""Unit tests for environment based configuration."""

import pytest
from pydantic import ValidationError

from smarthome_sdk.auth import (
    AuthMode,
    NoAuth,
    QueryPassword,
    QueryToken,
    SessionPassword,
    SessionToken,
)
from smarthome_sdk.config import Settings

ENV_VARS = (
    "SMARTHOME_URL",
    "SMARTHOME_AUTH_MODE",
    "SMARTHOME_USERNAME",
    "SMARTHOME_PASSWORD",
    "SMARTHOME_TOKEN",
    "SMARTHOME_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture
def env(monkeypatch):
    """Clean SMARTHOME_* environment; returns monkeypatch for setting values."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _settings() -> Settings:
    return Settings(_env_file=None)  # type: ignore[call-arg]


class TestDefaults:
    def test_defaults(self, env):
        settings = _settings()

        assert settings.smarthome_url == "http://localhost:8082"
        assert settings.auth_mode == AuthMode.NONE
        assert settings.timeout == 30
        assert settings.log_level == "WARNING"
        assert isinstance(settings.auth_strategy(), NoAuth)


class TestValidation:
    """Tests for field validation."""

    def test_trailing_slash_is_removed(self, env):
        env.setenv("SMARTHOME_URL", "https://home.example.com/")

        assert _settings().smarthome_url == "https://home.example.com"

    def test_url_without_scheme_is_rejected(self, env):
        env.setenv("SMARTHOME_URL", "home.example.com")

        with pytest.raises(ValidationError):
            _settings()

    def test_log_level_is_normalized(self, env):
        env.setenv("LOG_LEVEL", "debug")

        assert _settings().log_level == "DEBUG"

    def test_unknown_log_level_is_rejected(self, env):
        env.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError):
            _settings()

    @pytest.mark.parametrize("timeout", ["0", "-5"])
    def test_non_positive_timeout_is_rejected(self, env, timeout):
        env.setenv("SMARTHOME_TIMEOUT", timeout)

        with pytest.raises(ValidationError):
            _settings()

    def test_unknown_auth_mode_is_rejected(self, env):
        env.setenv("SMARTHOME_AUTH_MODE", "kerberos")

        with pytest.raises(ValidationError):
            _settings()


class TestAuthStrategy:
    """Tests for building the authentication strategy from settings."""

    @pytest.mark.parametrize(
        ("mode", "expected_type"),
        [
            ("query-password", QueryPassword),
            ("session-password", SessionPassword),
        ],
    )
    def test_password_modes(self, env, mode, expected_type):
        env.setenv("SMARTHOME_AUTH_MODE", mode)
        env.setenv("SMARTHOME_USERNAME", "alice")
        env.setenv("SMARTHOME_PASSWORD", "pw")

        strategy = _settings().auth_strategy()

        assert isinstance(strategy, expected_type)
        assert strategy.username == "alice"
        assert strategy.password == "pw"

    @pytest.mark.parametrize(
        ("mode", "expected_type"),
        [("query-token", QueryToken), ("session-token", SessionToken)],
    )
    def test_token_modes(self, env, mode, expected_type):
        env.setenv("SMARTHOME_AUTH_MODE", mode)
        env.setenv("SMARTHOME_TOKEN", "abc")

        strategy = _settings().auth_strategy()

        assert isinstance(strategy, expected_type)
        assert strategy.token == "abc"

    def test_password_mode_without_password(self, env):
        env.setenv("SMARTHOME_AUTH_MODE", "session-password")
        env.setenv("SMARTHOME_USERNAME", "alice")

        with pytest.raises(ValueError, match="SMARTHOME_PASSWORD"):
            _settings().auth_strategy()

    def test_token_mode_without_token(self, env):
        env.setenv("SMARTHOME_AUTH_MODE", "query-token")

        with pytest.raises(ValueError, match="SMARTHOME_TOKEN"):
            _settings().auth_strategy()

    def test_secrets_are_not_in_repr(self, env):
        env.setenv("SMARTHOME_PASSWORD", "hunter2")
        env.setenv("SMARTHOME_TOKEN", "tok-secret")

        text = repr(_settings())

        assert "hunter2" not in text
        assert "tok-secret" not in text
