"""Unit tests for application settings."""

from resilience.config import APISettings, Settings


class TestAPISettings:
    """Tests for the derived public base URL."""

    def test_local_host_keeps_port(self):
        api = APISettings(host="localhost", port=8000, protocol="http")

        assert api.base_url == "http://localhost:8000"

    def test_deployed_host_drops_port(self):
        api = APISettings(host="app.resiliencepro.com", port=8000, protocol="https")

        assert api.base_url == "https://app.resiliencepro.com"


class TestSettings:
    """Tests for settings loaded from the environment."""

    def test_production_callback_is_https(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("HOST", "app.resiliencepro.com")

        settings = Settings(_env_file=None)

        assert settings.auth.callback_url == (
            "https://app.resiliencepro.com/auth/callback"
        )
        assert settings.is_production is True

    def test_nested_auth_values_use_double_underscore(self, monkeypatch):
        monkeypatch.setenv("AUTH__MONITOR_MAX_SUBJECTS", "50")
        monkeypatch.setenv("AUTH__DEFAULT_ROLE", "coach")

        settings = Settings(_env_file=None)

        assert settings.auth.monitor_max_subjects == 50
        assert settings.auth.default_role == "coach"

    def test_git_sha_from_environment(self, monkeypatch):
        monkeypatch.setenv("GIT_SHA", "abc1234")

        assert Settings(_env_file=None).git_sha == "abc1234"
