"""Unit tests for settings loading and app wiring."""

import pytest
from pydantic import ValidationError

from models.config import Settings, get_settings


class TestSettings:
    """Tests for the Settings model."""

    def test_loaded_from_environment(self):
        settings = get_settings()

        assert settings.ENVIRONMENT == "test"
        assert settings.ADMIN_EMAILS == ["boss@example.com"]
        assert settings.push_configured is False

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_comma_separated_lists(self):
        settings = Settings(
            SECRET_KEY="k",
            CORS_ORIGINS="http://a.test, http://b.test",
            ADMIN_EMAILS="Root@Example.com,",
        )

        assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]
        assert settings.ADMIN_EMAILS == ["root@example.com"]

    def test_push_configured_needs_credentials(self):
        settings = Settings(
            SECRET_KEY="k",
            PUSH_ENABLED=True,
            FCM_PROJECT_ID="demo",
            FCM_ACCESS_TOKEN="token",
        )

        assert settings.push_configured is True
        assert settings.model_copy(update={"PUSH_ENABLED": False}).push_configured is False

    def test_settings_are_frozen(self):
        with pytest.raises(ValidationError):
            get_settings().TRIGGER_SECRET = "changed"  # type: ignore[misc]

    def test_moderation_defaults(self):
        settings = Settings(SECRET_KEY="k")

        assert settings.DEFAULT_MUTE_MINUTES == 30
        assert settings.DEFAULT_BAN_MINUTES == 1440
        assert settings.DEFAULT_CLEAR_MESSAGES_LIMIT == 50
        assert settings.MAX_CLEAR_MESSAGES_LIMIT == 500


class TestAppWiring:
    def test_routes_registered(self):
        from main import app

        paths = {route.path for route in app.routes}

        assert "/api/admin/actions/muteUser" in paths
        assert "/api/triggers/events" in paths
        assert "/api/maintenance/backfill-last-seen" in paths
        assert "/api/health" in paths
