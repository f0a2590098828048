"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from atdemo.config import DEVELOPMENT_COOKIE_SECRET, Settings


class TestSettings:
    """Tests for Settings."""

    def test_local_development_uses_loopback_client(self):
        settings = Settings()

        assert settings.api.base_url == "http://127.0.0.1:3000"
        assert settings.oauth.redirect_uri == "http://127.0.0.1:3000/oauth/callback"
        assert settings.oauth.client_id.startswith("http://localhost?redirect_uri=")
        assert "http%3A%2F%2F127.0.0.1%3A3000%2Foauth%2Fcallback" in settings.oauth.client_id
        assert "scope=atproto%20transition%3Ageneric" in settings.oauth.client_id
        assert not settings.is_production

    def test_localhost_is_rewritten_to_loopback_ip(self):
        settings = Settings(host="localhost", port=8080)

        assert settings.api.base_url == "http://127.0.0.1:8080"

    def test_public_host_uses_metadata_document_as_client_id(self):
        settings = Settings(host="demo.example.com", environment="production")

        assert settings.api.base_url == "https://demo.example.com"
        assert (
            settings.oauth.client_id
            == "https://demo.example.com/oauth-client-metadata.json"
        )
        assert settings.oauth.redirect_uri == "https://demo.example.com/oauth/callback"
        assert settings.is_production

    def test_reads_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SESSION__FORGET_SESSION_ON_LOGOUT", "true")
        monkeypatch.setenv("DATABASE__URL", "sqlite+aiosqlite:///./demo.db")

        settings = Settings()

        assert settings.session.forget_session_on_logout is True
        assert settings.database_url == "sqlite+aiosqlite:///./demo.db"

    def test_rejects_short_cookie_secret(self):
        with pytest.raises(ValidationError):
            Settings(cookie_secret="too-short")

    def test_development_secret_is_long_enough(self):
        assert Settings().cookie_secret == DEVELOPMENT_COOKIE_SECRET
