"""Test configuration and fixtures."""

import logfire
import pytest

# Spans stay local during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep developer .env overrides out of tests."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.delenv("COOKIE_SECRET", raising=False)
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("PORT", raising=False)
