"""Unit tests for BrowserSessionBinder."""

from datetime import timedelta

import pytest
from fastapi import Request, Response

from atdemo.config import Settings
from atdemo.interface.api.session import BrowserSessionBinder
from atdemo.util.seal import CookieSealer


def _request(cookie: str | None = None) -> Request:
    headers = [(b"cookie", cookie.encode())] if cookie is not None else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def binder(settings):
    sealer = CookieSealer(settings.cookie_secret, timedelta(days=settings.session.ttl_days))
    return BrowserSessionBinder(sealer=sealer, settings=settings)


def _bound_cookie(binder: BrowserSessionBinder, subject: str) -> str:
    response = Response()
    binder.bind(response, subject)
    set_cookie = response.headers["set-cookie"]
    return set_cookie.split(";", 1)[0]


class TestBind:
    """Tests for BrowserSessionBinder.bind()."""

    def test_sets_http_only_lax_cookie(self, binder):
        response = Response()

        binder.bind(response, "did:plc:abc123")

        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith("sid=")
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        assert "path=/" in set_cookie
        assert "max-age=1209600" in set_cookie
        assert "did:plc:abc123" not in set_cookie

    def test_secure_flag_in_production(self):
        settings = Settings(environment="production", host="demo.example.com")
        sealer = CookieSealer(settings.cookie_secret, timedelta(days=14))
        binder = BrowserSessionBinder(sealer=sealer, settings=settings)
        response = Response()

        binder.bind(response, "did:plc:abc123")

        assert "secure" in response.headers["set-cookie"].lower()


class TestReadSubject:
    """Tests for BrowserSessionBinder.read_subject()."""

    def test_reads_bound_subject(self, binder):
        cookie = _bound_cookie(binder, "did:plc:abc123")

        assert binder.read_subject(_request(cookie)) == "did:plc:abc123"

    def test_no_cookie_is_anonymous(self, binder):
        assert binder.read_subject(_request()) is None

    def test_forged_cookie_is_anonymous(self, binder):
        assert binder.read_subject(_request("sid=did:plc:abc123")) is None

    def test_cookie_sealed_with_other_secret_is_anonymous(self, settings):
        other = BrowserSessionBinder(
            sealer=CookieSealer("z" * 32, timedelta(days=1)), settings=settings
        )
        ours = BrowserSessionBinder(
            sealer=CookieSealer(settings.cookie_secret, timedelta(days=1)),
            settings=settings,
        )

        assert ours.read_subject(_request(_bound_cookie(other, "did:plc:abc123"))) is None

    def test_payload_without_subject_is_anonymous(self, binder):
        sealed = binder.sealer.seal({"user": "x"})

        assert binder.read_subject(_request(f"sid={sealed}")) is None


class TestUnbind:
    """Tests for BrowserSessionBinder.unbind()."""

    def test_expires_cookie(self, binder):
        response = Response()

        binder.unbind(response)

        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith('sid=""') or set_cookie.startswith("sid=;")
        assert "max-age=0" in set_cookie
