"""End-to-end tests for the login, callback and logout flow."""

from urllib.parse import parse_qs, urlsplit

import pytest

from atdemo.adapter.bluesky.client import MockIdentityClient
from atdemo.domain.model import SessionCredential
from atdemo.domain.repository import AuthSessionStore, AuthStateStore
from tests.e2e.helpers import login
from tests.harness import create_app_fixture

# E2E test fixture - full app, mocked AT Protocol network
app_env = create_app_fixture()

DID = "did:plc:abc123"


class TestLogin:
    """POST /login."""

    @pytest.mark.asyncio
    async def test_login_form(self, app_env):
        response = await app_env.client.get("/login")

        assert response.status_code == 200
        assert '<form action="/login" method="post">' in response.text
        assert 'name="handle"' in response.text

    @pytest.mark.asyncio
    async def test_redirects_to_provider(self, app_env):
        response = await app_env.client.post("/login", data={"handle": "alice.bsky.social"})

        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith(MockIdentityClient.AUTHORIZE_URL)

        state = parse_qs(urlsplit(location).query)["state"][0]
        state_store = await app_env.get(AuthStateStore)
        assert await state_store.get(state) is not None

    @pytest.mark.asyncio
    async def test_empty_handle(self, app_env):
        response = await app_env.client.post("/login", data={"handle": ""})

        assert response.status_code == 400
        assert "Handle is required" in response.text
        assert len(await app_env.get(AuthStateStore)) == 0

    @pytest.mark.asyncio
    async def test_missing_handle_field(self, app_env):
        response = await app_env.client.post("/login", data={})

        assert response.status_code == 400
        assert "Handle is required" in response.text

    @pytest.mark.asyncio
    async def test_unresolvable_handle(self, app_env):
        response = await app_env.client.post("/login", data={"handle": "alice.example"})

        assert response.status_code == 500
        assert "alice.example" in response.text
        assert 'href="/login"' in response.text
        assert len(await app_env.get(AuthStateStore)) == 0


class TestCallback:
    """GET /oauth/callback."""

    @pytest.mark.asyncio
    async def test_success_binds_cookie_and_shows_home(self, app_env):
        await login(app_env.client)

        assert "sid" in app_env.client.cookies
        response = await app_env.client.get("/")
        assert response.status_code == 200
        assert "Welcome, Mock abc123!" in response.text
        assert "Login with Bluesky" not in response.text

    @pytest.mark.asyncio
    async def test_session_is_stored_and_flow_consumed(self, app_env):
        state = await login(app_env.client)

        session_store = await app_env.get(AuthSessionStore)
        state_store = await app_env.get(AuthStateStore)
        assert await session_store.get(DID) is not None
        assert await state_store.get(state) is None

    @pytest.mark.asyncio
    async def test_unknown_state(self, app_env):
        response = await app_env.client.get(
            "/oauth/callback", params={"state": "X", "code": "Y"}
        )

        assert response.status_code == 500
        assert 'href="/login"' in response.text
        assert "set-cookie" not in response.headers
        assert len(await app_env.get(AuthSessionStore)) == 0

    @pytest.mark.asyncio
    async def test_replayed_callback_fails(self, app_env):
        state = await login(app_env.client)

        response = await app_env.client.get(
            "/oauth/callback",
            params={"code": "abc", "state": state, "iss": MockIdentityClient.ISSUER},
        )

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_rejected_code_hides_provider_details(self, app_env):
        response = await app_env.client.post("/login", data={"handle": "alice.bsky.social"})
        state = parse_qs(urlsplit(response.headers["location"]).query)["state"][0]

        response = await app_env.client.get(
            "/oauth/callback",
            params={"code": "invalid", "state": state, "iss": MockIdentityClient.ISSUER},
        )

        assert response.status_code == 500
        assert "Invalid authorization code" not in response.text
        assert len(await app_env.get(AuthSessionStore)) == 0


class TestLogout:
    """POST /logout."""

    @pytest.mark.asyncio
    async def test_clears_cookie_but_keeps_stored_session(self, app_env):
        await login(app_env.client)

        response = await app_env.client.post("/logout")

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert "sid" not in app_env.client.cookies

        home = await app_env.client.get("/")
        assert "Login with Bluesky" in home.text
        session_store = await app_env.get(AuthSessionStore)
        assert await session_store.get(DID) is not None

    @pytest.mark.asyncio
    async def test_anonymous_logout(self, app_env):
        response = await app_env.client.post("/logout")

        assert response.status_code == 302

    @pytest.mark.asyncio
    async def test_forget_session_on_logout(self, app_env, monkeypatch):
        # Settings are resolved on the first request
        monkeypatch.setenv("SESSION__FORGET_SESSION_ON_LOGOUT", "true")
        await login(app_env.client)

        await app_env.client.post("/logout")

        session_store = await app_env.get(AuthSessionStore)
        assert await session_store.get(DID) is None


class TestSessionRestore:
    """Cookie to session on every request."""

    @pytest.mark.asyncio
    async def test_forged_cookie_is_anonymous(self, app_env):
        app_env.client.cookies.set("sid", "not-a-sealed-value")

        response = await app_env.client.get("/")

        assert response.status_code == 200
        assert "Login with Bluesky" in response.text

    @pytest.mark.asyncio
    async def test_revoked_session_clears_cookie(self, app_env):
        await login(app_env.client)
        session_store = await app_env.get(AuthSessionStore)
        credential = SessionCredential.model_validate_json(await session_store.get(DID))
        revoked = credential.model_copy(
            update={"context": {**credential.context, "revoked": True}}
        )
        await session_store.set(DID, revoked.model_dump_json())

        response = await app_env.client.get("/")

        assert "Login with Bluesky" in response.text
        assert "sid" not in app_env.client.cookies
        assert await session_store.get(DID) is None

    @pytest.mark.asyncio
    async def test_deleted_session_clears_cookie(self, app_env):
        await login(app_env.client)
        session_store = await app_env.get(AuthSessionStore)
        await session_store.delete(DID)

        response = await app_env.client.get("/")

        assert "Login with Bluesky" in response.text
        assert "sid" not in app_env.client.cookies

    @pytest.mark.asyncio
    async def test_provider_outage_is_server_error(self, app_env):
        """An unreachable provider must not look like a logout."""
        await login(app_env.client)
        session_store = await app_env.get(AuthSessionStore)
        credential = SessionCredential.model_validate_json(await session_store.get(DID))
        await session_store.set(
            DID,
            credential.model_copy(
                update={"context": {**credential.context, "unreachable": True}}
            ).model_dump_json(),
        )

        response = await app_env.client.get("/")

        assert response.status_code == 500
        assert "Something went wrong" in response.text
        assert "sid" in app_env.client.cookies
        assert await session_store.get(DID) is not None


class TestClientMetadata:
    """Public OAuth documents."""

    @pytest.mark.asyncio
    async def test_client_metadata_document(self, app_env):
        response = await app_env.client.get("/oauth-client-metadata.json")

        assert response.status_code == 200
        data = response.json()
        assert data["dpop_bound_access_tokens"] is True
        assert data["redirect_uris"] == ["http://127.0.0.1:3000/oauth/callback"]

    @pytest.mark.asyncio
    async def test_jwks(self, app_env):
        response = await app_env.client.get("/.well-known/jwks.json")

        assert response.status_code == 200
        assert response.json() == {"keys": []}

    @pytest.mark.asyncio
    async def test_health(self, app_env):
        response = await app_env.client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["environment"] == "test"
