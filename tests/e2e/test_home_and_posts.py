"""End-to-end tests for the home page and posting."""

import pytest

from atdemo.domain.repository import AuthSessionStore
from atdemo.domain.service import RepositoryClient
from tests.e2e.helpers import login
from tests.harness import create_app_fixture

# E2E test fixture - full app, mocked AT Protocol network
app_env = create_app_fixture()

DID = "did:plc:abc123"


class TestHome:
    """GET /."""

    @pytest.mark.asyncio
    async def test_anonymous_landing_page(self, app_env):
        response = await app_env.client.get("/")

        assert response.status_code == 200
        assert "AT Protocol Demo" in response.text
        assert 'href="/login"' in response.text

    @pytest.mark.asyncio
    async def test_authenticated_view_shows_profile(self, app_env):
        await login(app_env.client)

        response = await app_env.client.get("/")

        assert f"DID: {DID}" in response.text
        assert "Handle: @abc123.mock.test" in response.text
        assert '<form action="/post" method="post">' in response.text
        assert '<form action="/logout" method="post">' in response.text


class TestCreatePost:
    """POST /post."""

    @pytest.mark.asyncio
    async def test_requires_login(self, app_env):
        response = await app_env.client.post("/post", data={"text": "hello"})

        assert response.status_code == 302
        assert response.headers["location"] == "/login"

    @pytest.mark.asyncio
    async def test_publishes_and_shows_post(self, app_env):
        await login(app_env.client)

        response = await app_env.client.post("/post", data={"text": "Hello from Python"})

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        repository = await app_env.get(RepositoryClient)
        assert [p.text for p in repository.posts[DID]] == ["Hello from Python"]

        home = await app_env.client.get("/")
        assert "Hello from Python" in home.text

    @pytest.mark.asyncio
    async def test_post_text_is_escaped(self, app_env):
        await login(app_env.client)

        await app_env.client.post("/post", data={"text": "<script>alert(1)</script>"})

        home = await app_env.client.get("/")
        assert "<script>alert(1)</script>" not in home.text
        assert "&lt;script&gt;" in home.text

    @pytest.mark.asyncio
    async def test_requires_text(self, app_env):
        await login(app_env.client)

        response = await app_env.client.post("/post", data={"text": ""})

        assert response.status_code == 400
        assert "Post text is required" in response.text
        repository = await app_env.get(RepositoryClient)
        assert repository.posts == {}

    @pytest.mark.asyncio
    async def test_stale_cookie_redirects_to_login_and_clears_it(self, app_env):
        await login(app_env.client)
        session_store = await app_env.get(AuthSessionStore)
        await session_store.delete(DID)

        response = await app_env.client.post("/post", data={"text": "hello"})

        assert response.status_code == 302
        assert response.headers["location"] == "/login"
        assert "max-age=0" in response.headers["set-cookie"].lower()

