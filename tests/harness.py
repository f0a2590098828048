"""Test harness for unit, integration and E2E tests.

Nothing external is needed: mocks replace the AT Protocol network and the
real persistence component runs against in-memory SQLite by default.
Settings are loaded from environment variables (configure via .env or export).
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from atdemo.interface.api.app import create_app
from atdemo.util.di import Component
from tests.di import build_test_container

BASE_URL = "http://testserver"


def create_env_fixture(unmock: set[Component] | None = None):
    """Factory for creating test environment fixtures.

    Creates a pytest fixture that:
    - Builds a test container with specified unmocking
    - Yields request-scoped container for service access
    - Closes the container afterwards

    Args:
        unmock: Components to use real implementations for

    Returns:
        Pytest fixture function that yields AsyncContainer

    Usage:
        # Unit tests - everything mocked
        unit_env = create_env_fixture()

        # Integration tests - real persistence
        integration_env = create_env_fixture(unmock={"persistence"})

        @pytest.mark.asyncio
        async def test_restore(integration_env):
            coordinator = await integration_env.get(AuthFlowCoordinator)
            assert await coordinator.restore("did:plc:nobody") is None
    """

    @pytest_asyncio.fixture
    async def _test_environment():
        container = build_test_container(unmock=unmock or set())

        async with container() as request_container:
            yield request_container

        await container.close()

    return _test_environment


class AppEnvironment:
    """An application wired to a test container, plus a browser-like client."""

    def __init__(self, container, client: AsyncClient):
        self.container = container
        self.client = client

    async def get(self, dependency_type):
        """Resolve an APP-scoped dependency (the same instance routes see)."""
        return await self.container.get(dependency_type)


def create_app_fixture(unmock: set[Component] | None = None):
    """Factory for fixtures that serve the app over an in-process transport.

    The client keeps cookies between requests like a browser and never
    follows redirects, so tests can assert on each 302.
    """

    @pytest_asyncio.fixture
    async def _app_environment():
        container = build_test_container(unmock=unmock or set())
        app = create_app(container)

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url=BASE_URL
        ) as client:
            yield AppEnvironment(container, client)

        await container.close()

    return _app_environment
