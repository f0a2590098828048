"""Mock Bluesky providers for testing."""

from dishka import Scope, provide

from atdemo.adapter.bluesky.client import MockIdentityClient
from atdemo.adapter.bluesky.repository import MockRepositoryClient
from atdemo.domain.service import IdentityClient, RepositoryClient
from atdemo.util.di.infrastructure.bluesky import BlueskyProvider


class MockBlueskyProvider(BlueskyProvider):
    """Mock Bluesky provider using mock identity and repository clients."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_identity_client(self) -> IdentityClient:
        """Provide mock identity client."""
        return MockIdentityClient()

    @provide(scope=Scope.APP)
    def get_repository_client(self) -> RepositoryClient:
        """Provide mock repository client."""
        return MockRepositoryClient()
