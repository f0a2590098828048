"""Bluesky infrastructure providers."""

from dishka import Scope, provide

from atdemo.adapter.bluesky.client import AtprotoIdentityClient
from atdemo.adapter.bluesky.repository import AtprotoRepositoryClient
from atdemo.config import Settings
from atdemo.domain.service import IdentityClient, RepositoryClient
from atdemo.util.di.base import ProviderBase


class BlueskyProvider(ProviderBase):
    """Bluesky component base."""

    __mock_component__ = "bluesky"


class ProdBlueskyProvider(BlueskyProvider):
    """Production AT Protocol provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_identity_client(self, settings: Settings) -> IdentityClient:
        """Provide AT Protocol OAuth client.

        The client_id is the URL of the published client metadata document.

        Returns:
            Identity client
        """
        return AtprotoIdentityClient(
            client_id=settings.oauth.client_id,
            redirect_uri=settings.oauth.redirect_uri,
            default_scope=settings.oauth.scope,
        )

    @provide(scope=Scope.APP)
    def get_repository_client(self) -> RepositoryClient:
        """Provide PDS repository client."""
        return AtprotoRepositoryClient()
