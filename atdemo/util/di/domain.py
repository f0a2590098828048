"""Domain layer DI providers."""

from dishka import Scope, provide

from atdemo.config import Settings
from atdemo.domain.repository import AuthSessionStore, AuthStateStore
from atdemo.domain.service import AuthFlowCoordinator, IdentityClient
from atdemo.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    The coordinator holds no per-request state and is shared by all requests.
    """

    scope = Scope.APP

    @provide
    def get_auth_flow_coordinator(
        self,
        identity_client: IdentityClient,
        state_store: AuthStateStore,
        session_store: AuthSessionStore,
        settings: Settings,
    ) -> AuthFlowCoordinator:
        """Provide OAuth flow coordinator."""
        return AuthFlowCoordinator(
            identity_client=identity_client,
            state_store=state_store,
            session_store=session_store,
            default_scope=settings.oauth.scope,
        )
