"""Interface layer DI providers."""

from datetime import timedelta

from dishka import Scope, provide

from atdemo.config import Settings
from atdemo.domain.service import AuthFlowCoordinator
from atdemo.interface.api.authorizer import RequestAuthorizer
from atdemo.interface.api.session import BrowserSessionBinder
from atdemo.util.di.base import ProviderBase
from atdemo.util.seal import CookieSealer


class ProdInterfaceProvider(ProviderBase):
    """Browser session providers - concrete, no mocks needed."""

    scope = Scope.APP

    @provide
    def get_cookie_sealer(self, settings: Settings) -> CookieSealer:
        """Provide cookie sealer keyed by the configured secret."""
        return CookieSealer(
            secret=settings.cookie_secret,
            ttl=timedelta(days=settings.session.ttl_days),
        )

    @provide
    def get_session_binder(
        self, sealer: CookieSealer, settings: Settings
    ) -> BrowserSessionBinder:
        """Provide browser session binder."""
        return BrowserSessionBinder(sealer=sealer, settings=settings)

    @provide
    def get_request_authorizer(
        self, binder: BrowserSessionBinder, coordinator: AuthFlowCoordinator
    ) -> RequestAuthorizer:
        """Provide request authorizer."""
        return RequestAuthorizer(binder=binder, coordinator=coordinator)
