"""Settings provider."""

from dishka import Scope, provide

from atdemo.config import Settings
from atdemo.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """One ``Settings`` per container, read from the environment and ``.env``.

    Tests that change settings set environment variables before the
    container first resolves them.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return Settings()
