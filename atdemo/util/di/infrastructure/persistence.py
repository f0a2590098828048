"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from atdemo.config import Settings
from atdemo.domain.repository import AuthSessionStore, AuthStateStore
from atdemo.persistence.database import create_engine, migrate_to_latest
from atdemo.persistence.store import SqlAuthSessionStore, SqlAuthStateStore
from atdemo.util.di.base import ProviderBase
from atdemo.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider backed by a SQL database."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine with the schema in place.

        The engine is disposed when the container closes.
        """
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        await migrate_to_latest(engine)
        try:
            yield engine
        finally:
            await engine.dispose()
            logfire.info("Database engine disposed")

    @provide(scope=Scope.APP)
    def get_auth_state_store(self, engine: AsyncEngine) -> AuthStateStore:
        """Provide pending-flow store."""
        return SqlAuthStateStore(engine)

    @provide(scope=Scope.APP)
    def get_auth_session_store(self, engine: AsyncEngine) -> AuthSessionStore:
        """Provide credential store."""
        return SqlAuthSessionStore(engine)
