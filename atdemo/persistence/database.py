"""Database connection and schema management.

Provides the async database engine and creates the schema at startup.
"""

import logging
import tempfile
import weakref
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from atdemo.config import Settings
from atdemo.persistence.tables import metadata

logger = logging.getLogger(__name__)

# Seconds a writer waits for another connection's write lock
SQLITE_BUSY_TIMEOUT = 30


def is_memory_sqlite(url: str) -> bool:
    """Whether the URL names a private in-memory SQLite database."""
    return url.startswith("sqlite") and (":memory:" in url or url.endswith("://"))


def create_engine(settings: Settings) -> AsyncEngine:
    """Create async database engine.

    An in-memory SQLite URL is served from a scratch database file that
    lives as long as the engine: each pooled connection then runs its own
    transaction, which a single shared ``:memory:`` connection cannot do.

    Args:
        settings: Application settings with database URL

    Returns:
        Configured async engine
    """
    url = settings.database_url

    if is_memory_sqlite(url):
        return _create_scratch_sqlite_engine(echo=settings.debug)

    engine = create_async_engine(
        url,
        echo=settings.debug,  # Log SQL queries in debug mode
        pool_pre_ping=True,  # Verify connections before using
    )
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)
    return engine


def _create_scratch_sqlite_engine(echo: bool) -> AsyncEngine:
    scratch = tempfile.TemporaryDirectory(prefix="atdemo-")
    path = Path(scratch.name) / "atdemo.sqlite3"

    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", echo=echo)
    _configure_sqlite(engine)

    # The directory goes away with the engine (or at interpreter exit)
    weakref.finalize(engine.sync_engine, scratch.cleanup)
    logger.debug(f"Scratch SQLite database at {path}")
    return engine


def _configure_sqlite(engine: AsyncEngine) -> None:
    """WAL journal (readers never block the writer) and a busy wait for writers."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT * 1000}")
        cursor.close()


async def migrate_to_latest(engine: AsyncEngine) -> None:
    """Create the auth_state and auth_session tables if missing.

    Args:
        engine: Database engine
    """
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    logger.info(f"Database schema ready ({engine.dialect.name})")
