"""Keyed record stores backed by SQL tables."""

from sqlalchemy import Column, Table, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from atdemo.domain.error import InfrastructureError
from atdemo.domain.repository import AuthSessionStore, AuthStateStore, KeyedRecordStore
from atdemo.persistence.tables import auth_session_table, auth_state_table

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlKeyedRecordStore(KeyedRecordStore):
    """KeyedRecordStore over a two-column (key, value) table.

    Each operation runs in its own transaction. Writes use the engine's
    native ``INSERT ... ON CONFLICT (key) DO UPDATE`` so concurrent first
    inserts of the same key never fail with a duplicate key.
    """

    def __init__(self, engine: AsyncEngine, table: Table, value_column: str) -> None:
        """Initialize store.

        Args:
            engine: SQLAlchemy async engine
            table: Table with a "key" primary key column
            value_column: Name of the text column holding the record

        Raises:
            ValueError: If the engine's dialect has no upsert support here
        """
        if engine.dialect.name not in _UPSERT_DIALECTS:
            raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")

        self.engine = engine
        self.table = table
        self._key: Column = table.c.key
        self._value: Column = table.c[value_column]
        self._insert = _UPSERT_DIALECTS[engine.dialect.name]

    async def get(self, key: str) -> str | None:
        """Get record by key."""
        stmt = select(self._value).where(self._key == key)
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"{self.table.name} read failed: {e}") from e

    async def set(self, key: str, value: str) -> None:
        """Insert or update record in one statement."""
        stmt = self._insert(self.table).values({self._key.name: key, self._value.name: value})
        stmt = stmt.on_conflict_do_update(
            index_elements=[self._key],
            set_={self._value.name: stmt.excluded[self._value.name]},
        )
        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as e:
            raise InfrastructureError(f"{self.table.name} write failed: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete record by key, reporting whether a row was removed."""
        stmt = delete(self.table).where(self._key == key)
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise InfrastructureError(f"{self.table.name} delete failed: {e}") from e


class SqlAuthStateStore(SqlKeyedRecordStore, AuthStateStore):
    """Flow state records in the auth_state table."""

    def __init__(self, engine: AsyncEngine) -> None:
        super().__init__(engine, auth_state_table, "state")


class SqlAuthSessionStore(SqlKeyedRecordStore, AuthSessionStore):
    """Session credential records in the auth_session table."""

    def __init__(self, engine: AsyncEngine) -> None:
        super().__init__(engine, auth_session_table, "session")
