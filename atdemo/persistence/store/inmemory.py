"""In-memory keyed record stores for testing."""

from atdemo.domain.repository import AuthSessionStore, AuthStateStore, KeyedRecordStore


class InMemoryKeyedRecordStore(KeyedRecordStore):
    """In-memory implementation of KeyedRecordStore for testing."""

    def __init__(self) -> None:
        self._records: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        """Get record by key."""
        return self._records.get(key)

    async def set(self, key: str, value: str) -> None:
        """Insert or replace record."""
        self._records[key] = value

    async def delete(self, key: str) -> bool:
        """Delete record by key."""
        return self._records.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._records)


class InMemoryAuthStateStore(InMemoryKeyedRecordStore, AuthStateStore):
    """In-memory flow state store."""

    pass


class InMemoryAuthSessionStore(InMemoryKeyedRecordStore, AuthSessionStore):
    """In-memory session credential store."""

    pass
