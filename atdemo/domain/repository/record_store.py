"""Keyed record store interfaces."""

from abc import ABC, abstractmethod


class KeyedRecordStore(ABC):
    """Durable mapping from a string key to an opaque serialized record.

    Records are text blobs; callers own encoding and decoding, so one
    implementation serves every record shape.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Find a record by key.

        Args:
            key: Record key

        Returns:
            The stored record, or None if absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Insert or replace the record for key in a single atomic operation.

        Args:
            key: Record key
            value: Serialized record
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete the record for key. Deleting an absent key is not an error.

        Args:
            key: Record key

        Returns:
            True if this call removed a record, False if none existed
        """
        pass


class AuthStateStore(KeyedRecordStore):
    """In-flight authorization attempts, keyed by flow identifier."""

    pass


class AuthSessionStore(KeyedRecordStore):
    """Renewable session credentials, keyed by subject DID."""

    pass
