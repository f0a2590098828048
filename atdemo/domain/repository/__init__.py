"""Repository interfaces.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from atdemo.domain.repository.record_store import (
    AuthSessionStore,
    AuthStateStore,
    KeyedRecordStore,
)

__all__ = [
    "AuthSessionStore",
    "AuthStateStore",
    "KeyedRecordStore",
]
