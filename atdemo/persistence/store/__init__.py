"""Keyed record store implementations."""

from atdemo.persistence.store.inmemory import (
    InMemoryAuthSessionStore,
    InMemoryAuthStateStore,
    InMemoryKeyedRecordStore,
)
from atdemo.persistence.store.sql import (
    SqlAuthSessionStore,
    SqlAuthStateStore,
    SqlKeyedRecordStore,
)

__all__ = [
    "InMemoryAuthSessionStore",
    "InMemoryAuthStateStore",
    "InMemoryKeyedRecordStore",
    "SqlAuthSessionStore",
    "SqlAuthStateStore",
    "SqlKeyedRecordStore",
]
