"""Mockable infrastructure providers.

The prod subclasses are imported here so ``get_provider`` can find them
through ``__subclasses__()``; mocks live under ``tests/di``.
"""

from .bluesky import BlueskyProvider, ProdBlueskyProvider
from .persistence import PersistenceProvider, ProdPersistenceProvider

__all__ = [
    "BlueskyProvider",
    "PersistenceProvider",
    "ProdBlueskyProvider",
    "ProdPersistenceProvider",
]
