"""Mock providers for testing."""

from .bluesky import MockBlueskyProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockBlueskyProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
