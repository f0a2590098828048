"""Dependency injection wiring."""

from atdemo.util.di.application import ProdApplicationProvider
from atdemo.util.di.base import Component, ProviderBase
from atdemo.util.di.core import ProdConfigProvider
from atdemo.util.di.domain import ProdDomainProvider
from atdemo.util.di.infrastructure import (
    BlueskyProvider,
    PersistenceProvider,
    ProdBlueskyProvider,
    ProdPersistenceProvider,
)
from atdemo.util.di.interface import ProdInterfaceProvider

# Bluesky and persistence resolve to a prod or mock subclass; the rest are concrete
PROVIDERS: list[type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    ProdInterfaceProvider,
    BlueskyProvider,
    PersistenceProvider,
]


def get_provider(base: type[ProviderBase], use_mock: bool = False) -> type[ProviderBase]:
    """Pick the provider class to instantiate for ``base``.

    Args:
        base: Entry of ``PROVIDERS``
        use_mock: Select the ``__is_mock__`` subclass of a mockable component

    Returns:
        ``base`` itself when it has no subclasses, else the matching subclass

    Raises:
        ValueError: If the component has no implementation of the requested kind
    """
    subclasses = base.__subclasses__()
    if not subclasses:
        return base

    for candidate in subclasses:
        if candidate.__is_mock__ == use_mock:
            return candidate

    kind = "mock" if use_mock else "production"
    raise ValueError(
        f"No {kind} implementation for {base.__mock_component__ or base.__name__}"
    )


__all__ = [
    "BlueskyProvider",
    "Component",
    "PROVIDERS",
    "PersistenceProvider",
    "ProdApplicationProvider",
    "ProdBlueskyProvider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdInterfaceProvider",
    "ProdPersistenceProvider",
    "ProviderBase",
    "get_provider",
]
