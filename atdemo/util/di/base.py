"""Base class for dishka providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Infrastructure pieces tests can swap for in-process fakes
Component = Literal["bluesky", "persistence"]


class ProviderBase(Provider):
    """Provider with mock metadata.

    A mockable component is a base class with ``__mock_component__`` set and
    two subclasses, one of them flagged ``__is_mock__``. Providers without
    subclasses are used as they are.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
