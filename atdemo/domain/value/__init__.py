"""Domain value objects."""

from atdemo.domain.value.common import RootValueObject
from atdemo.domain.value.types import BlueskyDID, Handle

__all__ = [
    "BlueskyDID",
    "Handle",
    "RootValueObject",
]
