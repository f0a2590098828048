"""Wrapper base for single-value identifiers."""

from typing import Generic, TypeVar

from pydantic import ConfigDict, RootModel

T = TypeVar("T")


class RootValueObject(RootModel[T], Generic[T]):
    """Immutable wrapper around one validated primitive.

    Equality and hashing follow the wrapped value, so a ``BlueskyDID`` can
    be used directly as a store key via ``str()``.
    """

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.root)
