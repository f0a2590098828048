"""Base use case."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class BaseUseCase(ABC, Generic[RequestT, ResponseT]):
    """One user-facing action run on behalf of an authorized session."""

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT: ...
