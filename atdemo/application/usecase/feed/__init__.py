"""Profile and feed use cases."""

from .create_post import CreatePostUseCase
from .get_home import GetHomeUseCase

__all__ = ["CreatePostUseCase", "GetHomeUseCase"]
