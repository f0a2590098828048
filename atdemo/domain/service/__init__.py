"""Domain services."""

from .auth_flow import AuthFlowCoordinator
from .base import Service
from .identity import IdentityClient, RepositoryClient

__all__ = [
    "AuthFlowCoordinator",
    "IdentityClient",
    "RepositoryClient",
    "Service",
]
