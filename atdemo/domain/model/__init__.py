"""Domain models."""

from atdemo.domain.model.oauth import (
    AuthorizationRequest,
    AuthorizedSession,
    CallbackResult,
    FlowState,
    SessionCredential,
)
from atdemo.domain.model.repo import (
    RECIPE_COLLECTION,
    FeedPost,
    Profile,
    Recipe,
    RecordRef,
    RepoRecord,
)

__all__ = [
    "AuthorizationRequest",
    "AuthorizedSession",
    "CallbackResult",
    "FeedPost",
    "FlowState",
    "Profile",
    "RECIPE_COLLECTION",
    "Recipe",
    "RecordRef",
    "RepoRecord",
    "SessionCredential",
]
