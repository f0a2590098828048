"""Get home page data use case."""

import logfire
from pydantic import BaseModel

from atdemo.domain.model import AuthorizedSession, FeedPost, Profile
from atdemo.domain.service import RepositoryClient

from ..base import BaseUseCase


class GetHomeRequest(BaseModel):
    """Get home request."""

    session: AuthorizedSession
    feed_limit: int = 5


class GetHomeResponse(BaseModel):
    """Get home response."""

    profile: Profile
    posts: list[FeedPost]


class GetHomeUseCase(BaseUseCase[GetHomeRequest, GetHomeResponse]):
    """Use case for loading the signed-in user's profile and recent posts."""

    def __init__(self, repository_client: RepositoryClient) -> None:
        """Initialize get home use case.

        Args:
            repository_client: Authorized repository client
        """
        self.repository_client = repository_client

    async def execute(self, request: GetHomeRequest) -> GetHomeResponse:
        """Fetch profile and author feed.

        Raises:
            AdapterError: If the PDS rejects the calls or cannot be reached
        """
        with logfire.span("get_home.execute", did=request.session.did):
            profile = await self.repository_client.get_profile(request.session)
            posts = await self.repository_client.get_author_feed(
                request.session, limit=request.feed_limit
            )

        return GetHomeResponse(profile=profile, posts=posts)
