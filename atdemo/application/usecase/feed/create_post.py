"""Create post use case."""

import logfire
from pydantic import BaseModel

from atdemo.domain.error import ValidationError
from atdemo.domain.model import AuthorizedSession
from atdemo.domain.service import RepositoryClient

from ..base import BaseUseCase

# app.bsky.feed.post text limit (graphemes; characters are a close bound)
MAX_POST_LENGTH = 300


class CreatePostRequest(BaseModel):
    """Create post request."""

    session: AuthorizedSession
    text: str | None


class CreatePostResponse(BaseModel):
    """Create post response."""

    uri: str
    cid: str | None


class CreatePostUseCase(BaseUseCase[CreatePostRequest, CreatePostResponse]):
    """Use case for publishing a text post."""

    def __init__(self, repository_client: RepositoryClient) -> None:
        """Initialize create post use case.

        Args:
            repository_client: Authorized repository client
        """
        self.repository_client = repository_client

    async def execute(self, request: CreatePostRequest) -> CreatePostResponse:
        """Validate text and create the post record.

        Raises:
            ValidationError: If text is missing or too long
            AdapterError: If the PDS rejects the write or cannot be reached
        """
        text = (request.text or "").strip()
        if not text:
            raise ValidationError("Post text is required")
        if len(text) > MAX_POST_LENGTH:
            raise ValidationError(f"Post text must be at most {MAX_POST_LENGTH} characters")

        with logfire.span("create_post.execute", did=request.session.did):
            ref = await self.repository_client.create_post(request.session, text)
            logfire.info("Post created", uri=ref.uri)

        return CreatePostResponse(uri=ref.uri, cid=ref.cid)
