"""External capability interfaces: identity provider and content repository."""

from collections.abc import Mapping
from typing import Any

from atdemo.domain.model import (
    AuthorizationRequest,
    AuthorizedSession,
    FeedPost,
    FlowState,
    Profile,
    RecordRef,
    RepoRecord,
    SessionCredential,
)


class IdentityClient:
    """OAuth protocol mechanics for one identity network.

    Implementations raise ``ProviderError`` when the provider rejects a
    request and ``ProviderUnavailableError`` when it cannot be reached.
    They never touch the state or session stores.
    """

    def jwks(self) -> dict[str, Any]:
        """Public key set published at /.well-known/jwks.json."""
        raise NotImplementedError

    async def begin_authorization(
        self, handle: str, state: str, scope: str | None = None
    ) -> AuthorizationRequest:
        """Resolve the handle and prepare an authorization request.

        Args:
            handle: Handle or DID the user typed in
            state: Fresh flow identifier to embed in the request
            scope: Requested scope (client default if None)

        Returns:
            Redirect URL and the flow state to persist under ``state``
        """
        raise NotImplementedError

    async def complete_authorization(
        self, params: Mapping[str, str], flow: FlowState
    ) -> SessionCredential:
        """Validate callback parameters against the flow and exchange the code.

        Args:
            params: Callback query parameters, verbatim
            flow: Flow state stored when the flow started

        Returns:
            Renewable credential for the authenticated subject
        """
        raise NotImplementedError

    async def refresh(self, credential: SessionCredential) -> SessionCredential:
        """Refresh the credential if its access token is (nearly) expired.

        Returns:
            The same object when no refresh was needed, a new one otherwise
        """
        raise NotImplementedError


class RepositoryClient:
    """Authorized calls against the user's content repository."""

    async def get_profile(self, session: AuthorizedSession) -> Profile:
        """Fetch the authenticated actor's profile."""
        raise NotImplementedError

    async def get_author_feed(
        self, session: AuthorizedSession, limit: int = 5
    ) -> list[FeedPost]:
        """Fetch the authenticated actor's most recent posts."""
        raise NotImplementedError

    async def create_post(self, session: AuthorizedSession, text: str) -> RecordRef:
        """Publish a text post."""
        raise NotImplementedError

    async def put_record(
        self,
        session: AuthorizedSession,
        collection: str,
        rkey: str,
        record: dict[str, Any],
    ) -> RecordRef:
        """Create or replace a record in a collection."""
        raise NotImplementedError

    async def list_records(
        self, session: AuthorizedSession, collection: str, limit: int = 20
    ) -> list[RepoRecord]:
        """List records of a collection."""
        raise NotImplementedError
