"""Authorized XRPC calls against the user's PDS."""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from atdemo.adapter.bluesky.client import HTTP_TIMEOUT
from atdemo.adapter.bluesky.dpop import send_with_dpop
from atdemo.adapter.bluesky.session import TokenSet
from atdemo.adapter.error import CredentialFormatError, ProviderError, ProviderUnavailableError
from atdemo.domain.model import AuthorizedSession, FeedPost, Profile, RecordRef, RepoRecord
from atdemo.domain.service.identity import RepositoryClient
from atdemo.util.tid import next_tid

logger = logging.getLogger(__name__)

POST_COLLECTION = "app.bsky.feed.post"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class AtprotoRepositoryClient(RepositoryClient):
    """Repository client that signs every call with the session's DPoP key."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize client.

        Args:
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._transport = transport

    async def _xrpc(
        self,
        session: AuthorizedSession,
        method: str,
        nsid: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Call an XRPC method on the session's PDS.

        Raises:
            CredentialFormatError: If the session's token set is unreadable
            ProviderError: If the PDS rejects the call
            ProviderUnavailableError: If the PDS cannot be reached or fails
        """
        try:
            tokens = TokenSet.model_validate(session.credential.context)
            keypair = tokens.keypair()
        except ValueError as e:
            raise CredentialFormatError(f"Unreadable token set: {e}") from e

        url = f"{tokens.pds_url}/xrpc/{nsid}"
        kwargs: dict[str, Any] = {}
        if params is not None:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json

        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self._transport) as client:
            response, _ = await send_with_dpop(
                client,
                method,
                url,
                keypair,
                nonce=tokens.pds_nonce,
                access_token=tokens.access_token,
                **kwargs,
            )

        logger.debug(f"{nsid} response status: {response.status_code}")

        if response.status_code >= 500:
            raise ProviderUnavailableError(f"{nsid} failed (status {response.status_code})")
        if response.status_code != 200:
            raise ProviderError(
                f"{nsid} failed (status {response.status_code}): {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{nsid} returned invalid JSON") from e

    async def get_profile(self, session: AuthorizedSession) -> Profile:
        """Fetch the authenticated actor's profile."""
        data = await self._xrpc(
            session, "GET", "app.bsky.actor.getProfile", params={"actor": session.did}
        )
        return Profile(
            did=data.get("did", session.did),
            handle=data.get("handle", ""),
            display_name=data.get("displayName"),
            followers_count=data.get("followersCount", 0),
            follows_count=data.get("followsCount", 0),
            posts_count=data.get("postsCount", 0),
        )

    async def get_author_feed(
        self, session: AuthorizedSession, limit: int = 5
    ) -> list[FeedPost]:
        """Fetch the authenticated actor's most recent posts."""
        data = await self._xrpc(
            session,
            "GET",
            "app.bsky.feed.getAuthorFeed",
            params={"actor": session.did, "limit": limit},
        )

        posts = []
        for item in data.get("feed") or []:
            post = (item or {}).get("post") or {}
            if not post.get("uri"):
                # Malformed item, e.g. "post": null
                continue
            record = post.get("record") or {}
            posts.append(
                FeedPost(
                    uri=post["uri"],
                    text=record.get("text") or "",
                    created_at=record.get("createdAt"),
                )
            )
        return posts

    async def create_post(self, session: AuthorizedSession, text: str) -> RecordRef:
        """Publish a text post."""
        data = await self._xrpc(
            session,
            "POST",
            "com.atproto.repo.createRecord",
            json={
                "repo": session.did,
                "collection": POST_COLLECTION,
                "rkey": next_tid(),
                "record": {
                    "$type": POST_COLLECTION,
                    "text": text,
                    "createdAt": _now_iso(),
                },
            },
        )
        return RecordRef(uri=data["uri"], cid=data.get("cid"))

    async def put_record(
        self,
        session: AuthorizedSession,
        collection: str,
        rkey: str,
        record: dict[str, Any],
    ) -> RecordRef:
        """Create or replace a record in a collection."""
        data = await self._xrpc(
            session,
            "POST",
            "com.atproto.repo.putRecord",
            json={
                "repo": session.did,
                "collection": collection,
                "rkey": rkey,
                "record": record,
            },
        )
        return RecordRef(uri=data["uri"], cid=data.get("cid"))

    async def list_records(
        self, session: AuthorizedSession, collection: str, limit: int = 20
    ) -> list[RepoRecord]:
        """List records of a collection."""
        data = await self._xrpc(
            session,
            "GET",
            "com.atproto.repo.listRecords",
            params={"repo": session.did, "collection": collection, "limit": limit},
        )
        return [
            RepoRecord(uri=r.get("uri", ""), value=r.get("value") or {})
            for r in data.get("records") or []
            if r
        ]


# Mock implementation for testing
class MockRepositoryClient(RepositoryClient):
    """In-memory repository keyed by DID, for development and testing."""

    def __init__(self) -> None:
        self.posts: dict[str, list[FeedPost]] = {}
        self.records: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}

    async def get_profile(self, session: AuthorizedSession) -> Profile:
        """Return mock profile."""
        name = session.did.rsplit(":", 1)[-1]
        return Profile(
            did=session.did,
            handle=f"{name}.mock.test",
            display_name=f"Mock {name}",
            posts_count=len(self.posts.get(session.did, [])),
        )

    async def get_author_feed(
        self, session: AuthorizedSession, limit: int = 5
    ) -> list[FeedPost]:
        """Return most recent mock posts first."""
        return list(reversed(self.posts.get(session.did, [])))[:limit]

    async def create_post(self, session: AuthorizedSession, text: str) -> RecordRef:
        """Store mock post."""
        uri = f"at://{session.did}/{POST_COLLECTION}/{next_tid()}"
        self.posts.setdefault(session.did, []).append(
            FeedPost(uri=uri, text=text, created_at=_now_iso())
        )
        return RecordRef(uri=uri, cid="mock-cid")

    async def put_record(
        self,
        session: AuthorizedSession,
        collection: str,
        rkey: str,
        record: dict[str, Any],
    ) -> RecordRef:
        """Store mock record."""
        collections = self.records.setdefault(session.did, {})
        collections.setdefault(collection, {})[rkey] = record
        return RecordRef(uri=f"at://{session.did}/{collection}/{rkey}", cid="mock-cid")

    async def list_records(
        self, session: AuthorizedSession, collection: str, limit: int = 20
    ) -> list[RepoRecord]:
        """List mock records, newest record key first."""
        stored = self.records.get(session.did, {}).get(collection, {})
        return [
            RepoRecord(uri=f"at://{session.did}/{collection}/{rkey}", value=value)
            for rkey, value in sorted(stored.items(), reverse=True)
        ][:limit]
