"""OAuth flow and session records.

The ``context`` of both records is provider-owned: only the identity client
that produced it knows its shape. The coordinator serializes the records as a
whole and never looks inside ``context``.
"""

from datetime import datetime, timezone
from typing import Any

from atdemo.domain.model.common import DomainModel


class FlowState(DomainModel):
    """An in-flight authorization attempt, keyed by its state parameter.

    Attributes:
        state: Flow identifier sent to the provider and echoed on callback
        issuer: Authorization server expected to answer the callback
        created_at: When the flow started
        expires_at: After this the callback is refused
        context: Opaque provider flow context (PKCE verifier, DPoP key, ...)
    """

    state: str
    issuer: str
    created_at: datetime
    expires_at: datetime
    context: dict[str, Any]

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the callback window has closed."""
        return self.expires_at <= (now or datetime.now(timezone.utc))


class SessionCredential(DomainModel):
    """Renewable credential for one authenticated subject.

    Attributes:
        sub: Subject DID (the record key)
        issuer: Authorization server that issued the tokens
        context: Opaque token set (access/refresh tokens, DPoP key, nonces)
    """

    sub: str
    issuer: str
    context: dict[str, Any]


class AuthorizationRequest(DomainModel):
    """Result of starting a flow: where to send the browser and what to remember."""

    url: str
    flow: FlowState


class CallbackResult(DomainModel):
    """Result of a completed flow."""

    subject: str
    credential: SessionCredential


class AuthorizedSession(DomainModel):
    """Capability handed to request handlers for an authenticated user."""

    did: str
    credential: SessionCredential
