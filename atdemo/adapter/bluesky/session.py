"""Provider-owned context stored inside flow and session records.

The coordinator persists ``FlowState.context`` and
``SessionCredential.context`` as opaque dicts; these models give them their
shape on the way in and out of the AT Protocol client.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel

from atdemo.adapter.bluesky.dpop import DPoPKeyPair

# Refresh a little before the server would reject the token
REFRESH_LEEWAY = timedelta(seconds=60)


class FlowContext(BaseModel):
    """Secrets and endpoints remembered between PAR and the callback.

    Attributes:
        pkce_verifier: PKCE code verifier (sent at token exchange)
        dpop_jwk: Private DPoP key the tokens will be bound to
        expected_did: DID the user claimed at login; the token sub must match
        pds_url: PDS of the expected DID
        token_endpoint: Authorization server token endpoint
        auth_server_nonce: Latest DPoP nonce from the authorization server
        scope: Scope requested in the PAR
    """

    pkce_verifier: str
    dpop_jwk: dict[str, Any]
    expected_did: str
    pds_url: str
    token_endpoint: str
    auth_server_nonce: str | None = None
    scope: str

    def keypair(self) -> DPoPKeyPair:
        """Rebuild the DPoP keypair."""
        return DPoPKeyPair.from_jwk(self.dpop_jwk)


class TokenSet(BaseModel):
    """DPoP-bound token set for one subject.

    Attributes:
        sub: Subject DID the tokens were issued to
        access_token: Access token (sent as ``Authorization: DPoP ...``)
        refresh_token: Refresh token, if the server issued one
        scope: Granted scope
        expires_at: Access token expiry (None if the server gave no lifetime)
        token_endpoint: Where to refresh
        pds_url: Resource server for repository calls
        dpop_jwk: Private DPoP key the tokens are bound to
        auth_server_nonce: Latest DPoP nonce from the authorization server
        pds_nonce: Latest DPoP nonce from the PDS
    """

    sub: str
    access_token: str
    refresh_token: str | None = None
    scope: str
    expires_at: datetime | None = None
    token_endpoint: str
    pds_url: str
    dpop_jwk: dict[str, Any]
    auth_server_nonce: str | None = None
    pds_nonce: str | None = None

    def keypair(self) -> DPoPKeyPair:
        """Rebuild the DPoP keypair."""
        return DPoPKeyPair.from_jwk(self.dpop_jwk)

    def expires_soon(self, now: datetime | None = None) -> bool:
        """Whether the access token is expired or about to be."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at - REFRESH_LEEWAY <= now

    @classmethod
    def from_token_response(
        cls,
        data: dict[str, Any],
        *,
        token_endpoint: str,
        pds_url: str,
        keypair: DPoPKeyPair,
        auth_server_nonce: str | None,
        pds_nonce: str | None = None,
        previous_refresh_token: str | None = None,
    ) -> "TokenSet":
        """Build from a token endpoint JSON response.

        Raises:
            ValueError: If required fields are missing
        """
        access_token = data.get("access_token")
        sub = data.get("sub")
        scope = data.get("scope")
        if not access_token or not sub or not scope:
            raise ValueError("Token response missing access_token, sub or scope")

        if str(data.get("token_type", "DPoP")).lower() != "dpop":
            raise ValueError(f"Unexpected token_type: {data.get('token_type')}")

        expires_in = data.get("expires_in")
        expires_at = (
            datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
            if expires_in is not None
            else None
        )

        return cls(
            sub=sub,
            access_token=access_token,
            refresh_token=data.get("refresh_token") or previous_refresh_token,
            scope=scope,
            expires_at=expires_at,
            token_endpoint=token_endpoint,
            pds_url=pds_url,
            dpop_jwk=keypair.to_jwk(),
            auth_server_nonce=auth_server_nonce,
            pds_nonce=pds_nonce,
        )
