"""AT Protocol OAuth identity client."""

import logging
import secrets
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

import httpx

from atdemo.adapter.bluesky.dpop import DPoPKeyPair, send_with_dpop
from atdemo.adapter.bluesky.identity import (
    get_pds_endpoint,
    resolve_did_document,
    resolve_identifier,
)
from atdemo.adapter.bluesky.metadata import AuthServerMetadata, discover_auth_server
from atdemo.adapter.bluesky.pkce import generate_pkce_pair
from atdemo.adapter.bluesky.session import FlowContext, TokenSet
from atdemo.adapter.error import (
    CredentialFormatError,
    IdentityResolutionError,
    ProviderError,
    ProviderUnavailableError,
)
from atdemo.domain.model import AuthorizationRequest, FlowState, SessionCredential
from atdemo.domain.service.identity import IdentityClient

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 10.0

# Callback window for one authorization attempt
FLOW_TTL = timedelta(minutes=15)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("error_description") or body.get("error") or body)
    return str(body)


class AtprotoIdentityClient(IdentityClient):
    """AT Protocol OAuth client (public client, PKCE + PAR + DPoP).

    Holds no per-user state: everything a later step needs goes into the
    returned ``FlowState``/``SessionCredential`` context and is handed back by
    the coordinator.
    """

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        default_scope: str = "atproto",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize AT Protocol OAuth client.

        Args:
            client_id: OAuth client ID (metadata URL or loopback client id)
            redirect_uri: OAuth callback URL
            default_scope: Scope requested when none is given
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._client_id = client_id
        self._redirect_uri = redirect_uri
        self._default_scope = default_scope
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self._transport)

    def jwks(self) -> dict[str, Any]:
        """Public clients authenticate with PKCE only and publish no keys."""
        return {"keys": []}

    async def begin_authorization(
        self, handle: str, state: str, scope: str | None = None
    ) -> AuthorizationRequest:
        """Resolve the account and push the authorization request.

        Steps:
        1. Resolve handle to DID, DID to document, document to PDS
        2. Discover the authorization server protecting the PDS
        3. Generate PKCE pair and a fresh DPoP keypair
        4. Make the Pushed Authorization Request (PAR)
        5. Build the browser redirect URL

        Raises:
            IdentityResolutionError: If the handle or DID cannot be resolved
            ProviderError: If discovery or PAR is rejected
            ProviderUnavailableError: If a server cannot be reached
        """
        scope = scope or self._default_scope
        logger.info(f"OAuth login initiated for account: {handle}")

        async with self._http() as client:
            did = await resolve_identifier(client, handle)
            did_document = await resolve_did_document(client, did)
            pds_url = get_pds_endpoint(did_document)
            logger.info(f"Resolved {handle} to {did} on {pds_url}")

            metadata = await discover_auth_server(client, pds_url)
            logger.info(f"Using auth server: {metadata.issuer}")

            pkce_verifier, pkce_challenge = generate_pkce_pair()
            keypair = DPoPKeyPair()

            request_uri, nonce = await self._push_authorization_request(
                client,
                metadata,
                pkce_challenge=pkce_challenge,
                keypair=keypair,
                login_hint=handle,
                state=state,
                scope=scope,
            )

        now = datetime.now(timezone.utc)
        context = FlowContext(
            pkce_verifier=pkce_verifier,
            dpop_jwk=keypair.to_jwk(),
            expected_did=str(did),
            pds_url=pds_url,
            token_endpoint=metadata.token_endpoint,
            auth_server_nonce=nonce,
            scope=scope,
        )
        flow = FlowState(
            state=state,
            issuer=metadata.issuer,
            created_at=now,
            expires_at=now + FLOW_TTL,
            context=context.model_dump(mode="json"),
        )

        query = urlencode({"client_id": self._client_id, "request_uri": request_uri})
        return AuthorizationRequest(
            url=f"{metadata.authorization_endpoint}?{query}", flow=flow
        )

    async def _push_authorization_request(
        self,
        client: httpx.AsyncClient,
        metadata: AuthServerMetadata,
        pkce_challenge: str,
        keypair: DPoPKeyPair,
        login_hint: str,
        state: str,
        scope: str,
    ) -> tuple[str, str | None]:
        """Make Pushed Authorization Request (PAR).

        Returns:
            Tuple of (request_uri, DPoP nonce from server)

        Raises:
            ProviderError: If the server rejects the request
        """
        par_endpoint = metadata.pushed_authorization_request_endpoint
        data = {
            "client_id": self._client_id,
            "response_type": "code",
            "code_challenge": pkce_challenge,
            "code_challenge_method": "S256",
            "redirect_uri": self._redirect_uri,
            "scope": scope,
            "state": state,
            "login_hint": login_hint,
        }

        response, nonce = await send_with_dpop(
            client, "POST", par_endpoint, keypair, data=data
        )
        logger.debug(f"PAR response status: {response.status_code}")

        if response.status_code >= 500:
            raise ProviderUnavailableError(
                f"PAR request failed (status {response.status_code})"
            )
        if response.status_code not in (200, 201):
            raise ProviderError(
                f"PAR request failed (status {response.status_code}): "
                f"{_error_detail(response)}"
            )

        try:
            request_uri = response.json().get("request_uri")
        except ValueError as e:
            raise ProviderError("PAR response is not JSON") from e
        if not request_uri:
            raise ProviderError("Missing request_uri in PAR response")

        return request_uri, nonce

    async def complete_authorization(
        self, params: Mapping[str, str], flow: FlowState
    ) -> SessionCredential:
        """Check the callback against the flow and exchange the code.

        Raises:
            CredentialFormatError: If the flow context is unreadable
            ProviderError: If the user denied access, the issuer does not
                match, or the token exchange is rejected
            ProviderUnavailableError: If the token endpoint cannot be reached
        """
        try:
            context = FlowContext.model_validate(flow.context)
            keypair = context.keypair()
        except ValueError as e:
            raise CredentialFormatError(f"Unreadable flow context: {e}") from e

        error = params.get("error")
        if error:
            raise ProviderError(
                f"Authorization denied: {params.get('error_description') or error}"
            )

        iss = params.get("iss")
        if iss != flow.issuer:
            raise ProviderError(f"Issuer mismatch: expected {flow.issuer}, got {iss}")

        code = params.get("code")
        if not code:
            raise ProviderError("Missing authorization code")

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._redirect_uri,
            "client_id": self._client_id,
            "code_verifier": context.pkce_verifier,
        }

        async with self._http() as client:
            response, nonce = await send_with_dpop(
                client,
                "POST",
                context.token_endpoint,
                keypair,
                nonce=context.auth_server_nonce,
                data=data,
            )

        tokens = self._parse_token_response(
            response,
            token_endpoint=context.token_endpoint,
            pds_url=context.pds_url,
            keypair=keypair,
            auth_server_nonce=nonce,
        )

        # The account that logged in must be the one the user asked for
        if tokens.sub != context.expected_did:
            raise ProviderError(
                f"Token sub mismatch: expected {context.expected_did}, got {tokens.sub}"
            )

        logger.info(f"Token exchange successful for {tokens.sub}, scope: {tokens.scope}")
        return SessionCredential(
            sub=tokens.sub,
            issuer=flow.issuer,
            context=tokens.model_dump(mode="json"),
        )

    async def refresh(self, credential: SessionCredential) -> SessionCredential:
        """Refresh the access token when it is (about to be) expired.

        Raises:
            CredentialFormatError: If the stored token set is unreadable
            ProviderError: If there is no refresh token or the server
                rejects it
            ProviderUnavailableError: If the token endpoint cannot be reached
        """
        try:
            tokens = TokenSet.model_validate(credential.context)
            keypair = tokens.keypair()
        except ValueError as e:
            raise CredentialFormatError(f"Unreadable token set: {e}") from e

        if not tokens.expires_soon():
            return credential

        if not tokens.refresh_token:
            raise ProviderError("Access token expired and no refresh token was issued")

        logger.info(f"Refreshing access token for {credential.sub}")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": tokens.refresh_token,
            "client_id": self._client_id,
        }

        async with self._http() as client:
            response, nonce = await send_with_dpop(
                client,
                "POST",
                tokens.token_endpoint,
                keypair,
                nonce=tokens.auth_server_nonce,
                data=data,
            )

        refreshed = self._parse_token_response(
            response,
            token_endpoint=tokens.token_endpoint,
            pds_url=tokens.pds_url,
            keypair=keypair,
            auth_server_nonce=nonce,
            pds_nonce=tokens.pds_nonce,
            previous_refresh_token=tokens.refresh_token,
        )

        if refreshed.sub != credential.sub:
            raise ProviderError(
                f"Refreshed token sub mismatch: expected {credential.sub}, got {refreshed.sub}"
            )

        return SessionCredential(
            sub=credential.sub,
            issuer=credential.issuer,
            context=refreshed.model_dump(mode="json"),
        )

    def _parse_token_response(
        self,
        response: httpx.Response,
        *,
        token_endpoint: str,
        pds_url: str,
        keypair: DPoPKeyPair,
        auth_server_nonce: str | None,
        pds_nonce: str | None = None,
        previous_refresh_token: str | None = None,
    ) -> TokenSet:
        logger.debug(f"Token endpoint response status: {response.status_code}")

        if response.status_code >= 500:
            raise ProviderUnavailableError(
                f"Token request failed (status {response.status_code})"
            )
        if response.status_code != 200:
            raise ProviderError(
                f"Token request failed (status {response.status_code}): "
                f"{_error_detail(response)}"
            )

        try:
            tokens = TokenSet.from_token_response(
                response.json(),
                token_endpoint=token_endpoint,
                pds_url=pds_url,
                keypair=keypair,
                auth_server_nonce=auth_server_nonce,
                pds_nonce=pds_nonce,
                previous_refresh_token=previous_refresh_token,
            )
        except ValueError as e:
            raise ProviderError(f"Invalid token response: {e}") from e

        if "atproto" not in tokens.scope.split():
            raise ProviderError(f"Token response scope missing 'atproto': {tokens.scope}")

        return tokens


# Mock implementation for testing
class MockIdentityClient(IdentityClient):
    """Mock AT Protocol identity client for development and testing.

    Behaviour switches:
        - handles missing from ``known_handles`` fail resolution
        - callback ``code=invalid`` fails the token exchange
        - credential context ``revoked=True`` fails refresh (provider rejects)
        - credential context ``unreachable=True`` fails refresh (transport)
        - credential context ``expired=True`` is refreshed into a new credential
    """

    ISSUER = "https://auth.mock.test"
    AUTHORIZE_URL = f"{ISSUER}/oauth/authorize"

    def __init__(self, known_handles: dict[str, str] | None = None) -> None:
        self.known_handles = known_handles or {
            "alice.bsky.social": "did:plc:abc123",
            "bob.bsky.social": "did:plc:bob456",
        }
        self.refresh_calls = 0

    def jwks(self) -> dict[str, Any]:
        """Mock public key set."""
        return {"keys": []}

    async def begin_authorization(
        self, handle: str, state: str, scope: str | None = None
    ) -> AuthorizationRequest:
        """Return mock authorization URL for a known handle."""
        if handle.startswith("did:"):
            did = handle
        else:
            did = self.known_handles.get(handle.lstrip("@").lower())
        if did is None:
            raise IdentityResolutionError(f"Failed to resolve handle {handle}")

        now = datetime.now(timezone.utc)
        flow = FlowState(
            state=state,
            issuer=self.ISSUER,
            created_at=now,
            expires_at=now + FLOW_TTL,
            context={"did": did, "scope": scope or "atproto"},
        )
        query = urlencode({"state": state, "login_hint": handle})
        return AuthorizationRequest(url=f"{self.AUTHORIZE_URL}?{query}", flow=flow)

    async def complete_authorization(
        self, params: Mapping[str, str], flow: FlowState
    ) -> SessionCredential:
        """Complete mock authorization."""
        if params.get("error"):
            raise ProviderError(f"Authorization denied: {params['error']}")
        if params.get("iss") != flow.issuer:
            raise ProviderError("Issuer mismatch")
        if params.get("code") in (None, "", "invalid"):
            raise ProviderError("Invalid authorization code")

        did = flow.context.get("did")
        if not did:
            raise CredentialFormatError("Mock flow context has no did")

        return SessionCredential(
            sub=did,
            issuer=flow.issuer,
            context={
                "access_token": f"mock-access-{secrets.token_hex(4)}",
                "refresh_token": "mock-refresh",
                "scope": flow.context.get("scope", "atproto"),
            },
        )

    async def refresh(self, credential: SessionCredential) -> SessionCredential:
        """Mock refresh."""
        self.refresh_calls += 1
        if credential.context.get("unreachable"):
            raise ProviderUnavailableError("Mock auth server unreachable")
        if credential.context.get("revoked"):
            raise ProviderError("Refresh token revoked")
        if credential.context.get("expired"):
            return SessionCredential(
                sub=credential.sub,
                issuer=credential.issuer,
                context={
                    **credential.context,
                    "expired": False,
                    "access_token": f"mock-access-{secrets.token_hex(4)}",
                },
            )
        return credential
