"""Authorization server discovery for AT Protocol OAuth."""

import logging

import httpx
from pydantic import BaseModel, Field

from atdemo.adapter.error import ProviderError, ProviderUnavailableError

logger = logging.getLogger(__name__)


class ProtectedResourceMetadata(BaseModel):
    """OAuth protected resource metadata published by a PDS."""

    resource: str | None = None
    authorization_servers: list[str] = Field(default_factory=list)


class AuthServerMetadata(BaseModel):
    """OAuth authorization server metadata.

    Authorization servers publish this at
    /.well-known/oauth-authorization-server.

    Attributes:
        issuer: Authorization server issuer URL
        pushed_authorization_request_endpoint: URL for PAR requests
        authorization_endpoint: URL the browser is sent to
        token_endpoint: URL for token exchange and refresh
    """

    issuer: str
    pushed_authorization_request_endpoint: str
    authorization_endpoint: str
    token_endpoint: str
    scopes_supported: list[str] = Field(default_factory=list)
    dpop_signing_alg_values_supported: list[str] = Field(default_factory=list)


async def _get_json(client: httpx.AsyncClient, url: str) -> dict:
    try:
        response = await client.get(url)
    except httpx.TransportError as e:
        raise ProviderUnavailableError(f"Failed to fetch {url}: {e}") from e

    if response.status_code != 200:
        raise ProviderError(f"Failed to fetch {url}: HTTP {response.status_code}")

    try:
        return response.json()
    except ValueError as e:
        raise ProviderError(f"Invalid JSON from {url}") from e


async def fetch_auth_server_metadata(
    client: httpx.AsyncClient, issuer: str
) -> AuthServerMetadata:
    """Fetch and validate authorization server metadata for an issuer.

    Raises:
        ProviderError: If the document is missing, malformed or names
            another issuer
        ProviderUnavailableError: If the server cannot be reached
    """
    issuer = issuer.rstrip("/")
    data = await _get_json(client, f"{issuer}/.well-known/oauth-authorization-server")

    try:
        metadata = AuthServerMetadata.model_validate(data)
    except ValueError as e:
        raise ProviderError(f"Invalid authorization server metadata from {issuer}: {e}") from e

    if metadata.issuer.rstrip("/") != issuer:
        raise ProviderError(
            f"Issuer mismatch in metadata: expected {issuer}, got {metadata.issuer}"
        )

    return metadata


async def discover_auth_server(
    client: httpx.AsyncClient, pds_url: str
) -> AuthServerMetadata:
    """Discover the authorization server that protects a PDS.

    The PDS names its authorization server in
    /.well-known/oauth-protected-resource (for bsky.social-hosted accounts
    that is the bsky.social entryway, not the PDS itself); its metadata is
    then fetched from that issuer.

    Args:
        client: HTTP client
        pds_url: PDS URL (e.g., "https://morel.us-east.host.bsky.network")

    Returns:
        Parsed authorization server metadata

    Raises:
        ProviderError: If either document is missing or malformed
        ProviderUnavailableError: If a server cannot be reached
    """
    data = await _get_json(client, f"{pds_url}/.well-known/oauth-protected-resource")

    try:
        resource = ProtectedResourceMetadata.model_validate(data)
    except ValueError as e:
        raise ProviderError(f"Invalid protected resource metadata from {pds_url}") from e

    if not resource.authorization_servers:
        raise ProviderError(f"No authorization server listed by {pds_url}")

    issuer = resource.authorization_servers[0]
    logger.debug(f"PDS {pds_url} is protected by {issuer}")

    return await fetch_auth_server_metadata(client, issuer)
