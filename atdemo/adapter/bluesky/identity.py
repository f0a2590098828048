"""Identity resolution for AT Protocol (handle to DID, DID to PDS)."""

import logging
from urllib.parse import unquote

import dns.asyncresolver
import dns.exception
import httpx
from pydantic import BaseModel, Field

from atdemo.adapter.error import IdentityResolutionError, ProviderUnavailableError
from atdemo.domain.value.types import BlueskyDID, Handle

logger = logging.getLogger(__name__)

PLC_DIRECTORY_URL = "https://plc.directory"


class DIDDocument(BaseModel):
    """DID Document from AT Protocol.

    Simplified model containing only fields needed for OAuth.
    Full spec: https://www.w3.org/TR/did-core/
    """

    id: str
    also_known_as: list[str] = Field(default_factory=list, alias="alsoKnownAs")
    service: list[dict[str, str]] = Field(default_factory=list)

    @property
    def handle(self) -> str | None:
        """Handle claimed by the document (``at://`` alias), if any."""
        for alias in self.also_known_as:
            if alias.startswith("at://"):
                return alias[len("at://") :]
        return None


async def resolve_identifier(client: httpx.AsyncClient, identifier: str) -> BlueskyDID:
    """Resolve what a user typed into the login form to a DID.

    Args:
        client: HTTP client for the well-known fallback
        identifier: Handle (with or without "@") or DID

    Returns:
        BlueskyDID value object

    Raises:
        IdentityResolutionError: If the identifier is malformed or unresolvable
        ProviderUnavailableError: If the DID directory cannot be reached
    """
    try:
        if identifier.startswith("did:"):
            return BlueskyDID(identifier)
        handle = Handle(identifier)
    except ValueError as e:
        raise IdentityResolutionError(f"Invalid handle or DID: {identifier}") from e

    return await resolve_handle_to_did(client, str(handle))


async def resolve_handle_to_did(client: httpx.AsyncClient, handle: str) -> BlueskyDID:
    """Resolve AT Protocol handle to DID.

    Tries two methods in order:
    1. DNS TXT record at _atproto.{handle} (recommended for custom domains)
    2. HTTPS well-known endpoint at https://{handle}/.well-known/atproto-did

    Args:
        client: HTTP client for the well-known fallback
        handle: Normalized handle (e.g., "alice.bsky.social")

    Returns:
        BlueskyDID value object

    Raises:
        IdentityResolutionError: If neither method yields a valid DID
    """
    did_str = await _resolve_handle_via_dns(handle)
    if did_str is None:
        did_str = await _resolve_handle_via_https(client, handle)

    try:
        return BlueskyDID(did_str)
    except ValueError as e:
        raise IdentityResolutionError(
            f"Invalid DID format from {handle}: {did_str!r}"
        ) from e


async def _resolve_handle_via_dns(handle: str) -> str | None:
    """Resolve handle to DID via DNS TXT record.

    Looks for TXT record at _atproto.{handle} with format: did=did:plc:...

    Returns:
        DID string if found, None otherwise (including on DNS failure)
    """
    try:
        answers = await dns.asyncresolver.resolve(f"_atproto.{handle}", "TXT")
    except dns.exception.DNSException as e:
        logger.debug(f"DNS handle resolution failed for {handle}: {e}")
        return None

    for rdata in answers:
        # TXT records may be split into several character strings
        txt_value = "".join(
            s.decode() if isinstance(s, bytes) else s for s in rdata.strings
        )
        if txt_value.startswith("did="):
            return txt_value[4:].strip()

    return None


async def _resolve_handle_via_https(client: httpx.AsyncClient, handle: str) -> str:
    url = f"https://{handle}/.well-known/atproto-did"

    try:
        response = await client.get(url)
    except httpx.TransportError as e:
        raise IdentityResolutionError(f"Failed to resolve handle {handle}: {e}") from e

    if response.status_code != 200:
        raise IdentityResolutionError(
            f"Failed to resolve handle {handle}: HTTP {response.status_code}"
        )

    # Response is plain text DID
    return response.text.strip()


def did_document_url(did: BlueskyDID) -> str:
    """Location of the DID document for the supported DID methods.

    Raises:
        IdentityResolutionError: For DID methods other than plc and web
    """
    if did.method == "plc":
        return f"{PLC_DIRECTORY_URL}/{did}"
    if did.method == "web":
        # did:web:example.com%3A8080 -> https://example.com:8080
        host = unquote(str(did).split(":", 2)[2])
        return f"https://{host}/.well-known/did.json"
    raise IdentityResolutionError(f"Unsupported DID method: {did}")


async def resolve_did_document(client: httpx.AsyncClient, did: BlueskyDID) -> DIDDocument:
    """Resolve DID to DID document (PLC directory or did:web host).

    Args:
        client: HTTP client
        did: BlueskyDID value object to resolve

    Returns:
        DID document with service endpoints

    Raises:
        IdentityResolutionError: If the document is missing or malformed
        ProviderUnavailableError: If the directory cannot be reached
    """
    url = did_document_url(did)

    try:
        response = await client.get(url)
    except httpx.TransportError as e:
        raise ProviderUnavailableError(f"Failed to fetch DID document for {did}: {e}") from e

    if response.status_code != 200:
        raise IdentityResolutionError(
            f"Failed to resolve DID {did}: HTTP {response.status_code}"
        )

    try:
        document = DIDDocument.model_validate(response.json())
    except ValueError as e:
        raise IdentityResolutionError(
            f"Invalid DID document format for {did}: {e}"
        ) from e

    if document.id != str(did):
        raise IdentityResolutionError(
            f"DID document id mismatch: expected {did}, got {document.id}"
        )

    return document


def get_pds_endpoint(did_document: DIDDocument) -> str:
    """Extract PDS endpoint URL from DID document.

    Args:
        did_document: Resolved DID document

    Returns:
        PDS endpoint URL without trailing slash (e.g., "https://bsky.social")

    Raises:
        IdentityResolutionError: If PDS endpoint not found
    """
    for service in did_document.service:
        if service.get("type") == "AtprotoPersonalDataServer" or service.get(
            "id", ""
        ).endswith("#atproto_pds"):
            endpoint = service.get("serviceEndpoint")
            if endpoint:
                return endpoint.rstrip("/")

    raise IdentityResolutionError(
        f"No PDS endpoint found in DID document for {did_document.id}"
    )
