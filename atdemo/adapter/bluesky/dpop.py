"""DPoP (Demonstrating Proof-of-Possession) proofs for AT Protocol OAuth."""

import logging
import time
from base64 import urlsafe_b64encode
from hashlib import sha256
from typing import Any
from urllib.parse import urlsplit
from uuid import uuid4

import httpx
from cryptography.hazmat.primitives.asymmetric import ec
from jwcrypto import jwk, jwt
from jwcrypto.common import JWException

from atdemo.adapter.error import ProviderUnavailableError

logger = logging.getLogger(__name__)


class DPoPKeyPair:
    """ES256 keypair that access tokens are bound to.

    One keypair is generated per authorization flow and travels with the
    flow context and then the session credential, so it must round-trip
    through JSON (see ``to_jwk``/``from_jwk``).

    Attributes:
        private_key: JWK private key for signing DPoP proofs
    """

    def __init__(self, private_key: jwk.JWK | None = None) -> None:
        """Wrap an existing key, or generate a new P-256 key."""
        if private_key is None:
            private_key = jwk.JWK.from_pyca(ec.generate_private_key(ec.SECP256R1()))
        self.private_key = private_key

    @classmethod
    def from_jwk(cls, data: dict[str, Any]) -> "DPoPKeyPair":
        """Load keypair from a private JWK dict.

        Raises:
            ValueError: If the JWK is not an EC private key
        """
        try:
            key = jwk.JWK(**data)
        except JWException as e:
            raise ValueError(f"Invalid DPoP key: {e}") from e
        if key.key_type != "EC" or not key.has_private:
            raise ValueError("DPoP key must be an EC private key")
        return cls(key)

    def to_jwk(self) -> dict[str, Any]:
        """Export private JWK dict for storage."""
        return self.private_key.export(private_key=True, as_dict=True)

    def get_public_jwk(self) -> dict[str, Any]:
        """Public JWK (kty, crv, x, y) for the proof header."""
        return self.private_key.export_public(as_dict=True)


def create_dpop_proof(
    http_method: str,
    http_url: str,
    keypair: DPoPKeyPair,
    nonce: str | None = None,
    access_token: str | None = None,
) -> str:
    """Create a serialized DPoP proof JWT for one HTTP request.

    Args:
        http_method: HTTP method of the request (e.g., "POST", "GET")
        http_url: URL of the request; query and fragment are dropped
        keypair: DPoP keypair for signing the proof
        nonce: Server-provided nonce from the DPoP-Nonce response header
        access_token: Access token for the ath claim (resource requests)

    Returns:
        Compact JWS string for the DPoP header
    """
    parts = urlsplit(http_url)

    header = {
        "typ": "dpop+jwt",
        "alg": "ES256",
        "jwk": keypair.get_public_jwk(),
    }

    claims = {
        "jti": str(uuid4()),
        "htm": http_method.upper(),
        "htu": f"{parts.scheme}://{parts.netloc}{parts.path}",
        "iat": int(time.time()),
    }

    if nonce:
        claims["nonce"] = nonce

    if access_token:
        ath_bytes = sha256(access_token.encode("ascii")).digest()
        claims["ath"] = urlsafe_b64encode(ath_bytes).rstrip(b"=").decode("ascii")

    token = jwt.JWT(header=header, claims=claims)
    token.make_signed_token(keypair.private_key)
    return token.serialize()


def is_dpop_nonce_error(response: httpx.Response) -> bool:
    """Whether the server rejected the proof only for a missing/stale nonce.

    Authorization servers answer with a JSON ``use_dpop_nonce`` error; resource
    servers (PDS) put it in the WWW-Authenticate header instead.
    """
    if response.status_code not in (400, 401):
        return False

    if "use_dpop_nonce" in response.headers.get("WWW-Authenticate", "").lower():
        return True

    try:
        body = response.json()
    except ValueError:
        return False

    return isinstance(body, dict) and body.get("error") == "use_dpop_nonce"


async def send_with_dpop(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    keypair: DPoPKeyPair,
    nonce: str | None = None,
    access_token: str | None = None,
    **kwargs: Any,
) -> tuple[httpx.Response, str | None]:
    """Send a request carrying a DPoP proof.

    A ``use_dpop_nonce`` challenge is answered once with the nonce the
    server supplied.

    Args:
        client: HTTP client
        method: HTTP method
        url: Request URL
        keypair: DPoP keypair
        nonce: Last nonce seen from this server
        access_token: Access token for resource requests (adds Authorization
            header and ath claim)
        **kwargs: Passed to ``httpx.AsyncClient.request`` (data, json, params)

    Returns:
        Tuple of (final response, latest nonce for this server)

    Raises:
        ProviderUnavailableError: On connection failure or timeout
    """

    async def _send(current_nonce: str | None) -> httpx.Response:
        headers = {
            "DPoP": create_dpop_proof(
                method, url, keypair, nonce=current_nonce, access_token=access_token
            )
        }
        if access_token:
            headers["Authorization"] = f"DPoP {access_token}"
        try:
            return await client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise ProviderUnavailableError(f"{method} {url} failed: {e}") from e

    response = await _send(nonce)

    server_nonce = response.headers.get("DPoP-Nonce")
    if is_dpop_nonce_error(response) and server_nonce:
        logger.debug(f"Retrying {method} {url} with server DPoP nonce")
        nonce = server_nonce
        response = await _send(nonce)

    return response, response.headers.get("DPoP-Nonce", nonce)
