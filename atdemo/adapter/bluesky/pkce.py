"""PKCE (Proof Key for Code Exchange) utilities for OAuth security."""

import secrets
from base64 import urlsafe_b64encode
from hashlib import sha256


def _b64url(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def create_s256_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier."""
    return _b64url(sha256(verifier.encode("ascii")).digest())


def generate_pkce_pair() -> tuple[str, str]:
    """Generate PKCE verifier and challenge for OAuth authorization.

    The challenge goes into the pushed authorization request; the verifier
    stays in the flow context until the token exchange.

    Returns:
        Tuple of (verifier, challenge), both base64url encoded strings

    Example:
        >>> verifier, challenge = generate_pkce_pair()
        >>> create_s256_challenge(verifier) == challenge
        True
    """
    # 64 random bytes encode to 86 characters (RFC 7636 allows 43-128)
    verifier = _b64url(secrets.token_bytes(64))
    return (verifier, create_s256_challenge(verifier))
