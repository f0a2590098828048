"""Sealed (encrypted and authenticated) values for browser cookies."""

import json
import time
from base64 import urlsafe_b64encode
from datetime import timedelta
from hashlib import sha256
from typing import Any

from jwcrypto import jwk, jwt
from jwcrypto.common import JWException

from atdemo.config import MIN_COOKIE_SECRET_LENGTH
from atdemo.util.error import ConfigurationError, SealError


class CookieSealer:
    """Seal small JSON payloads into compact JWE strings.

    The payload is encrypted with A256GCM under a direct key derived from the
    configured secret, so the browser can neither read nor forge it. Every
    sealed value carries ``iat``/``exp`` claims and is rejected once expired.
    """

    HEADER = {"alg": "dir", "enc": "A256GCM"}

    def __init__(self, secret: str, ttl: timedelta) -> None:
        """Derive the content encryption key from the secret.

        Args:
            secret: Server secret (at least 32 characters)
            ttl: Lifetime of sealed values

        Raises:
            ConfigurationError: If the secret is too short
        """
        if len(secret) < MIN_COOKIE_SECRET_LENGTH:
            raise ConfigurationError(
                f"Cookie secret must be at least {MIN_COOKIE_SECRET_LENGTH} characters"
            )

        key_bytes = sha256(secret.encode("utf-8")).digest()
        self._key = jwk.JWK(
            kty="oct",
            k=urlsafe_b64encode(key_bytes).rstrip(b"=").decode("ascii"),
        )
        self._ttl = ttl

    def seal(self, payload: dict[str, Any]) -> str:
        """Encrypt payload into a compact JWE string."""
        now = int(time.time())
        claims = {
            **payload,
            "iat": now,
            "exp": now + int(self._ttl.total_seconds()),
        }

        token = jwt.JWT(header=self.HEADER, claims=claims)
        token.make_encrypted_token(self._key)
        return token.serialize()

    def unseal(self, sealed: str) -> dict[str, Any]:
        """Decrypt and verify a sealed value.

        Raises:
            SealError: If the value is malformed, forged or expired
        """
        try:
            token = jwt.JWT(jwt=sealed, key=self._key, expected_type="JWE")
            claims = json.loads(token.claims)
        except (JWException, ValueError, TypeError) as e:
            raise SealError(f"Invalid sealed value: {e}") from e

        if not isinstance(claims, dict):
            raise SealError("Sealed payload is not an object")

        exp = claims.get("exp")
        if not isinstance(exp, int) or exp < time.time():
            raise SealError("Sealed value has expired")

        return claims
