"""Unit tests for DPoP proof generation and nonce handling."""

import json
from base64 import urlsafe_b64decode, urlsafe_b64encode
from hashlib import sha256

import httpx
import pytest
from jwcrypto import jwk, jwt

from atdemo.adapter.bluesky.dpop import (
    DPoPKeyPair,
    create_dpop_proof,
    is_dpop_nonce_error,
    send_with_dpop,
)
from atdemo.adapter.error import ProviderUnavailableError


def _decode_segment(segment: str) -> dict:
    padding = "=" * (-len(segment) % 4)
    return json.loads(urlsafe_b64decode(segment + padding))


def _header(proof: str) -> dict:
    return _decode_segment(proof.split(".")[0])


def _claims(proof: str) -> dict:
    return _decode_segment(proof.split(".")[1])


class TestDPoPKeyPair:
    """Tests for DPoPKeyPair class."""

    def test_public_jwk_has_required_fields(self):
        """Public JWK should describe a P-256 key without private material."""
        jwk_dict = DPoPKeyPair().get_public_jwk()

        assert jwk_dict["kty"] == "EC"
        assert jwk_dict["crv"] == "P-256"
        assert "x" in jwk_dict
        assert "y" in jwk_dict
        assert "d" not in jwk_dict

    def test_generates_unique_keypairs(self):
        """Each instance should generate a different keypair."""
        jwk1 = DPoPKeyPair().get_public_jwk()
        jwk2 = DPoPKeyPair().get_public_jwk()

        assert jwk1["x"] != jwk2["x"]

    def test_round_trips_through_jwk(self):
        """Exported private JWK should load back to the same key."""
        keypair = DPoPKeyPair()

        restored = DPoPKeyPair.from_jwk(keypair.to_jwk())

        assert restored.get_public_jwk() == keypair.get_public_jwk()

    def test_from_jwk_rejects_public_key(self):
        """A public-only key cannot sign proofs."""
        public = DPoPKeyPair().get_public_jwk()

        with pytest.raises(ValueError):
            DPoPKeyPair.from_jwk(public)

    def test_from_jwk_rejects_symmetric_key(self):
        """Only EC keys are accepted."""
        with pytest.raises(ValueError):
            DPoPKeyPair.from_jwk({"kty": "oct", "k": "c2VjcmV0"})


class TestCreateDPoPProof:
    """Tests for create_dpop_proof function."""

    def test_header_has_typ_alg_and_public_jwk(self):
        """Header should carry typ, alg and the public key."""
        keypair = DPoPKeyPair()
        proof = create_dpop_proof("POST", "https://example.com/token", keypair)

        header = _header(proof)

        assert header["typ"] == "dpop+jwt"
        assert header["alg"] == "ES256"
        assert header["jwk"] == keypair.get_public_jwk()

    def test_has_required_claims(self):
        """Claims should have jti, htm, htu, iat."""
        proof = create_dpop_proof("get", "https://example.com/resource", DPoPKeyPair())

        claims = _claims(proof)

        assert claims["htm"] == "GET"
        assert claims["htu"] == "https://example.com/resource"
        assert isinstance(claims["iat"], int)
        assert isinstance(claims["jti"], str)

    def test_htu_drops_query_and_fragment(self):
        """htu is the request URL without query or fragment."""
        proof = create_dpop_proof(
            "GET", "https://pds.example.com/xrpc/app.bsky.actor.getProfile?actor=x#y",
            DPoPKeyPair(),
        )

        assert _claims(proof)["htu"] == "https://pds.example.com/xrpc/app.bsky.actor.getProfile"

    def test_includes_nonce_only_when_provided(self):
        """Nonce claim is present only when a nonce is given."""
        keypair = DPoPKeyPair()

        with_nonce = create_dpop_proof("POST", "https://e.com/t", keypair, nonce="n-1")
        without_nonce = create_dpop_proof("POST", "https://e.com/t", keypair)

        assert _claims(with_nonce)["nonce"] == "n-1"
        assert "nonce" not in _claims(without_nonce)

    def test_ath_is_hash_of_access_token(self):
        """ath should be the base64url SHA-256 of the access token."""
        access_token = "test-access-token-123"
        proof = create_dpop_proof(
            "GET", "https://example.com/api", DPoPKeyPair(), access_token=access_token
        )

        expected = urlsafe_b64encode(sha256(access_token.encode("ascii")).digest())
        assert _claims(proof)["ath"] == expected.rstrip(b"=").decode("ascii")

    def test_signature_verifies_with_public_key(self):
        """Proof should verify with the key embedded in its header."""
        keypair = DPoPKeyPair()
        proof = create_dpop_proof("POST", "https://example.com/token", keypair)

        public_key = jwk.JWK(**_header(proof)["jwk"])
        verified = jwt.JWT(jwt=proof, key=public_key)

        assert json.loads(verified.claims)["htm"] == "POST"

    def test_generates_unique_jti_per_call(self):
        """Each proof should have a unique jti."""
        keypair = DPoPKeyPair()

        proof1 = create_dpop_proof("POST", "https://example.com/token", keypair)
        proof2 = create_dpop_proof("POST", "https://example.com/token", keypair)

        assert _claims(proof1)["jti"] != _claims(proof2)["jti"]


class TestIsDPoPNonceError:
    """Tests for is_dpop_nonce_error function."""

    def test_detects_json_error_from_authorization_server(self):
        response = httpx.Response(400, json={"error": "use_dpop_nonce"})

        assert is_dpop_nonce_error(response)

    def test_detects_www_authenticate_from_resource_server(self):
        response = httpx.Response(
            401,
            headers={"WWW-Authenticate": 'DPoP error="use_dpop_nonce"'},
        )

        assert is_dpop_nonce_error(response)

    def test_other_errors_are_not_nonce_errors(self):
        assert not is_dpop_nonce_error(httpx.Response(400, json={"error": "invalid_grant"}))
        assert not is_dpop_nonce_error(httpx.Response(500, json={"error": "use_dpop_nonce"}))
        assert not is_dpop_nonce_error(httpx.Response(401, text="not json"))


class TestSendWithDPoP:
    """Tests for send_with_dpop function."""

    @pytest.mark.asyncio
    async def test_retries_once_with_server_nonce(self):
        """A use_dpop_nonce challenge is answered with the supplied nonce."""
        proofs = []

        def handler(request: httpx.Request) -> httpx.Response:
            proofs.append(request.headers["DPoP"])
            if len(proofs) == 1:
                return httpx.Response(
                    400, json={"error": "use_dpop_nonce"}, headers={"DPoP-Nonce": "n-1"}
                )
            return httpx.Response(200, json={"ok": True}, headers={"DPoP-Nonce": "n-2"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response, nonce = await send_with_dpop(
                client, "POST", "https://auth.example.com/token", DPoPKeyPair()
            )

        assert response.status_code == 200
        assert nonce == "n-2"
        assert len(proofs) == 2
        assert "nonce" not in _claims(proofs[0])
        assert _claims(proofs[1])["nonce"] == "n-1"

    @pytest.mark.asyncio
    async def test_does_not_retry_twice(self):
        """A second nonce challenge is returned to the caller."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(
                400, json={"error": "use_dpop_nonce"}, headers={"DPoP-Nonce": "n-x"}
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response, _ = await send_with_dpop(
                client, "POST", "https://auth.example.com/token", DPoPKeyPair()
            )

        assert response.status_code == 400
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_sends_access_token_as_dpop_authorization(self):
        """Resource requests carry Authorization: DPoP and an ath claim."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers["Authorization"]
            seen["proof"] = request.headers["DPoP"]
            return httpx.Response(200, json={})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await send_with_dpop(
                client,
                "GET",
                "https://pds.example.com/xrpc/x",
                DPoPKeyPair(),
                access_token="at-1",
            )

        assert seen["authorization"] == "DPoP at-1"
        assert "ath" in _claims(seen["proof"])

    @pytest.mark.asyncio
    async def test_connection_failure_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ProviderUnavailableError):
                await send_with_dpop(
                    client, "POST", "https://auth.example.com/token", DPoPKeyPair()
                )
