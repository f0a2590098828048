"""OAuth client metadata and JWKS endpoints for AT Protocol."""

from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from atdemo.config import Settings
from atdemo.domain.service import IdentityClient

router = APIRouter(tags=["oauth"], route_class=DishkaRoute)


class OAuthClientMetadata(BaseModel):
    """OAuth client metadata response."""

    client_id: str
    client_name: str
    client_uri: str
    redirect_uris: list[str]
    grant_types: list[str]
    response_types: list[str]
    scope: str
    token_endpoint_auth_method: str
    application_type: str
    dpop_bound_access_tokens: bool


def build_client_metadata(settings: Settings) -> OAuthClientMetadata:
    """Client registration document for the configured host."""
    oauth = settings.oauth
    return OAuthClientMetadata(
        client_id=oauth.client_id,
        client_name=oauth.client_name,
        client_uri=oauth.client_uri,
        redirect_uris=[oauth.redirect_uri],
        grant_types=["authorization_code", "refresh_token"],
        response_types=["code"],
        scope=oauth.scope,
        token_endpoint_auth_method="none",  # Public client (no client secret)
        application_type="web",
        dpop_bound_access_tokens=True,  # REQUIRED by AT Protocol
    )


@router.get("/oauth-client-metadata.json", response_model=OAuthClientMetadata)
async def get_oauth_client_metadata(
    settings: FromDishka[Settings],
) -> OAuthClientMetadata:
    """Serve OAuth client metadata for AT Protocol authentication.

    For a public deployment the URL of this document is the client_id.
    Local development uses a loopback client_id instead, and authorization
    servers never fetch this document; it is still served for inspection.

    Example response (local development):
        {
            "client_id": "http://localhost?redirect_uri=http%3A%2F%2F127.0.0.1%3A3000%2Foauth%2Fcallback&scope=atproto%20transition%3Ageneric",
            "client_name": "AT Protocol Demo App",
            "client_uri": "http://127.0.0.1:3000",
            "redirect_uris": ["http://127.0.0.1:3000/oauth/callback"],
            "grant_types": ["authorization_code", "refresh_token"],
            "response_types": ["code"],
            "scope": "atproto transition:generic",
            "token_endpoint_auth_method": "none",
            "application_type": "web",
            "dpop_bound_access_tokens": true
        }
    """
    return build_client_metadata(settings)


@router.get("/.well-known/jwks.json")
async def get_jwks(identity_client: FromDishka[IdentityClient]) -> dict[str, Any]:
    """Serve the client's public key set (empty for a public client)."""
    return identity_client.jwks()
