"""Shared steps for end-to-end tests."""

from urllib.parse import parse_qs, urlsplit

from httpx import AsyncClient

from atdemo.adapter.bluesky.client import MockIdentityClient


async def login(client: AsyncClient, handle: str = "alice.bsky.social") -> str:
    """Run the whole OAuth dance against the mock provider.

    Returns:
        The flow identifier that was consumed
    """
    response = await client.post("/login", data={"handle": handle})
    assert response.status_code == 302
    state = parse_qs(urlsplit(response.headers["location"]).query)["state"][0]

    response = await client.get(
        "/oauth/callback",
        params={"code": "abc", "state": state, "iss": MockIdentityClient.ISSUER},
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/"
    return state
