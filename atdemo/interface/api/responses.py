"""Response helpers."""

from fastapi import Response, status
from fastapi.responses import RedirectResponse


def redirect(url: str, carrier: Response | None = None) -> RedirectResponse:
    """302 redirect that keeps any cookies already set on ``carrier``.

    FastAPI only merges headers from an injected ``Response`` into
    non-Response return values, so cookie changes made on it (for example
    by ``RequestAuthorizer``) are copied across here.
    """
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    if carrier is not None:
        response.headers.raw.extend(
            (name, value) for name, value in carrier.headers.raw if name == b"set-cookie"
        )
    return response
