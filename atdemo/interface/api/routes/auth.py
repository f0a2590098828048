"""Authentication routes."""

import logging
from typing import Annotated

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse

from atdemo.config import Settings
from atdemo.domain.error import (
    AuthorizationInitiationError,
    CallbackValidationError,
    ValidationError,
)
from atdemo.domain.service import AuthFlowCoordinator
from atdemo.interface.api import pages
from atdemo.interface.api.responses import redirect
from atdemo.interface.api.session import BrowserSessionBinder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"], route_class=DishkaRoute)


@router.get("/login", response_class=HTMLResponse)
async def login_form():
    """Render the handle-entry form."""
    return pages.login_page()


@router.post("/login", response_class=HTMLResponse)
async def login(
    coordinator: FromDishka[AuthFlowCoordinator],
    handle: Annotated[str | None, Form()] = None,
):
    """Start the OAuth flow for a handle and redirect to the provider.

    Responses:
        302: Redirect to the authorization server
        400: Handle missing
        500: Handle resolution or endpoint discovery failed
    """
    try:
        url = await coordinator.authorize(handle)
    except ValidationError as e:
        return HTMLResponse(
            pages.login_page(error=str(e)), status_code=status.HTTP_400_BAD_REQUEST
        )
    except AuthorizationInitiationError as e:
        logger.warning(f"OAuth authorize failed for {handle}: {e}")
        return HTMLResponse(
            pages.error_page("Login failed", str(e)),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return redirect(url)


@router.get("/oauth/callback", response_class=HTMLResponse)
async def oauth_callback(
    request: Request,
    coordinator: FromDishka[AuthFlowCoordinator],
    binder: FromDishka[BrowserSessionBinder],
):
    """Complete the OAuth flow, bind the browser to the subject, go home.

    The query string is passed through untouched. Failures are shown
    without provider details; the flow is already consumed, so the user
    has to start over from /login.

    Example:
        GET /oauth/callback?code=abc123&state=xyz789&iss=https://bsky.social
    """
    try:
        result = await coordinator.complete_callback(dict(request.query_params))
    except CallbackValidationError as e:
        logger.warning(f"OAuth callback failed: {e}")
        return HTMLResponse(
            pages.error_page("Login failed"),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = redirect("/")
    binder.bind(response, result.subject)

    logfire.info("User logged in", did=result.subject)
    return response


@router.post("/logout")
async def logout(
    request: Request,
    binder: FromDishka[BrowserSessionBinder],
    coordinator: FromDishka[AuthFlowCoordinator],
    settings: FromDishka[Settings],
):
    """Clear the session cookie and go home.

    The stored credential is kept unless
    ``session.forget_session_on_logout`` is enabled.
    """
    if settings.session.forget_session_on_logout:
        subject = binder.read_subject(request)
        if subject:
            await coordinator.revoke(subject)

    response = redirect("/")
    binder.unbind(response)
    return response
