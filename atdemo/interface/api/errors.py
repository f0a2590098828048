"""Exception handlers for errors that escape a route."""

import logging

import logfire
from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError

from atdemo.adapter.error import AdapterError
from atdemo.domain.error import InfrastructureError, ValidationError
from atdemo.interface.api import pages

logger = logging.getLogger(__name__)


async def validation_error_handler(request: Request, exc: Exception) -> HTMLResponse:
    """User-correctable input error."""
    return HTMLResponse(
        pages.message_page(str(exc)), status_code=status.HTTP_400_BAD_REQUEST
    )


async def infrastructure_error_handler(request: Request, exc: Exception) -> HTMLResponse:
    """Storage or provider unreachable: a server error, never "logged out"."""
    logger.error(f"Infrastructure failure on {request.url.path}: {exc}", exc_info=exc)
    logfire.error(
        "Infrastructure failure",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return HTMLResponse(
        pages.error_page("Something went wrong", "Please try again later."),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def adapter_error_handler(request: Request, exc: Exception) -> HTMLResponse:
    """Upstream (PDS) call failed outside the login flow."""
    logger.error(f"Upstream failure on {request.url.path}: {exc}", exc_info=exc)
    logfire.error(
        "Upstream failure",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return HTMLResponse(
        pages.error_page("Upstream service error", "Your PDS could not be reached."),
        status_code=status.HTTP_502_BAD_GATEWAY,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers on the application."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)
    app.add_exception_handler(SQLAlchemyError, infrastructure_error_handler)
    app.add_exception_handler(AdapterError, adapter_error_handler)
