"""Logfire setup and instrumentation.

Usage:
    import logfire

    logfire.info("Session restored", did=did)

    with logfire.span("oauth.callback", state=state):
        ...
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from atdemo.config import Settings

# Attribute names that may carry OAuth secrets or the sealed cookie
SCRUBBED_ATTRIBUTES = [
    "access_token",
    "refresh_token",
    "code_verifier",
    "dpop",
    "sid",
]

# Probed by uptime checks; not worth a span each
UNTRACED_URLS = "/health"


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire once per process.

    Cloud export is enabled by OBSERVABILITY__SEND_TO_LOGFIRE, or implied by
    OBSERVABILITY__LOGFIRE_TOKEN; otherwise events only reach the console.

    Args:
        settings: Application settings
    """
    observability = settings.observability
    send_to_logfire = observability.send_to_logfire
    if send_to_logfire is None:
        send_to_logfire = bool(observability.logfire_token)

    logfire.configure(
        service_name="atdemo",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=observability.logfire_token,
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SCRUBBED_ATTRIBUTES),
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        base_url=settings.api.base_url,
        send_to_logfire=send_to_logfire,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace incoming requests by method and path.

    Headers are not captured: the Cookie header carries the sealed session.
    """

    def _map_request_attributes(request, attributes):
        return {**attributes, "method": request.method, "path": request.url.path}

    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        excluded_urls=UNTRACED_URLS,
        request_attributes_mapper=_map_request_attributes,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace flow-state and session-store queries."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)


def instrument_httpx() -> None:
    """Trace outbound identity provider and PDS calls."""
    logfire.instrument_httpx()
