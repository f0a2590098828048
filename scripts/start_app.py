#!/usr/bin/env python3
"""Run the demo server under uvicorn.

    PORT=3000 COOKIE_SECRET=... python scripts/start_app.py
"""

import sys

import logfire
import uvicorn

from atdemo.config import Settings
from atdemo.util.logging import setup_logging
from atdemo.util.observability import configure_logfire


def main() -> int:
    settings = Settings()

    # Before the app module is imported: create_app instruments with logfire
    configure_logfire(settings)
    setup_logging(settings)

    logfire.info(
        "Starting server",
        base_url=settings.api.base_url,
        client_id=settings.oauth.client_id,
        database=settings.database_url.split(":", 1)[0],
    )

    try:
        uvicorn.run(
            "atdemo.interface.api.app:app",
            host=settings.host,
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )
    except Exception as e:
        logfire.error(
            "Server failed to start",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise

    return 0


if __name__ == "__main__":
    sys.exit(main())
