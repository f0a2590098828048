"""Stdlib logging setup for the server process."""

import logging
import sys

from atdemo.config import Settings

# Chatty libraries that would otherwise log every outbound request or query
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "sqlalchemy.engine", "jwcrypto")


def setup_logging(settings: Settings) -> None:
    """Route ``logging`` records to stdout.

    ``atdemo`` loggers follow ``settings.debug``; third-party loggers are
    held at WARNING. Call after ``configure_logfire`` so the root handler
    installed here is the one that stays.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("atdemo").setLevel(level)

    logging.getLogger(__name__).info(
        f"Logging ready ({logging.getLevelName(level)}) for {settings.api.base_url}"
    )
