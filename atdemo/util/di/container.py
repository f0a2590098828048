"""Production container and FastAPI wiring."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from atdemo.util.di import PROVIDERS, get_provider


def create_container() -> AsyncContainer:
    """Container with the real AT Protocol clients and SQL stores.

    Nothing is constructed until first resolved; the database engine is
    created (and the schema migrated) on the first request that needs a store.
    """
    providers = [get_provider(base)() for base in PROVIDERS]
    # FastapiProvider makes the current Request resolvable
    return make_async_container(*providers, FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach ``container`` to ``app`` (also exposed as ``app.state.dishka_container``)."""
    setup_dishka(container, app)
