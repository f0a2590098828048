"""FastAPI application."""

from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI

from atdemo.interface.api.errors import register_exception_handlers
from atdemo.interface.api.routes import auth, health, home, oauth_metadata, recipes
from atdemo.util.di.container import create_container, setup_di
from atdemo.util.observability import instrument_fastapi, instrument_httpx


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Disposes the database engine and other APP-scoped resources
    await app.state.dishka_container.close()


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    In tests, conftest.py does.

    Args:
        container: DI container (production container if None)
    """
    # Instrument httpx for outbound identity provider and PDS calls
    instrument_httpx()

    app_instance = FastAPI(
        title="AT Protocol Demo",
        description="AT Protocol OAuth demo: login with a handle, post, save recipes",
        version="0.1.0",
        lifespan=lifespan,
    )

    instrument_fastapi(app_instance)

    setup_di(app_instance, container or create_container())

    register_exception_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(oauth_metadata.router)  # No prefix: URLs are the client id
    app_instance.include_router(auth.router)
    app_instance.include_router(home.router)
    app_instance.include_router(recipes.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
app = create_app()
