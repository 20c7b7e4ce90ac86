"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root of the HTTP surface.
    Routers stay thin; the coordinator is built from settings (or passed
    in by tests) and shared by every request.

Tags:
    orcpublish, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orcpublish import __version__
from orcpublish.api.middleware.errors import unhandled_exception_handler
from orcpublish.api.middleware.request_id import RequestIDMiddleware
from orcpublish.core.logging import get_logger
from orcpublish.core.settings import PublishSettings, get_settings
from orcpublish.publish.coordinator import ImportCoordinator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    log = get_logger("orcpublish.api")
    log.info("api_starting", version=app.version, database_url=app.state.settings.database_url)
    yield
    log.info("api_shutting_down")


def create_app(
    *,
    settings: PublishSettings | None = None,
    coordinator: ImportCoordinator | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : PublishSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    coordinator : ImportCoordinator | None
        Pre-wired coordinator. When ``None`` one is built from *settings*
        on the first request.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.coordinator = coordinator
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    from orcpublish.api.routers import imports

    app.include_router(imports.router, prefix=settings.api_prefix, tags=["imports"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
