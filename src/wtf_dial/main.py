"""Main entry point for the WTF Dial application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from wtf_dial.api.error_handlers import register_error_handlers
from wtf_dial.api.v1 import dials_router, memberships_router, system_router
from wtf_dial.core.logging import configure_logging
from wtf_dial.core.settings import settings
from wtf_dial.services.events import build_event_service
from wtf_dial.services.metrics import ErrorMetrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create process-wide collaborators on startup and release them on shutdown."""
    configure_logging(settings.log_level)
    app.state.error_metrics = ErrorMetrics()
    app.state.events = build_event_service(settings)
    logger.info("%s %s started", settings.app_name, settings.app_version)
    try:
        yield
    finally:
        app.state.events.close()
        app.state.error_metrics.reset()
        logger.info("%s stopped", settings.app_name)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="WTF Dial API",
        description="Shared dials tracking how members feel",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(GZipMiddleware)

    register_error_handlers(app)

    app.include_router(dials_router, prefix="/api/v1")
    app.include_router(memberships_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("wtf_dial.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
