"""
FastAPI application with assembled routers.

Builds the record store in the lifespan handler, mounts the API under
``/api/v1`` and runs uvicorn when executed directly.

Dependencies: fastapi, uvicorn, anchorkit.api.routers
System role: HTTP entry point for the transport adapter
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from anchorkit.api.routers import health_router, messages_router
from anchorkit.application.services.record_store import RecordStore
from anchorkit.configs import Settings, get_settings
from anchorkit.observability.logger import configure_logging
from anchorkit.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        settings: Application settings (defaults to the cached environment settings)

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan context manager.

        Opens the record store on startup and disposes it on shutdown.
        """
        logger = logging.getLogger("uvicorn")

        store = RecordStore(settings.database)
        await store.initialize()
        app.state.settings = settings
        app.state.record_store = store
        logger.info("Record store ready")

        yield

        await store.close()
        logger.info("Record store closed")

    app = FastAPI(
        title="anchorkit",
        description="Annotation record store and message transport",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(messages_router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    uvicorn.run(
        "anchorkit.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
