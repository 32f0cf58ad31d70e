"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sketchvault.app.api.routes.drawings import router as drawings_router
from sketchvault.app.api.routes.health import router as health_router
from sketchvault.app.api.routes.metrics import router as metrics_router
from sketchvault.app.config import Settings, get_settings
from sketchvault.app.db.metadata_index import MetadataIndex
from sketchvault.app.drawings.content import ContentStore
from sketchvault.app.drawings.errors import StorageIOError
from sketchvault.app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    The content store and metadata index are created once at startup and
    shared by every request through app.state.

    Args:
        settings: Settings to use; resolved from the environment at startup if None
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        resolved = settings or get_settings()
        configure_logging(resolved.log_level)

        app.state.settings = resolved
        app.state.content_store = ContentStore(
            resolved.drawings_dir, extension=resolved.drawing_extension
        )
        app.state.metadata_index = MetadataIndex(resolved.metadata_path)

        try:
            await app.state.metadata_index.load()
        except StorageIOError as e:
            # Requests touching the index keep failing until it is repaired
            logger.error("Metadata index unusable at startup: %s", e)

        logger.info("Serving drawings from %s", resolved.drawings_dir)
        yield

    app = FastAPI(title="SketchVault API", version=VERSION, lifespan=lifespan)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(drawings_router, tags=["drawings"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "SketchVault API", "version": VERSION}

    return app


app = create_app()
