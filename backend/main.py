"""
Composer FastAPI application.

Entry point for the preview server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.config import settings
from backend.routes import preview as preview_routes

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Root logging from COMPOSER_LOG_LEVEL; author console output stays at its own level."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Startup configures logging; shutdown drops the shared render cache.
    """
    configure_logging()
    logger.info(
        "main: starting (%s, cache=%d, max_steps=%d)",
        settings.ENVIRONMENT,
        settings.RENDER_CACHE_SIZE,
        settings.MAX_EVAL_STEPS,
    )

    yield

    preview_routes.instantiator.clear_cache()
    logger.info("main: render cache cleared")


app = FastAPI(
    title="Composer",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(preview_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
