"""FastAPI application factory - thin RPC facade over MatchSelector."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from matchrank.api.routes import health, matches
from matchrank.config import VERSION
from matchrank.services.selector import MatchSelector, create_default_selector
from matchrank.utilities.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    setup_logging()
    logger.info("[STARTUP] Starting matchrank API...")

    if app.state.selector is None:
        app.state.selector = create_default_selector()
    logger.info("[STARTUP] matchrank API ready")

    yield

    logger.info("[SHUTDOWN] Shutting down matchrank API...")
    app.state.selector.close()


def create_app(selector: MatchSelector | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        selector: Pre-built selector (tests inject one); built from the
            environment on startup when omitted
    """
    app = FastAPI(
        title="matchrank API",
        description="Relevance ranking of football matches for content generation",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.selector = selector

    app.include_router(health.router, tags=["Health"])
    app.include_router(matches.router, prefix="/matches", tags=["Matches"])

    return app
