"""Main application module for the analyze API service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from analyze_fastapi.app.api.routes import router
from analyze_fastapi.app.config import settings
from analyze_fastapi.app.prometheus import setup_prometheus
from analyze_fastapi.app.services.config_loader import load_registries
from analyze_fastapi.app.services.resolver import AnalyzerResolver
from analyze_fastapi.app.telemetry import setup_telemetry, shutdown_telemetry

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events."""
    await startup_event(app)
    yield
    await shutdown_event(app)


async def startup_event(app: FastAPI) -> None:
    """Load the analyzer registries into application state."""
    logger.info("Application startup")
    try:
        logger.info("Loading analyzers from %s", settings.analyzers_config_file)
        registry, corpora = load_registries()
        app.state.registry = registry
        app.state.corpora = corpora
        app.state.resolver = AnalyzerResolver(registry, corpora)
        logger.info("Analyzer initialization complete")
    except Exception as e:
        logger.error("Failed to initialize analyzers: %s", str(e))
        raise
    logger.info("Application startup complete")


async def shutdown_event(app: FastAPI) -> None:
    """Perform shutdown activities."""
    logger.info("Application shutdown")
    shutdown_telemetry()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    prefix = f"/api/{settings.API_VERSION}"
    app = FastAPI(
        title=f"Analyze API {settings.API_VERSION}",
        description="Batch text tokenization with selectable token attributes",
        docs_url=f"{prefix}/docs",
        redoc_url=f"{prefix}/redoc",
        openapi_url=f"{prefix}/openapi.json",
        lifespan=lifespan,
    )

    # Middleware must be registered before the application starts.
    setup_telemetry(app)
    setup_prometheus(app)

    app.include_router(router, prefix=prefix)

    return app


app = create_app()
