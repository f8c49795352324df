# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Wanderlust listings API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run python -m app.main
#   poetry run uvicorn app.main:get_application --factory --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, bootstrap_settings
from app.exceptions import (
    WanderlustException,
    database_client_exception_handler,
    not_found_exception_handler,
    unexpected_exception_handler,
    wanderlust_exception_handler,
)
from app.routers import health, listings
from lib.mongo_client import MongoClientError, MongoConnector

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging; safe to call again to change the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Check database connectivity (failure is logged, not fatal)
    - Shutdown: Close the database client
    """
    settings: Settings = app.state.settings
    mongo: MongoConnector = app.state.mongo

    # Startup
    logger.info(f"Starting Wanderlust API in {settings.APP_STAGE} stage")
    mongo.ping()

    yield

    # Shutdown
    logger.info("Shutting down Wanderlust API")
    mongo.close()


def create_app(settings: Settings, mongo: MongoConnector | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Validated configuration, stored on app.state
        mongo: Database connector (built from settings.DATABASE_URL if omitted)

    Returns:
        FastAPI: The configured application
    """
    app = FastAPI(
        title="Wanderlust API",
        description="Create, browse, edit and delete property listings.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Listings",
                "description": "Create and manage property listings",
            },
            {
                "name": "Health",
                "description": "API health and readiness checks",
            },
        ],
    )

    app.state.settings = settings
    app.state.mongo = mongo or MongoConnector.from_settings(settings)

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    # Wide open outside production
    if not settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    app.add_exception_handler(WanderlustException, wanderlust_exception_handler)
    app.add_exception_handler(MongoClientError, database_client_exception_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    app.include_router(
        listings.router,
        prefix="/listings",
        tags=["Listings"]
    )

    app.include_router(
        health.router,
        tags=["Health"]
    )

    @app.get("/", tags=["Root"])
    def root():
        """
        Root endpoint - returns API info.
        """
        return {
            "name": "Wanderlust API",
            "version": __version__,
            "docs": "/docs",
            "listings": "/listings",
            "health": "/health",
        }

    return app


def get_application() -> FastAPI:
    """
    Application factory for `uvicorn --factory`.

    Loads and validates configuration first; exits with status 1 if it is
    invalid.
    """
    configure_logging()
    settings = bootstrap_settings()
    configure_logging(settings.LOG_LEVEL)
    return create_app(settings)


def run() -> None:
    """Validate configuration, then serve the API on settings.PORT."""
    configure_logging()
    settings = bootstrap_settings()
    configure_logging(settings.LOG_LEVEL)

    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
