"""
Main entrypoint for the CoPallet API.

``create_app`` assembles the FastAPI application: logging, CORS, the
catch-all error handler, the service endpoints and the versioned
routers mounted under ``/api``.  The module-level ``app`` can be served
directly, e.g.::

    uvicorn copallet_api.app.main:app --reload

On startup the database schema is migrated.  With
``SEED_ON_STARTUP`` enabled the store is wiped and filled with demo
data first.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import close_db, get_database_path, init_db, reset_db
from .core.logging_config import setup_logging
from .core.seed import seed_database


logger = logging.getLogger(__name__)

API_FEATURES = [
    "authentication",
    "shipments",
    "bidding",
    "tracking",
    "proof-of-delivery",
    "messaging",
    "notifications",
    "ratings",
    "templates",
    "auto-bid-rules",
    "cost-models",
    "calculators",
    "analytics",
    "admin",
    "blog",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database on startup and release it on shutdown."""
    logger.info("Starting %s %s (%s)", settings.project_name, settings.api_version, settings.environment)
    if settings.seed_on_startup:
        reset_db()
        init_db()
        seed_database()
    else:
        init_db()
    logger.info("Using database %s", get_database_path())
    yield
    close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.get("/health", tags=["service"])
    async def health() -> dict:
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "environment": settings.environment,
            "message": f"{settings.project_name} is running",
        }

    @app.get("/api/test", tags=["service"])
    async def api_test() -> dict:
        return {
            "message": "API is working",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.api_version,
            "features": API_FEATURES,
        }

    app.include_router(v1_router, prefix="/api")
    return app


app = create_app()
