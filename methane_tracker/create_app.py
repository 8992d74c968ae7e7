"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from methane_tracker.api import ingestion_router, sites_router
from methane_tracker.core.config import get_config
from methane_tracker.database.base import apply_db_migration, engine_kw, get_db_url
from methane_tracker.database.session_manager.db_session import Database

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def register_routers(app: FastAPI):
    """Register all API routers."""
    app.include_router(sites_router)
    app.include_router(ingestion_router)


def register_exception_handlers(app: FastAPI):
    """Uniform ``{"detail": ...}`` error bodies, logged once per failure."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(f"HTTPException on {request.url.path}: {exc.status_code} {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "message": "Validation error",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown.

    Optionally migrates the database, then initializes the session manager.
    """
    logger.info("Application startup")
    config = app.state.config

    if config.get("app", "run_migrations", False):
        await apply_db_migration(config)

    Database.init(get_db_url(config), engine_kw=engine_kw)
    logger.info("Initialized database")

    try:
        yield
    finally:
        await Database.dispose()
        logger.info("Application shutdown")


def get_app(config_file: str) -> FastAPI:
    """
    Application factory function.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Configured FastAPI application instance
    """
    config = get_config(config_file)
    api_config = config.data.get("api", {})

    app = FastAPI(
        title=api_config.get("title", "Methane Emissions Tracker API"),
        description=api_config.get(
            "description", "Idempotent batch ingestion of methane sensor readings"
        ),
        version=api_config.get("version", "1.0.0"),
        debug=api_config.get("debug", False),
        lifespan=lifespan,
        generate_unique_id_function=lambda route: (
            f"{route.tags[0]}-{route.name}" if route.tags else route.name
        ),
    )

    app.state.config = config

    register_routers(app)
    register_exception_handlers(app)

    origins = [
        "http://localhost:3000",  # dashboard in local development
        "http://127.0.0.1:3000",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {
            "message": app.title,
            "version": app.version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "methane-tracker"}

    return app
