"""Application factory for the Arsyilla backup API."""

import logging
import re
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__
from .api import auth_router, folders_router, pages_router, share_router
from .core.config import ConfigurationError, Environment, Settings, get_settings
from .core.logging_config import setup_logging
from .database import build_engine, build_session_factory, get_db, init_db, is_postgresql
from .exceptions import ArsyillaException
from .middleware.exception_handler import arsyilla_exception_handler, validation_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .repositories import FolderRepository, UserRepository
from .services.github_client import GitHubClient

logger = logging.getLogger(__name__)

_URL_PASSWORD = re.compile(r"://([^:/@]+):([^@]+)@")


def _redact_database_url(url: str) -> str:
    return _URL_PASSWORD.sub(r"://\1:***@", url)


def _check_database(engine: Engine, url: str) -> None:
    """Run ``SELECT 1`` against the registry; exit the process if it fails."""
    shown = _redact_database_url(url)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.critical("Cannot reach database %s: %s", shown, e)
        raise SystemExit(1) from e
    logger.info("Database reachable at %s", shown)


def _check_settings(settings: Settings) -> None:
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(str(e))
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        for problem in settings.configuration_problems():
            logger.warning("Config: %s", problem)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    _check_settings(settings)
    _check_database(app.state.engine, settings.database_url)
    init_db(app.state.engine)

    logger.info(
        "Arsyilla %s started",
        __version__,
        extra={
            "environment": settings.environment.value,
            "database": "postgresql" if is_postgresql(settings.database_url) else "sqlite",
            "github_owner": settings.github_owner or None,
            "shared_repo": settings.shared_repo_name,
        },
    )

    yield

    app.state.github.close()
    app.state.engine.dispose()
    logger.info("Arsyilla stopped")


def create_app(settings: Optional[Settings] = None, github: Optional[GitHubClient] = None) -> FastAPI:
    """Build the application from an explicit configuration.

    Args:
        settings: Configuration; defaults to ``get_settings()``.
        github: GitHub adapter; defaults to one built from ``settings``.
            Tests pass an in-memory fake here.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Arsyilla Backup API",
        description=(
            "Back up file content into GitHub repositories and share it through "
            "permanent links that redirect to the raw file.\n\n"
            "**Authentication:** protected endpoints take the access key issued at "
            "registration in the `X-API-Key` header."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.github = github or GitHubClient.from_settings(settings)
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.started_at = time.monotonic()

    # Added last runs first: CORS sees the request before the request-id middleware.
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-API-Key"],
    )

    app.add_exception_handler(ArsyillaException, arsyilla_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    for router in (pages_router, auth_router, folders_router, share_router):
        app.include_router(router)

    @app.get("/health", tags=["health"])
    def health_check(db: Session = Depends(get_db)):
        """Registry status, uptime and record counts.

        Always answers 200; a failing database shows up as ``"degraded"``.
        """
        db_status = "ok"
        user_count = folder_count = 0
        try:
            user_count = UserRepository(db).count()
            folder_count = FolderRepository(db).count()
        except SQLAlchemyError:
            logger.exception("Health check could not query the registry")
            db_status = "error"

        return {
            "status": "healthy" if db_status == "ok" else "degraded",
            "db": db_status,
            "uptime_seconds": round(time.monotonic() - app.state.started_at),
            "version": __version__,
            "user_count": user_count,
            "folder_count": folder_count,
        }

    return app


def build_app() -> FastAPI:
    """Factory for ``uvicorn --factory``: configure logging, then build the app."""
    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        secrets=[settings.github_token],
    )
    return create_app(settings)
