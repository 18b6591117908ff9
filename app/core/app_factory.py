"""Application factory helpers to keep app/main.py lightweight."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

import app.models.registry  # noqa: F401  (registers every mapper)
from app.api import api_router, websocket_router
from app.core.config import settings
from app.core.database import get_db
from app.core.error_handlers import register_exception_handlers
from app.core.logging_config import setup_logging
from app.core.middleware import LoggingMiddleware, limiter
from app.modules.notifications import registry

logger = logging.getLogger(__name__)


def _configure_app(app: FastAPI) -> None:
    # Logs all requests and responses with timing
    app.add_middleware(LoggingMiddleware)

    origins = settings.allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(websocket_router)


def _register_routes(app: FastAPI) -> None:
    @app.get("/livez", tags=["Health"])
    async def livez():
        return {"status": "ok"}

    @app.get("/readyz", tags=["Health"])
    def readyz(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except Exception as exc:
            logger.error("Readiness check failed (Database): %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={"database": "disconnected"},
            )
        return {"status": "ready", "details": {"database": "connected"}}


def _lifespan_factory():
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("%s API starting (env=%s)", settings.SITE_NAME, settings.environment)
        yield
        logger.info("%s API shutting down; sockets: %s", settings.SITE_NAME, registry.metrics())
        registry.clear()

    return lifespan


def create_app() -> FastAPI:
    """
    Application Factory to create and configure the FastAPI application.
    Integrates Logging, Error Handling, Rate Limiting, and Middleware.
    """
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        app_name="educonnect",
        use_json=settings.use_json_logs,
    )

    app = FastAPI(
        title=f"{settings.SITE_NAME} API",
        description="Course marketplace and SDG crowdfunding with manual payment approval",
        version="1.0.0",
        lifespan=_lifespan_factory(),
    )

    app.state.environment = settings.environment
    app.state.connection_registry = registry
    app.state.limiter = limiter

    _configure_app(app)
    _register_routes(app)
    register_exception_handlers(app)

    logger.info("Application startup complete")
    return app


__all__ = ["create_app"]
