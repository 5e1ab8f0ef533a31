"""Property Ops API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.base import create_all
from app.middleware.audit import AuditMiddleware
from app.middleware.webhook_cors import WebhookCORSMiddleware
from app.schemas.common import HealthResponse

# Voice-platform routes (/api/voice-agent/*)
from app.routers.voice_agent import router as voice_agent_router

# v1 routers
from app.routers.v1.maintenance_requests import router as maintenance_requests_v1_router
from app.routers.v1.properties import router as properties_v1_router
from app.routers.v1.voice_agent_config import router as voice_agent_config_v1_router


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local SQLite gets its tables on boot; everything else is migrated with Alembic
    if settings.database_url.startswith("sqlite"):
        await create_all()
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS (dashboard) ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    if settings.audit_enabled:
        app.add_middleware(AuditMiddleware)

    # --- Wildcard CORS for the voice platform (outermost, answers its preflights) ---
    app.add_middleware(WebhookCORSMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Voice-platform routes (/api/voice-agent/*) ---
    app.include_router(voice_agent_router)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(maintenance_requests_v1_router, prefix="/api/v1")
    app.include_router(voice_agent_config_v1_router, prefix="/api/v1")
    app.include_router(properties_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            ai_enabled=settings.ai_enabled,
            email_enabled=settings.email_enabled,
        )

    return app


app = create_app()
