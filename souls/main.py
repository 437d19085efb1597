"""Souls API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SoulsError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Every request passes the access log middleware (observability.log_requests)
    - Database manager built on startup via lifespan and held on app.state

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - app.state.db_manager over a module global: one handle, injected per request
    - Three error handler layers live in api/error_handlers.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from souls.api.error_handlers import register_error_handlers
from souls.api.routes import health, relationships, soul_lifecycle
from souls.config import get_settings
from souls.infrastructure.database import DatabaseSessionManager
from souls.infrastructure.observability import log_requests, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Souls API started")
    yield
    await app.state.db_manager.dispose()
    logger.info("Souls API shutting down")


app = FastAPI(title="Souls API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(soul_lifecycle.router)
app.include_router(relationships.router)

register_error_handlers(app)
