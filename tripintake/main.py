"""Trip Intake API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map IntakeError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - AppContext built once on startup via lifespan context manager, closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (ADR: ExMA import fan-out < 10)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripintake import __version__
from tripintake.api.error_handlers import register_error_handlers
from tripintake.api.routes import health, recommendations, trips
from tripintake.config import get_settings
from tripintake.infrastructure.database import init_db
from tripintake.infrastructure.observability import setup_logging
from tripintake.services.context import build_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.context = build_context(settings, db)
    logger.info("Trip intake API started")
    yield
    logger.info("Trip intake API shutting down")
    await app.state.context.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Trip Intake API", version=__version__, lifespan=lifespan)

    # CORS: configured from settings, not hardcoded
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Routes: explicit registration (ExMA: no convention-over-config)
    app.include_router(health.router)
    app.include_router(trips.router)
    app.include_router(recommendations.router)

    register_error_handlers(app)
    return app


app = create_app()
