"""Slop Guess API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SlopGuessError to structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, runtime and scheduler are started and stopped by the lifespan
    - The scheduler is stopped before the database pool is disposed

Design Decisions:
    - Lifespan over @app.on_event
    - app.state.runtime holds every service; routes reach it through get_runtime
    - Persisted images are served from image_storage_dir under image_public_prefix
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from slopguess import __version__
from slopguess.api.error_handlers import register_error_handlers
from slopguess.api.routes import admin, health, rounds
from slopguess.config import get_settings
from slopguess.db.seed_words import seed_word_bank
from slopguess.infrastructure.database import init_db
from slopguess.infrastructure.observability import setup_logging
from slopguess.services.runtime import build_runtime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    runtime = build_runtime(settings, manager.session)
    app.state.runtime = runtime

    if settings.seed_word_bank:
        await seed_word_bank(manager.session)
    if settings.scheduler_enabled:
        await runtime.scheduler.start()

    logger.info("Slop Guess API started")
    yield
    logger.info("Slop Guess API shutting down")
    await runtime.shutdown()
    await manager.dispose()


app = FastAPI(title="Slop Guess API", version=__version__, lifespan=lifespan)
register_error_handlers(app)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(rounds.router)
app.include_router(admin.router)

# Mounted after the API routes so /api/v1/* takes precedence
app.mount(
    settings.image_public_prefix,
    StaticFiles(directory=settings.image_storage_dir, check_dir=False),
    name="images",
)
