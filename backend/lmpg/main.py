"""Let My People Grow API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LmpgError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lmpg.api.error_handlers import register_error_handlers
from lmpg.api.routes import (
    attendance, csv_import, gatherings, health, migrations, onboarding, reports,
)
from lmpg.config import APP_VERSION, get_settings
from lmpg.infrastructure import database
from lmpg.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("LMPG API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("LMPG API shutting down")


app = FastAPI(
    title="Let My People Grow API", version=APP_VERSION, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(gatherings.router)
app.include_router(onboarding.router)
app.include_router(csv_import.router)
app.include_router(migrations.router)
app.include_router(reports.router)
app.include_router(attendance.router)

register_error_handlers(app)
