"""Going-Out API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map GoingOutError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: cleaner startup/shutdown pairing
    - Error handlers live in api/error_handlers.py, registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from goingout.api.error_handlers import register_error_handlers
from goingout.api.routes import friendships, health, identity, plans, venues
from goingout.config import get_settings
from goingout.infrastructure import database
from goingout.infrastructure.observability import setup_logging

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
        statement_timeout_seconds=settings.database_statement_timeout_seconds,
        lock_timeout_ms=settings.database_lock_timeout_ms,
    )
    logger.info("Going-Out API started")
    yield
    if database.db_manager:
        await database.db_manager.engine.dispose()
    logger.info("Going-Out API shutting down")


app = FastAPI(
    title="Going-Out API", version="1.0.0", lifespan=lifespan,
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
app.include_router(identity.router)
app.include_router(friendships.router)
app.include_router(plans.router)
app.include_router(venues.router)

register_error_handlers(app)
