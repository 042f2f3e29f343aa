"""E-Petitions API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map EPetitionsError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager; the site
      cache is reset so a restart always re-reads the `sites` row
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from epetitions import __version__
from epetitions.api.error_handlers import register_error_handlers
from epetitions.api.routes import (
    admin_jobs, admin_petitions, admin_site, admin_users, health, petitions, site,
)
from epetitions.config import get_settings
from epetitions.infrastructure import database
from epetitions.infrastructure.observability import setup_logging
from epetitions.services import site_service

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
    site_service.reset()
    logger.info("E-Petitions API started")
    yield
    logger.info("E-Petitions API shutting down")
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(title="E-Petitions API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(site.router)
app.include_router(petitions.router)
app.include_router(admin_petitions.router)
app.include_router(admin_site.router)
app.include_router(admin_users.router)
app.include_router(admin_jobs.router)

register_error_handlers(app)
