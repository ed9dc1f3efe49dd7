"""Application lifecycle management for startup and shutdown tasks."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from sqlalchemy.engine import make_url

from tunebridge.config import Settings, get_settings
from tunebridge.domain.exceptions import ConfigurationError
from tunebridge.infrastructure.integrations.http_pool import HttpClientPool
from tunebridge.infrastructure.observability import configure_logging
from tunebridge.infrastructure.persistence import Database

logger = logging.getLogger(__name__)


# Hey future me, SQLite won't create missing parent directories for the .db file and the error
# it gives is cryptic. Make sure the directory exists before the engine connects. No-op for
# in-memory databases and non-SQLite URLs.
def _ensure_sqlite_directory(settings: Settings) -> None:
    url = make_url(settings.database.url)
    if not url.drivername.startswith("sqlite") or not url.database:
        return
    if url.database == ":memory:":
        return

    parent = Path(url.database).parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{parent}': {exc}. "
            "Update DATABASE_URL or adjust directory permissions."
        ) from exc


# Listen future me, everything before `yield` runs at STARTUP, everything after at SHUTDOWN.
# The database lives on app.state so dependencies can reach it (see api/dependencies.get_database).
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles:
    - Logging configuration
    - Database initialization (tables are created, there are no migrations)
    - Resource cleanup (database engine, shared HTTP client pool)
    """
    settings = get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.log_json,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    _ensure_sqlite_directory(settings)
    db = Database(settings)
    app.state.db = db
    try:
        await db.create_tables()
        logger.info("Database initialized")
        yield
    finally:
        logger.info("Shutting down application")
        await db.close()
        logger.info("Database connection closed")
        await HttpClientPool.close()
