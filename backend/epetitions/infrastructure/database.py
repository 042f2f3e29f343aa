"""Database Session Manager — async engine, per-request sessions and error mapping.

Invariants:
    - Every session rolls back on exception (no partial commits leak)
    - A unique-constraint violation the app knows about becomes a field-level
      RecordValidationError (422); any other SQLAlchemy exception becomes
      DatabaseError (503)
    - SQLite URLs get no pool sizing (tests run on aiosqlite in memory)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - Background jobs open their own session through db_manager; the request
      session is closed by the time they run
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Constraints are recognised by name (PostgreSQL) or by the column list in
      the message (SQLite), both listed in UNIQUE_CONSTRAINT_ERRORS
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from epetitions.core.errors import DatabaseError, ErrorContext, RecordValidationError

logger = logging.getLogger(__name__)

# (markers found in the driver message) -> field errors
UNIQUE_CONSTRAINT_ERRORS: tuple[tuple[tuple[str, ...], dict[str, list[str]]], ...] = (
    (
        (
            "uq_signatures_petition_email_name",
            "signatures.petition_id, signatures.email, signatures.name",
        ),
        {"email": ["has already signed this petition"]},
    ),
    (
        ("admin_users_email_key", "admin_users.email"),
        {"email": ["has already been taken"]},
    ),
)

# Checked in order: most specific first
_ERROR_OPERATIONS = (
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
)


def translate_integrity_error(
    exc: IntegrityError, context: ErrorContext | None = None,
) -> RecordValidationError | DatabaseError:
    """Domain error for a failed INSERT/UPDATE; the caller raises it."""
    message = str(exc.orig)
    for markers, errors in UNIQUE_CONSTRAINT_ERRORS:
        if any(marker in message for marker in markers):
            return RecordValidationError(errors, context)
    return DatabaseError("Integrity constraint violated", "commit", context)


def translate_sqlalchemy_error(exc: SQLAlchemyError) -> DatabaseError:
    for error_type, message, operation in _ERROR_OPERATIONS:
        if isinstance(exc, error_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back on error."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.warning(f"DB integrity error: {e.orig}")
            raise translate_integrity_error(e) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"DB error: {e}")
            raise translate_sqlalchemy_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
