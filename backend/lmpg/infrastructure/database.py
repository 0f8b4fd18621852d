"""Database Sessions — engine, per-request sessions and connectivity ping.

Invariants:
    - A session that raises is rolled back and closed before the error leaves
    - SQLAlchemy failures surface as DatabaseError (503) with a message that
      names the failed operation, never the SQL or driver text
    - db_manager is None until the lifespan (or the migrate CLI) calls init_db

Design Decisions:
    - expire_on_commit=False: route handlers serialize rows after commit
    - SQLite URLs skip pool sizing (aiosqlite pools do not accept it)
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

from lmpg.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors.
SESSION_FAILURES = (
    (IntegrityError, "Conflicting church, gathering or roster record", "write"),
    (OperationalError, "Attendance database unreachable", "connect"),
    (DBAPIError, "Attendance database rejected the statement", "execute"),
    (SQLAlchemyError, "Attendance database session failed", "session"),
)


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions that roll back on failure."""

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
        except SQLAlchemyError as e:
            await session.rollback()
            raise to_database_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when `SELECT 1` succeeds."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except (DatabaseError, OSError) as e:
            logger.error(f"Database ping failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def to_database_error(error: SQLAlchemyError) -> DatabaseError:
    message, operation = next(
        (message, operation)
        for error_type, message, operation in SESSION_FAILURES
        if isinstance(error, error_type)
    )
    logger.error(
        f"{message} ({type(error).__name__}): {error}",
        extra={"error_code": "DATABASE_ERROR"},
    )
    return DatabaseError(message, operation)


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


def get_db_manager() -> DatabaseSessionManager:
    if not db_manager:
        raise RuntimeError("Database not initialized; call init_db() first")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_db_manager().session() as session:
        yield session
