"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - SQLAlchemy exceptions escaping a session are mapped to core/errors.py types
    - transaction() commits the whole block or nothing, cancellation included
    - Store calls are bounded by statement and lock timeouts (PostgreSQL)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Dialect-specific INSERT (ON CONFLICT) and advisory locks live here so
      services stay dialect-agnostic; PostgreSQL in production, SQLite in tests
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import func, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from goingout.core.errors import ConcurrencyError, DependencyUnavailableError

logger = logging.getLogger(__name__)


def _engine_options(
    database_url: str,
    pool_size: int,
    max_overflow: int,
    statement_timeout_seconds: float | None,
    lock_timeout_ms: int | None,
) -> dict:
    if not database_url.startswith("postgresql"):
        return {}
    connect_args: dict = {}
    if statement_timeout_seconds:
        connect_args["command_timeout"] = statement_timeout_seconds
    if lock_timeout_ms:
        connect_args["server_settings"] = {"lock_timeout": str(lock_timeout_ms)}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": connect_args,
    }


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        statement_timeout_seconds: float | None = None,
        lock_timeout_ms: int | None = None,
    ):
        self.engine = create_async_engine(
            database_url,
            **_engine_options(
                database_url, pool_size, max_overflow,
                statement_timeout_seconds, lock_timeout_ms,
            ),
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise ConcurrencyError("Integrity constraint violated; retry the request")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DependencyUnavailableError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DependencyUnavailableError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DependencyUnavailableError("Database operation failed", "unknown")
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


# ─── Unit-of-work helpers ────────────────────────────────────────

@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Run the block as one atomic unit: commit on success, roll back on any failure."""
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise


def dialect_name(db: AsyncSession) -> str:
    return db.bind.dialect.name


def dialect_insert(db: AsyncSession, model):
    """INSERT construct supporting on_conflict_do_nothing for the bound dialect."""
    if dialect_name(db) == "postgresql":
        return pg_insert(model)
    return sqlite_insert(model)


async def acquire_key_lock(db: AsyncSession, key: int) -> None:
    """Take a transaction-scoped lock on `key`; released at commit/rollback.

    PostgreSQL: pg_advisory_xact_lock. SQLite allows a single writer per
    database, so concurrent writers are already serialized there.
    """
    if dialect_name(db) == "postgresql":
        await db.execute(select(func.pg_advisory_xact_lock(key)))
