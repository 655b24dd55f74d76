"""Database Session Manager — async engine for the delegated transactional store.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to ConflictError or DatabaseError (core/errors.py)
    - SQLite transactions start with BEGIN IMMEDIATE: one writer at a time,
      readers inside a transaction see a stable snapshot
    - Non-SQLite transactions run at the isolation level requested by the caller

Design Decisions:
    - Serialization failures (SQLSTATE 40001/40P01) and SQLite busy errors are
      conflicts, surfaced as retryable; nothing here retries automatically
    - pysqlite autobegin disabled and BEGIN emitted from the engine "begin" event:
      the driver otherwise defers BEGIN until the first write, so reads would
      run outside the transaction (ADR: SQLAlchemy aiosqlite recipe)
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from acid_ledger.core.domain_types import IsolationLevel
from acid_ledger.core.errors import ConflictError, DatabaseError, LedgerError
from acid_ledger.db.base import Base
import acid_ledger.models  # noqa: F401

logger = logging.getLogger(__name__)

CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})
CONFLICT_MESSAGES = (
    "database is locked",
    "could not serialize access",
    "deadlock detected",
)


def is_conflict(exc: SQLAlchemyError) -> bool:
    """True when the store rejected the work because of concurrent access."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True
    message = str(orig if orig is not None else exc).lower()
    return any(marker in message for marker in CONFLICT_MESSAGES)


def translate_db_error(exc: SQLAlchemyError, operation: str) -> LedgerError:
    """Map a SQLAlchemy exception onto the ledger error hierarchy."""
    if isinstance(exc, DBAPIError) and is_conflict(exc):
        logger.warning(f"DB conflict during {operation}: {exc.orig}")
        return ConflictError(f"Concurrent write conflict during {operation}")
    if isinstance(exc, IntegrityError):
        logger.error(f"DB integrity error: {exc}")
        return DatabaseError("Integrity constraint violated", operation)
    if isinstance(exc, DBAPIError):
        logger.error(f"DB driver error: {exc}")
        return DatabaseError("Database driver error", operation)
    logger.error(f"SQLAlchemy error: {exc}")
    return DatabaseError("Database operation failed", operation)


def _use_explicit_sqlite_transactions(engine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_autobegin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        busy_timeout: float = 5.0,
    ):
        self.is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
        if self.is_sqlite:
            self.engine = create_async_engine(
                database_url, connect_args={"timeout": busy_timeout},
            )
            _use_explicit_sqlite_transactions(self.engine)
        else:
            self.engine = create_async_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
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
        except SQLAlchemyError as e:
            await session.rollback()
            raise translate_db_error(e, "transaction") from e
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def begin(
        self, session: AsyncSession, isolation_level: IsolationLevel | None = None,
    ) -> None:
        """Open the session's transaction now, at the requested isolation level.

        SQLite is serializable by construction and ignores the level.
        """
        if isolation_level is None or self.is_sqlite:
            await session.connection()
        else:
            await session.connection(
                execution_options={"isolation_level": isolation_level.value},
            )

    async def create_schema(self) -> None:
        """Create all tables registered on Base.metadata (idempotent)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except LedgerError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
