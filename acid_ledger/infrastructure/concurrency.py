"""Concurrency Controllers — isolation strategies that hand out transfer scopes.

Invariants:
    - No two transactions observe or produce an interleaved mutation of the same account pair
    - Every scope is released on every exit path (commit, business failure, fault, cancellation)
    - Once a committed scope is released, its writes are visible to the next scope holder
    - Conflicts are surfaced as ConflictError, never retried here

Design Decisions:
    - Exclusive lock: one asyncio.Lock over the whole ledger. Waiters are woken
      in arrival order, so a waiter cannot starve; deadlock-free since only one
      lock exists. Per-account locking is deliberately not offered
    - Delegated isolation: the transactional store owns conflict detection. Under
      REPEATABLE READ, write skew across disjoint account pairs is an accepted
      limitation of the configured level
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from acid_ledger.core.domain_types import ConcurrencyStrategy, IsolationLevel
from acid_ledger.core.errors import LockTimeoutError
from acid_ledger.core.repository_protocols import Ledger
from acid_ledger.core.transfer_types import Snapshot
from acid_ledger.infrastructure.database import DatabaseSessionManager
from acid_ledger.infrastructure.sql_ledger import SqlLedger

logger = logging.getLogger(__name__)


# ─── Exclusive-lock strategy ────────────────────────────────────

class ExclusiveLockScope:
    """Scope over the shared ledger while the process-wide lock is held."""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    async def restore(self, snapshot: Snapshot) -> None:
        await self.ledger.set_balance(snapshot.from_account, snapshot.from_balance)
        await self.ledger.set_balance(snapshot.to_account, snapshot.to_balance)


class ExclusiveLockController:
    """Serializable isolation through a single mutual-exclusion lock."""
    name = ConcurrencyStrategy.EXCLUSIVE_LOCK.value

    def __init__(self, ledger: Ledger, timeout: float | None = None):
        self.ledger = ledger
        self.timeout = timeout
        self._lock = asyncio.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    async def _acquire(self) -> None:
        if self.timeout is None:
            await self._lock.acquire()
            return
        try:
            await asyncio.wait_for(self._lock.acquire(), self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Ledger lock wait exceeded %ss", self.timeout)
            raise LockTimeoutError(self.timeout)

    @asynccontextmanager
    async def scope(self) -> AsyncGenerator[ExclusiveLockScope, None]:
        await self._acquire()
        try:
            yield ExclusiveLockScope(self.ledger)
        finally:
            self._lock.release()


# ─── Delegated-isolation strategy ───────────────────────────────

class DelegatedIsolationScope:
    """Scope over one open transaction of the external store."""

    def __init__(self, ledger: SqlLedger):
        self.ledger = ledger

    async def restore(self, snapshot: Snapshot) -> None:
        # An aborted store transaction rejects further writes; the rollback on
        # release restores the snapshot in that case.
        if self.ledger.failed:
            return
        await self.ledger.set_balance(snapshot.from_account, snapshot.from_balance)
        await self.ledger.set_balance(snapshot.to_account, snapshot.to_balance)


class DelegatedIsolationController:
    """Isolation delegated to the store's transactions at a named level."""
    name = ConcurrencyStrategy.DELEGATED.value

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        isolation_level: IsolationLevel = IsolationLevel.REPEATABLE_READ,
    ):
        self.db_manager = db_manager
        self.isolation_level = isolation_level

    @asynccontextmanager
    async def scope(self) -> AsyncGenerator[DelegatedIsolationScope, None]:
        async with self.db_manager.session() as session:
            await self.db_manager.begin(session, self.isolation_level)
            try:
                yield DelegatedIsolationScope(SqlLedger(session))
            except BaseException:
                await session.rollback()
                raise
            await session.commit()
