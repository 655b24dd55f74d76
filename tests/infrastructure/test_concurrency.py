"""Concurrency Controllers — tests for scope acquisition and release.

Tests cover:
    - exclusive lock released on clean exit and on exception
    - waiters acquire in arrival order
    - bounded wait raises LockTimeoutError
    - exclusive scope restore writes snapshot values back
    - delegated scope commits on clean exit, rolls back on exception
    - delegated restore is skipped once the store transaction has failed
"""

import asyncio
from decimal import Decimal

import pytest

from acid_ledger.core.domain_types import IsolationLevel
from acid_ledger.core.errors import LockTimeoutError
from acid_ledger.core.transfer_types import Snapshot
from acid_ledger.infrastructure.concurrency import (
    DelegatedIsolationController, ExclusiveLockController,
)
from acid_ledger.infrastructure.sql_ledger import StoreLedger


# ─── Exclusive lock ──────────────────────────────────────────────

async def test_lock_released_after_scope(lock_controller):
    async with lock_controller.scope():
        assert lock_controller.locked
    assert not lock_controller.locked


async def test_lock_released_on_exception(lock_controller):
    with pytest.raises(RuntimeError):
        async with lock_controller.scope():
            raise RuntimeError("boom")
    assert not lock_controller.locked


async def test_waiters_acquire_in_arrival_order(lock_controller):
    order = []

    async def worker(n):
        async with lock_controller.scope():
            order.append(n)

    async with lock_controller.scope():
        tasks = [asyncio.create_task(worker(n)) for n in range(3)]
        await asyncio.sleep(0.01)
        assert order == []
    await asyncio.gather(*tasks)
    assert order == [0, 1, 2]


async def test_lock_timeout(ledger):
    controller = ExclusiveLockController(ledger, timeout=0.05)
    async with controller.scope():
        with pytest.raises(LockTimeoutError) as exc_info:
            async with controller.scope():
                pass
    assert exc_info.value.retryable is True
    assert not controller.locked


async def test_exclusive_restore(lock_controller, ledger):
    async with lock_controller.scope() as scope:
        await ledger.set_balance("Alice", Decimal("1"))
        await ledger.set_balance("Bob", Decimal("2"))
        await scope.restore(Snapshot("Alice", "Bob", Decimal("500"), Decimal("300")))
    assert await ledger.get_balance("Alice") == Decimal("500")
    assert await ledger.get_balance("Bob") == Decimal("300")


# ─── Delegated isolation ────────────────────────────────────────

@pytest.fixture
async def store(db_manager):
    store = StoreLedger(db_manager)
    await store.seed({"Alice": Decimal("500"), "Bob": Decimal("300")})
    return store


async def test_delegated_scope_commits(db_manager, store):
    controller = DelegatedIsolationController(db_manager, IsolationLevel.SERIALIZABLE)
    async with controller.scope() as scope:
        await scope.ledger.set_balance("Alice", Decimal("450"))
    assert await store.get_balance("Alice") == Decimal("450")


async def test_delegated_scope_rolls_back_on_exception(db_manager, store):
    controller = DelegatedIsolationController(db_manager)
    with pytest.raises(RuntimeError):
        async with controller.scope() as scope:
            await scope.ledger.set_balance("Alice", Decimal("0"))
            raise RuntimeError("boom")
    assert await store.get_balance("Alice") == Decimal("500")


async def test_delegated_restore_skipped_after_store_failure(db_manager, store):
    controller = DelegatedIsolationController(db_manager)
    with pytest.raises(RuntimeError):
        async with controller.scope() as scope:
            await scope.ledger.set_balance("Alice", Decimal("0"))
            scope.ledger.failed = True
            await scope.restore(Snapshot("Alice", "Bob", Decimal("7"), Decimal("7")))
            raise RuntimeError("store failed")
    assert await store.get_balance("Alice") == Decimal("500")
    assert await store.get_balance("Bob") == Decimal("300")
