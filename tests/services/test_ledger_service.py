"""Ledger Service — facade behaviour under both concurrency strategies.

Tests cover:
    - transfer() parses amounts and rejects malformed ones without touching the ledger
    - balance() is idempotent and distinguishes unknown accounts
    - seed() runs once
    - delegated strategy: commit, insufficient funds, injected fault, unknown account,
      serializability of Alice->Bob 100/600, conflict surfaced as retryable rollback
    - build_ledger_service wires the configured strategy
"""

import asyncio
from decimal import Decimal

import pytest

from acid_ledger.config import Settings
from acid_ledger.core.domain_types import ConcurrencyStrategy, FaultPoint, RollbackReason
from acid_ledger.core.errors import AccountNotFoundError, LedgerAlreadySeededError
from acid_ledger.infrastructure.concurrency import (
    DelegatedIsolationController, ExclusiveLockController,
)
from acid_ledger.infrastructure.database import DatabaseSessionManager
from acid_ledger.infrastructure.sql_ledger import StoreLedger
from acid_ledger.services.ledger_service import LedgerService, build_ledger_service


# ─── facade (exclusive lock) ────────────────────────────────────

async def test_transfer_accepts_string_amount(lock_service):
    outcome = await lock_service.transfer("Alice", "Bob", "99.99")
    assert outcome.committed
    assert await lock_service.balance("Alice") == Decimal("400.01")


@pytest.mark.parametrize("amount", ["ten", "NaN", None, "-1", "0"])
async def test_malformed_amount_is_validation_rollback(lock_service, amount):
    outcome = await lock_service.transfer("Alice", "Bob", amount)
    assert outcome.reason is RollbackReason.VALIDATION_ERROR
    assert outcome.transfer_id
    assert await lock_service.balances() == {"Alice": Decimal("500"), "Bob": Decimal("300")}


@pytest.mark.parametrize("amount", ["ten", "NaN", None])
async def test_unparsable_amount_carries_no_request(lock_service, amount):
    outcome = await lock_service.transfer("Alice", "Bob", amount)
    assert outcome.request is None
    assert "amount" not in outcome.to_dict()


async def test_parsed_negative_amount_keeps_typed_request(lock_service):
    outcome = await lock_service.transfer("Alice", "Bob", "-1")
    assert outcome.request.amount == Decimal("-1")
    assert outcome.reason is RollbackReason.VALIDATION_ERROR


async def test_balance_is_idempotent(lock_service):
    assert await lock_service.balance("Bob") == await lock_service.balance("Bob")


async def test_balance_unknown_account(lock_service):
    with pytest.raises(AccountNotFoundError):
        await lock_service.balance("Carol")


async def test_seed_twice_rejected(lock_service):
    assert await lock_service.is_seeded()
    with pytest.raises(LedgerAlreadySeededError):
        await lock_service.seed({"Carol": Decimal("1")})


# ─── delegated isolation ────────────────────────────────────────

async def test_delegated_commit(delegated_service):
    outcome = await delegated_service.transfer("Alice", "Bob", "100")
    assert outcome.committed
    assert await delegated_service.balances() == {
        "Alice": Decimal("400"), "Bob": Decimal("400"),
    }


async def test_delegated_insufficient_funds(delegated_service):
    outcome = await delegated_service.transfer("Alice", "Bob", "600")
    assert outcome.reason is RollbackReason.INSUFFICIENT_FUNDS
    assert await delegated_service.balance("Alice") == Decimal("500")


async def test_delegated_injected_fault_restores(delegated_service, faults):
    faults.arm(FaultPoint.AFTER_DEBIT)
    outcome = await delegated_service.transfer("Alice", "Bob", "100")
    assert outcome.reason is RollbackReason.INJECTED_FAULT
    assert await delegated_service.balances() == {
        "Alice": Decimal("500"), "Bob": Decimal("300"),
    }


async def test_delegated_unknown_account(delegated_service):
    outcome = await delegated_service.transfer("Alice", "Carol", "10")
    assert outcome.reason is RollbackReason.ACCOUNT_NOT_FOUND
    assert await delegated_service.balance("Alice") == Decimal("500")


async def test_delegated_concurrent_transfers_serialize(delegated_service):
    delegated_service.processing_delay = 0.05
    outcomes = await asyncio.gather(
        delegated_service.transfer("Alice", "Bob", "100"),
        delegated_service.transfer("Alice", "Bob", "600"),
    )
    assert sorted(o.committed for o in outcomes) == [False, True]
    assert await delegated_service.balances() == {
        "Alice": Decimal("400"), "Bob": Decimal("400"),
    }


async def test_delegated_conflict_is_retryable_rollback(database_url):
    db_manager = DatabaseSessionManager(database_url, busy_timeout=0.05)
    await db_manager.create_schema()
    service = LedgerService(
        StoreLedger(db_manager),
        DelegatedIsolationController(db_manager),
        processing_delay=0.5,
        db_manager=db_manager,
    )
    try:
        await service.seed({"Alice": Decimal("500"), "Bob": Decimal("300")})
        outcomes = await asyncio.gather(
            service.transfer("Alice", "Bob", "100"),
            service.transfer("Bob", "Alice", "50"),
        )
        rolled_back = [o for o in outcomes if not o.committed]
        assert len(rolled_back) == 1
        assert rolled_back[0].reason is RollbackReason.CONFLICT
        assert rolled_back[0].retryable is True
        balances = await service.balances()
        assert sum(balances.values()) == Decimal("800")
    finally:
        await service.aclose()


# ─── bootstrap ──────────────────────────────────────────────────

async def test_build_exclusive_lock_service():
    service = await build_ledger_service(
        Settings(_env_file=None, lock_timeout_seconds=1.5),
    )
    assert isinstance(service.controller, ExclusiveLockController)
    assert service.controller.timeout == 1.5
    assert await service.is_seeded() is False
    await service.seed({"Alice": Decimal("1")})
    assert await service.balance("Alice") == Decimal("1")


async def test_build_delegated_service(database_url):
    service = await build_ledger_service(Settings(
        _env_file=None,
        concurrency_strategy=ConcurrencyStrategy.DELEGATED,
        database_url=database_url,
        processing_delay_ms=20,
    ))
    try:
        assert isinstance(service.controller, DelegatedIsolationController)
        assert service.processing_delay == 0.02
        await service.seed({"Alice": Decimal("10"), "Bob": Decimal("0")})
        outcome = await service.transfer("Alice", "Bob", "10")
        assert outcome.committed
        assert await service.balance("Bob") == Decimal("10")
    finally:
        await service.aclose()
