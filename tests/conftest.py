"""Root conftest — shared ledger fixtures.

Invariants:
    - Every test gets a freshly seeded ledger (Alice=500, Bob=300)
    - Delegated-store tests get their own SQLite file under tmp_path
    - LEDGER_* environment variables never leak into tests

Design Decisions:
    - SQLite file instead of :memory:: every aiosqlite connection to :memory:
      would open a separate, empty database
"""

import os
from decimal import Decimal

import pytest

from acid_ledger.config import get_settings
from acid_ledger.core.fault_injection import FaultInjector
from acid_ledger.infrastructure.concurrency import (
    DelegatedIsolationController, ExclusiveLockController,
)
from acid_ledger.infrastructure.database import DatabaseSessionManager
from acid_ledger.infrastructure.in_memory_ledger import InMemoryLedger
from acid_ledger.infrastructure.sql_ledger import StoreLedger
from acid_ledger.services.ledger_service import LedgerService

SEED = {"Alice": Decimal("500"), "Bob": Decimal("300")}


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for key in list(os.environ):
        if key.startswith("LEDGER_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def ledger():
    ledger = InMemoryLedger()
    await ledger.seed(SEED)
    return ledger


@pytest.fixture
def faults():
    return FaultInjector()


@pytest.fixture
def lock_controller(ledger):
    return ExclusiveLockController(ledger)


@pytest.fixture
def lock_service(ledger, lock_controller, faults):
    return LedgerService(ledger, lock_controller, faults)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
async def db_manager(database_url):
    manager = DatabaseSessionManager(database_url)
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest.fixture
async def delegated_service(db_manager, faults):
    service = LedgerService(
        StoreLedger(db_manager),
        DelegatedIsolationController(db_manager),
        faults,
        db_manager=db_manager,
    )
    await service.seed(SEED)
    return service
