"""Ledger Service — the operation surface collaborators call: transfer, balance, seed.

Invariants:
    - transfer() always returns a TransferOutcome; malformed amounts become
      RolledBack(VALIDATION_ERROR) without touching the ledger
    - balance() raises AccountNotFoundError for unknown names (never returns zero)
    - balance()/balances() read outside any isolation scope: display only,
      never used to drive a mutation
    - seed() succeeds once per ledger

Design Decisions:
    - build_ledger_service wires the strategy chosen in Settings; the in-memory
      ledger and the delegated store share this facade
"""

import logging
import uuid
from typing import Mapping

from acid_ledger.config import Settings
from acid_ledger.core.domain_types import (
    AccountName, ConcurrencyStrategy, Money, RollbackReason, TransferId,
)
from acid_ledger.core.errors import ValidationError
from acid_ledger.core.fault_injection import FaultInjector
from acid_ledger.core.money import to_money
from acid_ledger.core.repository_protocols import ConcurrencyController, Ledger
from acid_ledger.core.transfer_types import RolledBack, TransferOutcome, TransferRequest
from acid_ledger.infrastructure.concurrency import (
    DelegatedIsolationController, ExclusiveLockController,
)
from acid_ledger.infrastructure.database import DatabaseSessionManager
from acid_ledger.infrastructure.in_memory_ledger import InMemoryLedger
from acid_ledger.infrastructure.sql_ledger import StoreLedger
from acid_ledger.services.transfer_transaction import TransferTransaction

logger = logging.getLogger(__name__)


class LedgerService:
    """Facade over one ledger and its concurrency controller."""

    def __init__(
        self,
        ledger: Ledger,
        controller: ConcurrencyController,
        fault_injector: FaultInjector | None = None,
        processing_delay: float = 0.0,
        db_manager: DatabaseSessionManager | None = None,
    ):
        self.ledger = ledger
        self.controller = controller
        self.fault_injector = fault_injector
        self.processing_delay = processing_delay
        self._db_manager = db_manager

    async def transfer(
        self, from_account: AccountName, to_account: AccountName, amount: object,
    ) -> TransferOutcome:
        try:
            parsed = to_money(amount)
        except ValidationError as e:
            return self._invalid_amount(from_account, to_account, amount, e)
        transaction = TransferTransaction(
            self.controller, self.fault_injector, self.processing_delay,
        )
        return await transaction.execute(
            TransferRequest(from_account, to_account, parsed),
        )

    async def balance(self, name: AccountName) -> Money:
        return await self.ledger.get_balance(name)

    async def balances(self) -> dict[AccountName, Money]:
        return await self.ledger.list_balances()

    async def seed(self, initial: Mapping[AccountName, Money]) -> None:
        await self.ledger.seed(initial)
        logger.info("Ledger seeded with %d account(s)", len(initial))

    async def is_seeded(self) -> bool:
        return await self.ledger.is_seeded()

    async def aclose(self) -> None:
        if self._db_manager is not None:
            await self._db_manager.dispose()

    def _invalid_amount(
        self, from_account: str, to_account: str, amount: object, error: ValidationError,
    ) -> RolledBack:
        logger.warning(
            f"Transfer rejected: {error.message}",
            extra={"from_account": from_account, "to_account": to_account,
                   "amount": repr(amount), "error_code": error.code},
        )
        return RolledBack(
            transfer_id=TransferId(uuid.uuid4().hex),
            request=None,
            reason=RollbackReason.VALIDATION_ERROR,
            message=error.message,
        )


async def build_ledger_service(
    settings: Settings, fault_injector: FaultInjector | None = None,
) -> LedgerService:
    """Wire the configured concurrency strategy. Does not seed."""
    processing_delay = settings.processing_delay_ms / 1000
    if settings.concurrency_strategy is ConcurrencyStrategy.DELEGATED:
        db_manager = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            busy_timeout=settings.database_busy_timeout_seconds,
        )
        await db_manager.create_schema()
        logger.info(
            "Ledger using delegated isolation (%s)", settings.isolation_level.value,
        )
        return LedgerService(
            StoreLedger(db_manager),
            DelegatedIsolationController(db_manager, settings.isolation_level),
            fault_injector,
            processing_delay,
            db_manager=db_manager,
        )

    ledger = InMemoryLedger()
    logger.info("Ledger using exclusive lock (timeout=%s)", settings.lock_timeout_seconds)
    return LedgerService(
        ledger,
        ExclusiveLockController(ledger, settings.lock_timeout_seconds),
        fault_injector,
        processing_delay,
    )
