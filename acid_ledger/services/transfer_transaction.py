"""Transfer Transaction — executes one transfer as an all-or-nothing unit.

Invariants:
    - Validation runs before any isolation scope is acquired
    - All ledger mutation happens inside the scope from the ConcurrencyController
    - Any LedgerError after the snapshot restores both balances before the scope is released
    - execute() returns Committed | RolledBack; no LedgerError escapes
    - Once the scope is released, from+to equals its pre-transaction total

Design Decisions:
    - Explicit acquire / mutate / commit-or-rollback via `async with scope`
      instead of declarative transaction boundaries: release is guaranteed
      on every exit path
    - One instance per transfer: the snapshot lives and dies with it
"""

import asyncio
import logging
import uuid

from acid_ledger.core.domain_types import FaultPoint, RollbackReason, TransferId
from acid_ledger.core.errors import LedgerError
from acid_ledger.core.fault_injection import FaultInjector
from acid_ledger.core.ledger_rules import check_sufficient_funds, post_transfer_balances
from acid_ledger.core.repository_protocols import ConcurrencyController, Ledger
from acid_ledger.core.transfer_types import (
    Committed, RolledBack, Snapshot, TransferOutcome, TransferRequest,
)

logger = logging.getLogger(__name__)


class TransferTransaction:
    """Snapshot, validate, mutate, commit-or-rollback."""

    def __init__(
        self,
        controller: ConcurrencyController,
        fault_injector: FaultInjector | None = None,
        processing_delay: float = 0.0,
    ):
        self._controller = controller
        self._faults = fault_injector
        self._processing_delay = processing_delay
        self.transfer_id = TransferId(uuid.uuid4().hex)
        self.snapshot: Snapshot | None = None

    async def execute(self, request: TransferRequest) -> TransferOutcome:
        log_extra = {
            "transfer_id": self.transfer_id,
            "from_account": request.from_account,
            "to_account": request.to_account,
            "amount": str(request.amount),
            "strategy": self._controller.name,
        }
        try:
            request.validate()
        except LedgerError as e:
            return self._rolled_back(request, e, log_extra)

        logger.info("Transfer started", extra=log_extra)
        try:
            async with self._controller.scope() as scope:
                new_from, new_to = await self._run(scope, request)
        except LedgerError as e:
            return self._rolled_back(request, e, log_extra)
        finally:
            self.snapshot = None

        logger.info("Transfer committed", extra={**log_extra, "outcome": "committed"})
        return Committed(
            transfer_id=self.transfer_id,
            request=request,
            from_balance=new_from,
            to_balance=new_to,
        )

    async def _run(self, scope, request: TransferRequest):
        snapshot = await self._take_snapshot(scope.ledger, request)
        try:
            check_sufficient_funds(snapshot, request.amount)
            if self._processing_delay:
                await asyncio.sleep(self._processing_delay)
            new_from, new_to = post_transfer_balances(snapshot, request.amount)
            await scope.ledger.set_balance(request.from_account, new_from)
            self._checkpoint(FaultPoint.AFTER_DEBIT)
            await scope.ledger.set_balance(request.to_account, new_to)
            self._checkpoint(FaultPoint.BEFORE_COMMIT)
        except LedgerError:
            await scope.restore(snapshot)
            raise
        return new_from, new_to

    async def _take_snapshot(self, ledger: Ledger, request: TransferRequest) -> Snapshot:
        self.snapshot = Snapshot(
            from_account=request.from_account,
            to_account=request.to_account,
            from_balance=await ledger.get_balance(request.from_account),
            to_balance=await ledger.get_balance(request.to_account),
        )
        return self.snapshot

    def _checkpoint(self, point: FaultPoint) -> None:
        if self._faults is not None:
            self._faults.check(point)

    def _rolled_back(
        self, request: TransferRequest, error: LedgerError, log_extra: dict,
    ) -> RolledBack:
        error.context.transfer_id = self.transfer_id
        reason = RollbackReason.from_code(error.code)
        logger.warning(
            f"Transfer rolled back: {error.message}",
            extra={
                **log_extra,
                "outcome": "rolled_back",
                "reason": reason.value,
                "error_code": error.code,
                "retryable": error.retryable,
            },
        )
        return RolledBack(
            transfer_id=self.transfer_id,
            request=request,
            reason=reason,
            message=error.message,
            retryable=error.retryable,
        )
