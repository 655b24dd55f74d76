"""Transfer Value Types — request, snapshot and outcome of a single transfer.

Invariants:
    - TransferRequest is immutable; validate() runs before any ledger access
    - TransferOutcome is Committed | RolledBack: no partial-success shape exists
    - Snapshot is owned by one TransferTransaction and discarded when it ends

Design Decisions:
    - Frozen dataclasses over pydantic in core: no IO boundary here, pydantic
      stays in schemas/ (ADR: core has no framework imports)
"""

from dataclasses import dataclass
from decimal import Decimal

from acid_ledger.core.domain_types import AccountName, Money, RollbackReason, TransferId
from acid_ledger.core.errors import ValidationError


@dataclass(frozen=True)
class TransferRequest:
    from_account: AccountName
    to_account: AccountName
    amount: Money

    def validate(self) -> None:
        """Raise ValidationError on a malformed request. Pure."""
        if not isinstance(self.from_account, str) or not self.from_account.strip():
            raise ValidationError("from account name must be non-empty", "from_account")
        if not isinstance(self.to_account, str) or not self.to_account.strip():
            raise ValidationError("to account name must be non-empty", "to_account")
        if self.from_account == self.to_account:
            raise ValidationError(
                f"cannot transfer from '{self.from_account}' to itself", "to_account",
            )
        if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
            raise ValidationError("amount must be a finite decimal", "amount")
        if self.amount <= 0:
            raise ValidationError(f"amount must be positive, got {self.amount}", "amount")

    def to_dict(self) -> dict:
        return {
            "from": self.from_account,
            "to": self.to_account,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class Snapshot:
    """Pre-mutation balances of the account pair, used only for rollback."""
    from_account: AccountName
    to_account: AccountName
    from_balance: Money
    to_balance: Money

    @property
    def total(self) -> Money:
        return self.from_balance + self.to_balance


@dataclass(frozen=True)
class Committed:
    transfer_id: TransferId
    request: TransferRequest
    from_balance: Money
    to_balance: Money

    committed = True

    def to_dict(self) -> dict:
        return {
            "transfer_id": self.transfer_id,
            "status": "committed",
            **self.request.to_dict(),
            "balances": {
                self.request.from_account: str(self.from_balance),
                self.request.to_account: str(self.to_balance),
            },
        }


@dataclass(frozen=True)
class RolledBack:
    """Rollback outcome. request is None when the input never parsed into one."""
    transfer_id: TransferId
    request: TransferRequest | None
    reason: RollbackReason
    message: str
    retryable: bool = False

    committed = False

    def to_dict(self) -> dict:
        return {
            "transfer_id": self.transfer_id,
            "status": "rolled_back",
            **(self.request.to_dict() if self.request is not None else {}),
            "reason": self.reason.value,
            "message": self.message,
            "retryable": self.retryable,
        }


TransferOutcome = Committed | RolledBack
