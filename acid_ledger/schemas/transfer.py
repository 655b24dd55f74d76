"""Transfer Schemas — Pydantic models for batch transfer input and balance reports.

Invariants:
    - TransferCommand: names stripped and non-empty, from != to, amount > 0
    - Amounts are Decimal; floats in JSON input are parsed from their text form
    - BalanceReport.total is the sum of all listed balances

Design Decisions:
    - "from"/"to" accepted as aliases: batch files use the short keys, Python
      code uses from_account/to_account (populate_by_name)
    - Boundary validation duplicates TransferRequest.validate() on purpose:
      a bad batch file is rejected before any transfer runs
"""

from decimal import Decimal

from pydantic import (
    BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator,
)

from acid_ledger.core.domain_types import ZERO


class TransferCommand(BaseModel):
    """One transfer as supplied by a collaborator (CLI, batch job)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_account: str = Field(alias="from", min_length=1, max_length=255)
    to_account: str = Field(alias="to", min_length=1, max_length=255)
    amount: Decimal = Field(gt=0, allow_inf_nan=False)

    @field_validator("from_account", "to_account")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("account name cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def distinct_accounts(self) -> "TransferCommand":
        if self.from_account == self.to_account:
            raise ValueError("from and to must be different accounts")
        return self


class TransferBatch(RootModel[list[TransferCommand]]):
    """JSON array of transfer commands."""

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)


class BalanceReport(BaseModel):
    """Snapshot of balances for display. Not a consistent read."""
    balances: dict[str, Decimal]
    total: Decimal

    @classmethod
    def from_balances(cls, balances: dict[str, Decimal]) -> "BalanceReport":
        return cls(balances=balances, total=sum(balances.values(), ZERO))
