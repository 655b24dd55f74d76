"""Ledger Rules — pure consistency checks and balance arithmetic for transfers and seeding.

Invariants:
    - All functions are PURE: they read values and return values or raise, never mutate
    - No reachable committed state has a negative balance
    - A committed transfer conserves from_balance + to_balance

Design Decisions:
    - Separated from TransferTransaction: the shell awaits ledger IO, these
      functions decide (ADR: functional core, imperative shell)
"""

from decimal import Decimal
from typing import Mapping

from acid_ledger.core.domain_types import ZERO, AccountName, Money
from acid_ledger.core.errors import InsufficientFundsError, ValidationError
from acid_ledger.core.money import to_money
from acid_ledger.core.transfer_types import Snapshot


def check_sufficient_funds(snapshot: Snapshot, amount: Decimal) -> None:
    """Raise InsufficientFundsError if the debit would go below zero."""
    if snapshot.from_balance < amount:
        raise InsufficientFundsError(
            snapshot.from_account, snapshot.from_balance, amount,
        )


def post_transfer_balances(
    snapshot: Snapshot, amount: Decimal,
) -> tuple[Decimal, Decimal]:
    """Return (new_from_balance, new_to_balance) for a validated transfer."""
    return snapshot.from_balance - amount, snapshot.to_balance + amount


def normalize_seed(initial: Mapping[str, object]) -> dict[AccountName, Money]:
    """Validate seed data: at least one account, non-empty names, finite non-negative balances.

    An empty seed is rejected: both ledgers report is_seeded() from stored accounts.
    """
    if not initial:
        raise ValidationError("seed must contain at least one account", "accounts")
    seed: dict[AccountName, Money] = {}
    for name, raw in initial.items():
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("seed account name must be non-empty", "name")
        balance = to_money(raw, field=f"balance[{name}]")
        if balance < ZERO:
            raise ValidationError(
                f"seed balance for '{name}' must be non-negative, got {balance}",
                f"balance[{name}]",
            )
        seed[AccountName(name)] = balance
    return seed
