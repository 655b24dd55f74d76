"""In-Memory Ledger — authoritative account name -> balance mapping for the exclusive-lock strategy.

Invariants:
    - Keys are unique account names; no ordering guarantee
    - No locking here: ExclusiveLockController owns the concurrency policy
    - get_balance on an unknown name raises AccountNotFoundError (never returns zero)
    - Seeded means at least one account is stored, as in SqlLedger

Design Decisions:
    - Same Protocol as SqlLedger, so TransferTransaction is strategy-agnostic
      (ADR: separation of mechanism from policy)
"""

from typing import Mapping

from acid_ledger.core.domain_types import AccountName, Money
from acid_ledger.core.errors import AccountNotFoundError, LedgerAlreadySeededError
from acid_ledger.core.ledger_rules import normalize_seed


class InMemoryLedger:
    """Dict-backed ledger. Lifetime = process (or test fixture)."""

    def __init__(self) -> None:
        self._accounts: dict[AccountName, Money] = {}

    async def get_balance(self, name: AccountName) -> Money:
        try:
            return self._accounts[name]
        except KeyError:
            raise AccountNotFoundError(name)

    async def set_balance(self, name: AccountName, amount: Money) -> None:
        if name not in self._accounts:
            raise AccountNotFoundError(name)
        self._accounts[name] = amount

    async def account_exists(self, name: AccountName) -> bool:
        return name in self._accounts

    async def list_balances(self) -> dict[AccountName, Money]:
        return dict(self._accounts)

    async def seed(self, initial: Mapping[AccountName, Money]) -> None:
        accounts = normalize_seed(initial)
        if self._accounts:
            raise LedgerAlreadySeededError()
        self._accounts.update(accounts)

    async def is_seeded(self) -> bool:
        return bool(self._accounts)
