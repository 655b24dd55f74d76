"""Boundary Protocols — contracts between the transfer algorithm and its storage/isolation shell.

Invariants:
    - Core NEVER imports from infrastructure: dependency arrows point inward only
    - Ledger performs no locking and no validation: it is a storage primitive
    - All ledger mutation happens through an IsolationScope held by one transaction

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: the SQL ledger does IO, so the in-memory ledger is async too;
      TransferTransaction awaits both the same way
"""

from contextlib import AbstractAsyncContextManager
from typing import Mapping, Protocol

from acid_ledger.core.domain_types import AccountName, Money
from acid_ledger.core.transfer_types import Snapshot


class Ledger(Protocol):
    """Account name -> balance storage. Unknown names raise AccountNotFoundError."""
    async def get_balance(self, name: AccountName) -> Money: ...
    async def set_balance(self, name: AccountName, amount: Money) -> None: ...
    async def account_exists(self, name: AccountName) -> bool: ...
    async def list_balances(self) -> dict[AccountName, Money]: ...
    async def seed(self, initial: Mapping[AccountName, Money]) -> None: ...
    async def is_seeded(self) -> bool: ...


class IsolationScope(Protocol):
    """Window of exclusive or isolated access held by one transaction."""
    ledger: Ledger

    async def restore(self, snapshot: Snapshot) -> None:
        """Put the account pair back to its pre-transaction balances."""
        ...


class ConcurrencyController(Protocol):
    """Hands out isolation scopes. Commits on clean exit, rolls back on exception."""
    name: str

    def scope(self) -> AbstractAsyncContextManager[IsolationScope]: ...
