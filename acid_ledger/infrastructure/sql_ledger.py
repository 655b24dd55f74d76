"""SQL Ledger — Ledger Protocol over the accounts table of the delegated store.

Invariants:
    - SqlLedger runs inside a session whose transaction is owned by the caller
      (DelegatedIsolationController); it never commits or rolls back itself
    - Store failures are translated into ConflictError/DatabaseError and mark the
      ledger as failed: the store transaction can no longer be written to
    - StoreLedger opens one short session per call (reads outside any isolation
      scope are display-only and may be stale)

Design Decisions:
    - Column-level SELECT/UPDATE instead of ORM instances: no identity-map state
      survives between reads, every read hits the transaction's snapshot
"""

from decimal import Decimal
from typing import Mapping

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from acid_ledger.core.errors import AccountNotFoundError, LedgerAlreadySeededError
from acid_ledger.core.ledger_rules import normalize_seed
from acid_ledger.infrastructure.database import (
    DatabaseSessionManager, translate_db_error,
)
from acid_ledger.models.account import Account


class SqlLedger:
    """Ledger bound to one open AsyncSession transaction."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self.failed = False

    async def _execute(self, statement, operation: str):
        try:
            return await self._session.execute(statement)
        except SQLAlchemyError as e:
            self.failed = True
            raise translate_db_error(e, operation) from e

    async def get_balance(self, name: str) -> Decimal:
        result = await self._execute(
            select(Account.balance).where(Account.name == name), "select",
        )
        balance = result.scalar_one_or_none()
        if balance is None:
            raise AccountNotFoundError(name)
        return balance

    async def set_balance(self, name: str, amount: Decimal) -> None:
        result = await self._execute(
            update(Account)
            .where(Account.name == name)
            .values(balance=amount)
            .execution_options(synchronize_session=False),
            "update",
        )
        if result.rowcount == 0:
            raise AccountNotFoundError(name)

    async def account_exists(self, name: str) -> bool:
        result = await self._execute(
            select(Account.id).where(Account.name == name), "select",
        )
        return result.scalar_one_or_none() is not None

    async def list_balances(self) -> dict[str, Decimal]:
        result = await self._execute(
            select(Account.name, Account.balance).order_by(Account.name), "select",
        )
        return {name: balance for name, balance in result.all()}

    async def is_seeded(self) -> bool:
        result = await self._execute(select(func.count(Account.id)), "select")
        return result.scalar_one() > 0

    async def seed(self, initial: Mapping[str, Decimal]) -> None:
        accounts = normalize_seed(initial)
        if await self.is_seeded():
            raise LedgerAlreadySeededError()
        self._session.add_all(
            Account(name=name, balance=balance) for name, balance in accounts.items()
        )
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            self.failed = True
            raise translate_db_error(e, "seed") from e


class StoreLedger:
    """Ledger that opens and commits its own short transaction per call."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self._db = db_manager

    async def get_balance(self, name: str) -> Decimal:
        async with self._db.session() as session:
            return await SqlLedger(session).get_balance(name)

    async def set_balance(self, name: str, amount: Decimal) -> None:
        async with self._db.session() as session:
            await SqlLedger(session).set_balance(name, amount)
            await session.commit()

    async def account_exists(self, name: str) -> bool:
        async with self._db.session() as session:
            return await SqlLedger(session).account_exists(name)

    async def list_balances(self) -> dict[str, Decimal]:
        async with self._db.session() as session:
            return await SqlLedger(session).list_balances()

    async def is_seeded(self) -> bool:
        async with self._db.session() as session:
            return await SqlLedger(session).is_seeded()

    async def seed(self, initial: Mapping[str, Decimal]) -> None:
        async with self._db.session() as session:
            await SqlLedger(session).seed(initial)
            await session.commit()
