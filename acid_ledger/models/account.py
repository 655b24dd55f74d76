"""Account ORM — one row per named account in the delegated transactional store.

Invariants:
    - name is unique and non-nullable (account identity)
    - balance is an exact decimal, never negative after a committed transaction
    - updated_at refreshed on every write

Design Decisions:
    - Integer surrogate key plus unique name: the store may be shared with other services,
      lookups always go through name
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from acid_ledger.db.base import Base
from acid_ledger.db.types import ExactDecimal


class Account(Base):
    """Named account with its balance."""
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    balance: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
