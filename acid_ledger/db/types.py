"""Exact Decimal Column — stores Decimal balances without binary-float rounding on any backend.

Invariants:
    - Python side is always decimal.Decimal (or None)
    - Database side is the canonical string form: SQLite NUMERIC would round-trip via float

Design Decisions:
    - TypeDecorator over Numeric: one column type behaves identically on SQLite
      (tests) and PostgreSQL (production)
"""

from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class ExactDecimal(TypeDecorator):
    """Decimal persisted as text."""
    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)
