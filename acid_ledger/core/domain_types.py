"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountName wraps str: account identity is its unique name
    - Money is always decimal.Decimal, never float
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: CLI and logs emit JSON)
"""

from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountName = NewType("AccountName", str)
TransferId = NewType("TransferId", str)


# ─── Value Types ─────────────────────────────────────────────────

Money = Decimal
ZERO = Decimal("0")


# ─── Enums ───────────────────────────────────────────────────────

class RollbackReason(str, Enum):
    """Why a transfer was rolled back. Mirrors LedgerError codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INJECTED_FAULT = "INJECTED_FAULT"
    CONFLICT = "CONFLICT"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"
    STORE_ERROR = "STORE_ERROR"

    @classmethod
    def from_code(cls, code: str) -> "RollbackReason":
        """Map a LedgerError.code onto a reason; unknown codes are store errors."""
        try:
            return cls(code)
        except ValueError:
            return cls.STORE_ERROR


class ConcurrencyStrategy(str, Enum):
    """Isolation strategies selectable by configuration."""
    EXCLUSIVE_LOCK = "exclusive_lock"
    DELEGATED = "delegated"


class IsolationLevel(str, Enum):
    """Isolation levels accepted by the delegated strategy (SQL spelling)."""
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class FaultPoint(str, Enum):
    """Checkpoints inside a transfer where a fault can be injected."""
    AFTER_DEBIT = "after_debit"
    BEFORE_COMMIT = "before_commit"
