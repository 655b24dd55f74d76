"""Error Hierarchy — typed, categorized failures that drive transfer rollback.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business and validation errors never leave the ledger mutated
    - retryable is True only for contention failures (conflict, lock timeout)
    - to_dict() produces the envelope collaborators render (CLI, batch reports)

Design Decisions:
    - Single hierarchy with LedgerError base: TransferTransaction catches one type
      and converts it into a RolledBack outcome (ADR: errors are values at the boundary)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    transfer_id: str | None = None
    account: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class LedgerError(Exception):
    """Base exception for all ledger failures."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.retryable = retryable

    def to_dict(self) -> dict:
        """Convert to the standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "transfer_id": self.context.transfer_id,
                    "account": self.context.account,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors ──────────────────────────────────────────────

class ValidationError(LedgerError):
    """Malformed transfer request or seed data. Never touches the ledger."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.field = field


class AccountNotFoundError(LedgerError):
    """Account name was never seeded."""
    def __init__(self, account: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.account = account
        super().__init__(
            f"Account '{account}' not found",
            "ACCOUNT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx,
        )
        self.account = account


class InsufficientFundsError(LedgerError):
    """Debit would drive the balance below zero."""
    def __init__(
        self,
        account: str,
        balance: Decimal,
        amount: Decimal,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.account = account
        super().__init__(
            f"Insufficient funds in {account}'s account "
            f"(balance {balance}, requested {amount})",
            "INSUFFICIENT_FUNDS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx,
        )
        self.account = account
        self.balance = balance
        self.amount = amount


class LedgerAlreadySeededError(LedgerError):
    """seed() called on a ledger that already holds accounts."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Ledger is already seeded; seed() runs once at startup",
            "LEDGER_ALREADY_SEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context,
        )


class InjectedFaultError(LedgerError):
    """Deliberately forced failure used to exercise the rollback path."""
    def __init__(
        self,
        message: str,
        code: str = "INJECTED_FAULT",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        context: ErrorContext | None = None,
        retryable: bool = False,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.ERROR, context, retryable,
        )


class LockTimeoutError(InjectedFaultError):
    """Exclusive lock not acquired within the configured bound."""
    def __init__(self, timeout: float, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = int(timeout * 1000)
        super().__init__(
            f"Ledger lock not acquired within {timeout}s",
            "LOCK_TIMEOUT", ErrorCategory.TIMEOUT, ctx, retryable=True,
        )
        self.timeout = timeout


# ─── Store Errors ───────────────────────────────────────────────

class ConflictError(LedgerError):
    """Concurrent write conflict detected by the transactional store."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, retryable=True,
        )


class DatabaseError(LedgerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
