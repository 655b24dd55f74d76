"""Money Parsing — converts caller-supplied amounts into exact decimals.

Invariants:
    - Result is always a finite decimal.Decimal
    - Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion
    - bool is rejected even though it subclasses int

Design Decisions:
    - Pure function raising ValidationError: callers decide whether that is a
      RolledBack outcome (transfer) or a bootstrap failure (seed)
"""

from decimal import Decimal, InvalidOperation

from acid_ledger.core.errors import ValidationError


def to_money(value: object, field: str = "amount") -> Decimal:
    """Parse value into a finite Decimal or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, got bool", field)
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise ValidationError(f"{field} is not a valid decimal: {value!r}", field)
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        raise ValidationError(
            f"{field} must be a decimal, int or str, got {type(value).__name__}",
            field,
        )
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite, got {amount}", field)
    return amount
