"""Fault Injection — debug hook that forces a transfer down its rollback path.

Invariants:
    - A disarmed injector never raises
    - Each arm() call fires at most `times` times, then disarms itself
    - Raises InjectedFaultError, which TransferTransaction treats like any LedgerError
"""

from acid_ledger.core.domain_types import FaultPoint
from acid_ledger.core.errors import InjectedFaultError


class FaultInjector:
    """Arms named checkpoints inside TransferTransaction."""

    def __init__(self) -> None:
        self._armed: dict[FaultPoint, int] = {}

    def arm(self, point: FaultPoint, times: int = 1) -> None:
        if times < 1:
            raise ValueError("times must be >= 1")
        self._armed[point] = self._armed.get(point, 0) + times

    def disarm(self, point: FaultPoint | None = None) -> None:
        if point is None:
            self._armed.clear()
        else:
            self._armed.pop(point, None)

    def is_armed(self, point: FaultPoint) -> bool:
        return self._armed.get(point, 0) > 0

    def check(self, point: FaultPoint) -> None:
        """Raise InjectedFaultError if point is armed."""
        remaining = self._armed.get(point, 0)
        if remaining <= 0:
            return
        if remaining == 1:
            del self._armed[point]
        else:
            self._armed[point] = remaining - 1
        raise InjectedFaultError(f"Injected fault at {point.value}")
