"""Fault Injection — tests for arming and firing checkpoints."""

import pytest

from acid_ledger.core.domain_types import FaultPoint
from acid_ledger.core.errors import InjectedFaultError
from acid_ledger.core.fault_injection import FaultInjector


def test_disarmed_injector_never_raises():
    injector = FaultInjector()
    injector.check(FaultPoint.AFTER_DEBIT)
    injector.check(FaultPoint.BEFORE_COMMIT)


def test_armed_point_fires_once():
    injector = FaultInjector()
    injector.arm(FaultPoint.AFTER_DEBIT)
    with pytest.raises(InjectedFaultError, match="after_debit"):
        injector.check(FaultPoint.AFTER_DEBIT)
    injector.check(FaultPoint.AFTER_DEBIT)
    assert not injector.is_armed(FaultPoint.AFTER_DEBIT)


def test_arm_multiple_times():
    injector = FaultInjector()
    injector.arm(FaultPoint.BEFORE_COMMIT, times=2)
    for _ in range(2):
        with pytest.raises(InjectedFaultError):
            injector.check(FaultPoint.BEFORE_COMMIT)
    injector.check(FaultPoint.BEFORE_COMMIT)


def test_other_points_unaffected():
    injector = FaultInjector()
    injector.arm(FaultPoint.AFTER_DEBIT)
    injector.check(FaultPoint.BEFORE_COMMIT)
    assert injector.is_armed(FaultPoint.AFTER_DEBIT)


def test_disarm():
    injector = FaultInjector()
    injector.arm(FaultPoint.AFTER_DEBIT)
    injector.arm(FaultPoint.BEFORE_COMMIT)
    injector.disarm(FaultPoint.AFTER_DEBIT)
    assert not injector.is_armed(FaultPoint.AFTER_DEBIT)
    injector.disarm()
    assert not injector.is_armed(FaultPoint.BEFORE_COMMIT)


def test_arm_rejects_non_positive_times():
    with pytest.raises(ValueError):
        FaultInjector().arm(FaultPoint.AFTER_DEBIT, times=0)
