import pytest

from hostel_allocation.core.exceptions import InvalidStateTransitionError
from hostel_allocation.models.base import AllocationStatus, ApplicationStatus, PaymentStatus
from hostel_allocation.services.lifecycle import (
    ALLOCATION_TRANSITIONS,
    APPLICATION_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    ensure_allocation_confirmable,
    ensure_allocation_deletable,
)


def test_application_edges():
    assert APPLICATION_TRANSITIONS.can_transition(ApplicationStatus.PENDING, ApplicationStatus.APPROVED)
    assert APPLICATION_TRANSITIONS.can_transition(ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)
    assert not APPLICATION_TRANSITIONS.can_transition(ApplicationStatus.APPROVED, ApplicationStatus.PENDING)
    assert APPLICATION_TRANSITIONS.is_terminal(ApplicationStatus.REJECTED)


def test_payment_edges():
    PAYMENT_TRANSITIONS.ensure(PaymentStatus.PENDING, PaymentStatus.COMPLETED)
    PAYMENT_TRANSITIONS.ensure(PaymentStatus.COMPLETED, PaymentStatus.REFUNDED)
    with pytest.raises(InvalidStateTransitionError):
        PAYMENT_TRANSITIONS.ensure(PaymentStatus.FAILED, PaymentStatus.COMPLETED)
    with pytest.raises(InvalidStateTransitionError):
        PAYMENT_TRANSITIONS.ensure(PaymentStatus.PENDING, PaymentStatus.REFUNDED)


def test_allocation_edges():
    assert ALLOCATION_TRANSITIONS.allowed_targets(None) == frozenset({AllocationStatus.ALLOCATED})
    assert ALLOCATION_TRANSITIONS.can_transition(AllocationStatus.CONFIRMED, AllocationStatus.PENDING)
    assert ALLOCATION_TRANSITIONS.can_transition(AllocationStatus.PENDING, AllocationStatus.ALLOCATED)
    assert not ALLOCATION_TRANSITIONS.can_transition(AllocationStatus.PENDING, AllocationStatus.CONFIRMED)


def test_confirmation_requires_completed_payment():
    ensure_allocation_confirmable(AllocationStatus.ALLOCATED, payment_completed=True)
    with pytest.raises(InvalidStateTransitionError, match="after the payment is completed"):
        ensure_allocation_confirmable(AllocationStatus.ALLOCATED, payment_completed=False)
    with pytest.raises(InvalidStateTransitionError):
        ensure_allocation_confirmable(AllocationStatus.PENDING, payment_completed=True)


def test_only_bed_holding_allocations_are_deletable():
    ensure_allocation_deletable(AllocationStatus.CONFIRMED)
    with pytest.raises(InvalidStateTransitionError):
        ensure_allocation_deletable(AllocationStatus.PENDING)
