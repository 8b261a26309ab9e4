"""
Lifecycle transition tables for applications, payments and allocations.

Services consult these tables before mutating a status column; an edge
that is not listed raises InvalidStateTransitionError and nothing is
written.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from hostel_allocation.core.exceptions import InvalidStateTransitionError
from hostel_allocation.models.base import (
    ACTIVE_ALLOCATION_STATUSES,
    AllocationStatus,
    ApplicationStatus,
    PaymentStatus,
)


@dataclass(frozen=True)
class TransitionTable:
    """Allowed ``current -> target`` edges of one entity; ``None`` is "not created yet"."""

    entity: str
    edges: Dict[Optional[Enum], FrozenSet[Enum]] = field(default_factory=dict)

    def allowed_targets(self, current: Optional[Enum]) -> FrozenSet[Enum]:
        return self.edges.get(current, frozenset())

    def can_transition(self, current: Optional[Enum], target: Enum) -> bool:
        return target in self.allowed_targets(current)

    def ensure(self, current: Optional[Enum], target: Enum) -> None:
        """
        Raises:
            InvalidStateTransitionError: ``current -> target`` is not an edge
        """
        if not self.can_transition(current, target):
            raise InvalidStateTransitionError(
                self.entity,
                current.value if current is not None else None,
                target.value,
            )

    def is_terminal(self, state: Enum) -> bool:
        return not self.allowed_targets(state)


APPLICATION_TRANSITIONS = TransitionTable(
    entity="Application",
    edges={
        ApplicationStatus.PENDING: frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}),
        ApplicationStatus.APPROVED: frozenset({ApplicationStatus.REJECTED}),
        ApplicationStatus.REJECTED: frozenset(),
    },
)

PAYMENT_TRANSITIONS = TransitionTable(
    entity="Payment",
    edges={
        PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
        PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
        PaymentStatus.FAILED: frozenset(),
        PaymentStatus.REFUNDED: frozenset(),
    },
)

# PENDING is where a refund parks an allocation; bringing it back to
# ALLOCATED is capacity-conditional like any new allocation.
ALLOCATION_TRANSITIONS = TransitionTable(
    entity="Allocation",
    edges={
        None: frozenset({AllocationStatus.ALLOCATED}),
        AllocationStatus.PENDING: frozenset({AllocationStatus.ALLOCATED, AllocationStatus.REJECTED}),
        AllocationStatus.ALLOCATED: frozenset({
            AllocationStatus.CONFIRMED,
            AllocationStatus.REJECTED,
            AllocationStatus.PENDING,
        }),
        AllocationStatus.CONFIRMED: frozenset({AllocationStatus.PENDING, AllocationStatus.REJECTED}),
        AllocationStatus.REJECTED: frozenset(),
    },
)


def ensure_allocation_confirmable(status: AllocationStatus, payment_completed: bool) -> None:
    """
    An allocation reaches CONFIRMED only from ALLOCATED and only when its
    application holds a COMPLETED payment.
    """
    ALLOCATION_TRANSITIONS.ensure(status, AllocationStatus.CONFIRMED)
    if not payment_completed:
        raise InvalidStateTransitionError(
            "Allocation",
            status.value,
            AllocationStatus.CONFIRMED.value,
            message="Allocation can only be confirmed after the payment is completed",
        )


def ensure_allocation_deletable(status: AllocationStatus) -> None:
    """Only allocations that hold a bed can be removed by an admin."""
    if status not in ACTIVE_ALLOCATION_STATUSES:
        raise InvalidStateTransitionError(
            "Allocation",
            status.value,
            "DELETED",
            message=f"Only allocated or confirmed allocations can be deleted (status is {status.value})",
        )
