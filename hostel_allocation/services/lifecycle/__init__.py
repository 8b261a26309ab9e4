from hostel_allocation.services.lifecycle.state_machine import (
    ALLOCATION_TRANSITIONS,
    APPLICATION_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    TransitionTable,
    ensure_allocation_confirmable,
    ensure_allocation_deletable,
)

__all__ = [
    "ALLOCATION_TRANSITIONS",
    "APPLICATION_TRANSITIONS",
    "PAYMENT_TRANSITIONS",
    "TransitionTable",
    "ensure_allocation_confirmable",
    "ensure_allocation_deletable",
]
