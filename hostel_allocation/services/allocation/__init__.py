from hostel_allocation.services.allocation.allocation_matcher import AllocationMatcher
from hostel_allocation.services.allocation.allocation_service import AllocationService
from hostel_allocation.services.allocation.capacity_index import RoomCapacityIndex, RoomSlot
from hostel_allocation.services.allocation.eligibility_filter import (
    Candidate,
    EligibilityFilter,
    order_clauses,
    resolve_priority_order,
)

__all__ = [
    "AllocationMatcher",
    "AllocationService",
    "Candidate",
    "EligibilityFilter",
    "RoomCapacityIndex",
    "RoomSlot",
    "order_clauses",
    "resolve_priority_order",
]
