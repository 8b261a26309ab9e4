from hostel_allocation.schemas.allocation.allocation import (
    AllocationCreate,
    AllocationDetail,
    AllocationResponse,
    AllocationRunRequest,
    AllocationRunResult,
    AllocationRunSettings,
    AllocationSummary,
    AllocationUpdate,
    PriorityOrder,
)

__all__ = [
    "AllocationCreate",
    "AllocationDetail",
    "AllocationResponse",
    "AllocationRunRequest",
    "AllocationRunResult",
    "AllocationRunSettings",
    "AllocationSummary",
    "AllocationUpdate",
    "PriorityOrder",
]
