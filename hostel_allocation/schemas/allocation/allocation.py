"""Allocation request/response schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from hostel_allocation.models.base import AllocationStatus
from hostel_allocation.schemas.common import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)


class PriorityOrder(str, Enum):
    """Composite ordering of allocation candidates; application id always breaks ties."""

    LEVEL_THEN_SUBMISSION = "level_then_submission"
    SUBMISSION_THEN_LEVEL = "submission_then_level"
    SUBMISSION_ONLY = "submission_only"
    LEVEL_ONLY = "level_only"
    APPLICATION_ID = "application_id"


class AllocationRunSettings(BaseSchema):
    """Effective settings of one allocation run."""

    max_allocations_per_run: int = Field(50, ge=1)
    prioritize_by_level: bool = True
    prioritize_by_submission_date: bool = True
    priority_order: Optional[PriorityOrder] = None


class AllocationRunRequest(BaseSchema):
    """
    Body of the run endpoint.

    Unset fields fall back to the persisted settings.
    """

    application_ids: Optional[List[str]] = None
    max_allocations_per_run: Optional[int] = Field(None, ge=1)
    prioritize_by_level: Optional[bool] = None
    prioritize_by_submission_date: Optional[bool] = None
    priority_order: Optional[PriorityOrder] = None


class AllocationSummary(BaseSchema):
    allocation_id: str
    application_id: str
    user_id: str
    room_id: str
    hostel_id: str


class AllocationRunResult(BaseSchema):
    allocated_count: int = 0
    total_considered: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    unmatched_count: int = 0
    allocations: List[AllocationSummary] = Field(default_factory=list)
    message: str = ""


class AllocationCreate(BaseCreateSchema):
    user_id: str = Field(..., min_length=1)
    room_id: str = Field(..., min_length=1)
    application_id: Optional[str] = None


class AllocationUpdate(BaseUpdateSchema):
    status: Optional[AllocationStatus] = None
    room_id: Optional[str] = None

    @model_validator(mode="after")
    def _require_change(self):
        if self.status is None and not self.room_id:
            raise ValueError("Provide a status or a room_id")
        return self


class AllocationResponse(BaseResponseSchema):
    user_id: str
    application_id: str
    room_id: str
    status: AllocationStatus
    allocated_at: datetime
    confirmed_at: Optional[datetime] = None


class AllocationDetail(AllocationResponse):
    """Allocation listing row with the names admins look for."""

    user_name: Optional[str] = None
    matric_no: Optional[str] = None
    room_number: Optional[str] = None
    hostel_id: Optional[str] = None
    hostel_name: Optional[str] = None
