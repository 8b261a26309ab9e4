"""Application request/response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from hostel_allocation.models.base import (
    AcademicLevel,
    ApplicationStatus,
    Gender,
    PaymentStatus,
)
from hostel_allocation.schemas.common import BaseCreateSchema, BaseResponseSchema, BaseUpdateSchema


class ApplicationSubmit(BaseCreateSchema):
    hostel_preferences: List[str] = Field(..., min_length=1, description="Hostel ids, most preferred first")
    roommate_user_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("hostel_preferences")
    @classmethod
    def _dedupe_preferences(cls, value: List[str]) -> List[str]:
        seen = []
        for hostel_id in value:
            hostel_id = hostel_id.strip()
            if hostel_id and hostel_id not in seen:
                seen.append(hostel_id)
        if not seen:
            raise ValueError("At least one hostel preference is required")
        return seen


class ApplicationStatusUpdate(BaseUpdateSchema):
    status: ApplicationStatus


class ApplicationResponse(BaseResponseSchema):
    user_id: str
    hostel_preferences: List[str]
    gender: Gender
    level: AcademicLevel
    application_status: ApplicationStatus
    payment_status: PaymentStatus
    roommate_user_id: Optional[str] = None
    notes: Optional[str] = None
    submitted_at: datetime
