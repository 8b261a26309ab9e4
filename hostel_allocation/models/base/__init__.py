"""
Base models, enums and helpers shared by every model module.
"""

from hostel_allocation.models.base.base_model import (
    Base,
    BaseModel,
    ModelType,
    TimestampModel,
    utcnow,
)
from hostel_allocation.models.base.types import UTCDateTime
from hostel_allocation.models.base.enums import (
    ACTIVE_ALLOCATION_STATUSES,
    AcademicLevel,
    AllocationStatus,
    ApplicationStatus,
    Gender,
    HostelGender,
    PaymentStatus,
    RefundStatus,
    UserRole,
    UserStatus,
    is_gender_compatible,
)

__all__ = [
    "Base",
    "BaseModel",
    "ModelType",
    "TimestampModel",
    "UTCDateTime",
    "utcnow",
    "ACTIVE_ALLOCATION_STATUSES",
    "AcademicLevel",
    "AllocationStatus",
    "ApplicationStatus",
    "Gender",
    "HostelGender",
    "PaymentStatus",
    "RefundStatus",
    "UserRole",
    "UserStatus",
    "is_gender_compatible",
]
