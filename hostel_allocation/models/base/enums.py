"""
Database enums shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class UserStatus(str, enum.Enum):
    """Account status."""
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    GRADUATED = "GRADUATED"


class Gender(str, enum.Enum):
    """Gender of a student."""
    MALE = "MALE"
    FEMALE = "FEMALE"


class HostelGender(str, enum.Enum):
    """Gender classification of a hostel."""
    MALE = "MALE"
    FEMALE = "FEMALE"
    MIXED = "MIXED"


class AcademicLevel(str, enum.Enum):
    """Academic level; the numeric suffix orders levels."""
    YEAR_1 = "YEAR_1"
    YEAR_2 = "YEAR_2"
    YEAR_3 = "YEAR_3"
    YEAR_4 = "YEAR_4"
    YEAR_5 = "YEAR_5"

    @property
    def rank(self) -> int:
        return int(self.value.rsplit("_", 1)[1])


class ApplicationStatus(str, enum.Enum):
    """Admin review state of an application."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PaymentStatus(str, enum.Enum):
    """Payment state (mirrored on the application)."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class AllocationStatus(str, enum.Enum):
    """Allocation confirmation state."""
    PENDING = "PENDING"
    ALLOCATED = "ALLOCATED"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


class RefundStatus(str, enum.Enum):
    """Refund processing state."""
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"


# Statuses that hold a bed and count towards room occupancy
ACTIVE_ALLOCATION_STATUSES = (AllocationStatus.ALLOCATED, AllocationStatus.CONFIRMED)


def is_gender_compatible(hostel_gender, user_gender) -> bool:
    """A hostel accepts its own gender, and MIXED hostels accept everyone."""
    if user_gender is None or hostel_gender is None:
        return False
    hostel_value = getattr(hostel_gender, "value", hostel_gender)
    user_value = getattr(user_gender, "value", user_gender)
    return hostel_value == HostelGender.MIXED.value or hostel_value == user_value
