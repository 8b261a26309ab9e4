"""Pure helpers shared by models and services."""

from hostel_allocation.utils.academic_level import (
    academic_session_year,
    calculate_academic_level,
    extract_admission_year,
    has_graduated,
    level_description,
    level_for_student,
)

__all__ = [
    "academic_session_year",
    "calculate_academic_level",
    "extract_admission_year",
    "has_graduated",
    "level_description",
    "level_for_student",
]
