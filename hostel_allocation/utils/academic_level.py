"""
Academic level derivation.

The academic year rolls over in November: until then students are still
in the previous session. Levels are never stored on the user; they are
derived from the admission year (or the year encoded in the matric
number) whenever an application is submitted.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from hostel_allocation.models.base import AcademicLevel

ROLLOVER_MONTH = 11
EARLIEST_ADMISSION_YEAR = 2010

_LEVELS = (
    AcademicLevel.YEAR_1,
    AcademicLevel.YEAR_2,
    AcademicLevel.YEAR_3,
    AcademicLevel.YEAR_4,
    AcademicLevel.YEAR_5,
)
_MATRIC_YEAR = re.compile(r"^U?(\d{4})")


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def academic_session_year(now: Optional[datetime] = None) -> int:
    now = _now(now)
    return now.year if now.month >= ROLLOVER_MONTH else now.year - 1


def calculate_academic_level(admission_year: int, now: Optional[datetime] = None) -> AcademicLevel:
    """
    Level of a student admitted in ``admission_year``.

    Zero to four sessions since admission map to YEAR_1..YEAR_5; longer
    stays are capped at YEAR_5 and future admission years count as YEAR_1.
    """
    years = academic_session_year(now) - admission_year
    if years < 0:
        return AcademicLevel.YEAR_1
    return _LEVELS[min(years, len(_LEVELS) - 1)]


def level_description(level: AcademicLevel) -> str:
    return f"{level.rank}00 Level"


def has_graduated(admission_year: int, now: Optional[datetime] = None) -> bool:
    """True from November of the fourth calendar year after admission."""
    now = _now(now)
    graduation_year = admission_year + 4
    return now.year > graduation_year or (now.year == graduation_year and now.month >= ROLLOVER_MONTH)


def extract_admission_year(matric_no: str, now: Optional[datetime] = None) -> Optional[int]:
    """
    Admission year encoded in a matric number.

    Handles ``U2021/5570004``, ``U20215570004`` and the same forms without
    the ``U`` prefix. Years outside 2010..next year are rejected.
    """
    if not matric_no:
        return None
    match = _MATRIC_YEAR.match(matric_no.strip().upper())
    if not match:
        return None
    year = int(match.group(1))
    if EARLIEST_ADMISSION_YEAR <= year <= _now(now).year + 1:
        return year
    return None


def level_for_student(
    admission_year: Optional[int],
    matric_no: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[AcademicLevel]:
    """
    Current level of a student, preferring the recorded admission year
    over the one encoded in the matric number. None when neither is known.
    """
    year = admission_year or extract_admission_year(matric_no or "", now=now)
    if year is None:
        return None
    return calculate_academic_level(year, now)
