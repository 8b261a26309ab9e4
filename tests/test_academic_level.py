from datetime import datetime, timezone

import pytest

from hostel_allocation.models.base import AcademicLevel
from hostel_allocation.utils.academic_level import (
    academic_session_year,
    calculate_academic_level,
    extract_admission_year,
    has_graduated,
    level_description,
    level_for_student,
)

UTC = timezone.utc


def test_session_rolls_over_in_november():
    assert academic_session_year(datetime(2025, 10, 31, tzinfo=UTC)) == 2024
    assert academic_session_year(datetime(2025, 11, 1, tzinfo=UTC)) == 2025


@pytest.mark.parametrize(
    "admission_year, expected",
    [
        (2025, AcademicLevel.YEAR_1),
        (2024, AcademicLevel.YEAR_2),
        (2021, AcademicLevel.YEAR_5),
        (2015, AcademicLevel.YEAR_5),
        (2027, AcademicLevel.YEAR_1),
    ],
)
def test_calculate_academic_level(admission_year, expected):
    assert calculate_academic_level(admission_year, datetime(2025, 12, 1, tzinfo=UTC)) is expected


def test_level_description():
    assert level_description(AcademicLevel.YEAR_3) == "300 Level"


def test_has_graduated():
    assert not has_graduated(2021, datetime(2025, 10, 1, tzinfo=UTC))
    assert has_graduated(2021, datetime(2025, 11, 1, tzinfo=UTC))


@pytest.mark.parametrize(
    "matric_no, expected",
    [
        ("U2021/5570004", 2021),
        ("U20215570004", 2021),
        ("2021/5570004", 2021),
        ("u2019/123", 2019),
        ("U2009/1", None),
        ("U2099/1", None),
        ("ABC", None),
        ("", None),
    ],
)
def test_extract_admission_year(matric_no, expected):
    assert extract_admission_year(matric_no, datetime(2025, 3, 1, tzinfo=UTC)) == expected


def test_level_for_student_falls_back_to_matric_number(now):
    assert level_for_student(None, "U2022/0001", now) is AcademicLevel.YEAR_3
    assert level_for_student(2024, "U2022/0001", now) is AcademicLevel.YEAR_1
    assert level_for_student(None, None, now) is None
