"""Credit-weighted grade point average calculation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Protocol

from registrar.records.models import Grade

GRADE_POINTS: Mapping[Grade, float] = MappingProxyType(
    {
        Grade.A: 4.0,
        Grade.A_MINUS: 3.7,
        Grade.B_PLUS: 3.3,
        Grade.B: 3.0,
        Grade.B_MINUS: 2.7,
        Grade.C_PLUS: 2.3,
        Grade.C: 2.0,
        Grade.C_MINUS: 1.7,
        Grade.D_PLUS: 1.3,
        Grade.D: 1.0,
        Grade.F: 0.0,
    }
)


class GradedCourse(Protocol):
    """Anything carrying a grade and the credit hours it is worth."""

    @property
    def grade(self) -> Grade | str: ...

    @property
    def credit_hours(self) -> int: ...


class SemesterCourse(GradedCourse, Protocol):
    """A graded course taken in a labelled semester."""

    @property
    def semester(self) -> str: ...


def grade_points(grade: Grade | str) -> float:
    """Grade points for a letter grade.

    Raises:
        ValueError: If grade is not a known letter grade.
    """
    return GRADE_POINTS[Grade(grade)]


def cgpa(enrollments: Iterable[GradedCourse]) -> float:
    """Credit-hour weighted mean of grade points.

    Returns 0.0 when there is nothing to average. The result is not rounded;
    use :func:`format_cgpa` for display.
    """
    total_points = 0.0
    total_credits = 0
    for enrollment in enrollments:
        total_points += grade_points(enrollment.grade) * enrollment.credit_hours
        total_credits += enrollment.credit_hours
    if total_credits <= 0:
        return 0.0
    return total_points / total_credits


def cgpa_for_semester(enrollments: Iterable[SemesterCourse], semester: str) -> float:
    """CGPA over the enrollments taken in one semester."""
    return cgpa(e for e in enrollments if e.semester == semester)


def total_credit_hours(enrollments: Iterable[GradedCourse]) -> int:
    """Sum of credit hours across enrollments."""
    return sum(e.credit_hours for e in enrollments)


def unique_semesters(enrollments: Iterable[SemesterCourse]) -> list[str]:
    """Distinct semester labels, sorted."""
    return sorted({e.semester for e in enrollments})


def format_cgpa(value: float) -> str:
    """Format a CGPA for display with two decimals."""
    return f"{value:.2f}"
