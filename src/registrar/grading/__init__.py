"""CGPA Calculator - grade points and credit-weighted averages."""

from registrar.grading.cgpa import (
    GRADE_POINTS,
    GradedCourse,
    SemesterCourse,
    cgpa,
    cgpa_for_semester,
    format_cgpa,
    grade_points,
    total_credit_hours,
    unique_semesters,
)

__all__ = [
    "GRADE_POINTS",
    "GradedCourse",
    "SemesterCourse",
    "cgpa",
    "cgpa_for_semester",
    "format_cgpa",
    "grade_points",
    "total_credit_hours",
    "unique_semesters",
]
