"""Enrollment Manager - enrolls students in subjects and records grades."""

from registrar.enrollment.manager import EnrollmentManager

__all__ = [
    "EnrollmentManager",
]
