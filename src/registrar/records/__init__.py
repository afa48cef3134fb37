"""Record store - persistent storage for students, subjects and semesters."""

from registrar.records.exceptions import (
    DuplicateKeyError,
    EnrollmentNotFoundError,
    NotFoundError,
    RecordValidationError,
    RegistrarError,
    RollNumberExistsError,
    SemesterNotFoundError,
    StudentNotFoundError,
    SubjectCodeExistsError,
    SubjectNotFoundError,
)
from registrar.records.models import (
    AcademicYear,
    Department,
    Enrollment,
    Grade,
    Semester,
    Student,
    Subject,
    SubjectSnapshot,
)
from registrar.records.store import RecordStore

__all__ = [
    "AcademicYear",
    "Department",
    "DuplicateKeyError",
    "Enrollment",
    "EnrollmentNotFoundError",
    "Grade",
    "NotFoundError",
    "RecordStore",
    "RecordValidationError",
    "RegistrarError",
    "RollNumberExistsError",
    "Semester",
    "SemesterNotFoundError",
    "Student",
    "StudentNotFoundError",
    "Subject",
    "SubjectCodeExistsError",
    "SubjectNotFoundError",
    "SubjectSnapshot",
]
