"""Custom exceptions for the record store."""

from __future__ import annotations

from typing import Any


class RegistrarError(Exception):
    """Base exception for Registrar errors."""


class NotFoundError(RegistrarError):
    """Referenced record does not exist."""


class StudentNotFoundError(NotFoundError):
    """Student with given ID does not exist."""


class SubjectNotFoundError(NotFoundError):
    """Subject with given ID does not exist."""


class SemesterNotFoundError(NotFoundError):
    """Semester with given ID does not exist."""


class EnrollmentNotFoundError(NotFoundError):
    """Enrollment with given ID does not exist for the student."""


class DuplicateKeyError(RegistrarError):
    """A unique key is already taken by another record."""


class RollNumberExistsError(DuplicateKeyError):
    """Student with given roll number already exists."""


class SubjectCodeExistsError(DuplicateKeyError):
    """Subject with given code already exists."""


class RecordValidationError(RegistrarError):
    """Submitted record data is malformed."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
