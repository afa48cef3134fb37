"""Input validation and normalization for student and subject records."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from registrar.records.exceptions import RecordValidationError
from registrar.records.models import AcademicYear, Department

ROLL_NUMBER_RE = re.compile(r"^[A-Z]{2}\d{4}[A-Z]{2}\d{3}$")
ROLL_NUMBER_LENGTH = 11

PERSON_NAME_PATTERN = r"^[a-zA-Z\s]+$"
EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
SUBJECT_CODE_PATTERN = r"^[A-Z0-9]+$"

FormT = TypeVar("FormT", bound=BaseModel)


def _clean_roll_number(value: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", value.upper())


def format_roll_number(value: str) -> str:
    """Uppercase a roll number and drop separators.

    Input longer than a roll number is cut to its first 11 characters, so
    'cs-2021-bt-001' becomes 'CS2021BT001'.
    """
    cleaned = _clean_roll_number(value)
    return cleaned[:ROLL_NUMBER_LENGTH]


def is_valid_roll_number(value: str) -> bool:
    """True if the value normalizes to exactly AA0000AA000."""
    cleaned = _clean_roll_number(value)
    return len(cleaned) == ROLL_NUMBER_LENGTH and ROLL_NUMBER_RE.match(cleaned) is not None


def is_valid_phone_number(value: str) -> bool:
    """True for a Pakistan mobile number in local or international form."""
    digits = re.sub(r"\D", "", value)
    if digits.startswith("03") and len(digits) == 11:
        return True
    if digits.startswith("3") and len(digits) == 10:
        return True
    return digits.startswith("92") and len(digits) == 12


def format_phone_number(value: str) -> str:
    """Group the digits of a phone number for display.

    +92-XXX-XXXXXXX for international numbers, 03XX-XXXXXXX or 3XX-XXXXXXX
    for local mobiles and XXX-XXX-XXXX otherwise. Partial input is grouped
    as far as it goes.
    """
    digits = re.sub(r"\D", "", value)

    if digits.startswith("92"):
        if len(digits) <= 5:
            return f"+{digits}"
        if len(digits) <= 8:
            return f"+{digits[:2]}-{digits[2:5]}-{digits[5:]}"
        return f"+{digits[:2]}-{digits[2:5]}-{digits[5:12]}"
    if digits.startswith("03"):
        if len(digits) <= 4:
            return digits
        if len(digits) <= 8:
            return f"{digits[:4]}-{digits[4:]}"
        return f"{digits[:4]}-{digits[4:11]}"
    if digits.startswith("3"):
        if len(digits) <= 3:
            return digits
        if len(digits) <= 7:
            return f"{digits[:3]}-{digits[3:]}"
        return f"{digits[:3]}-{digits[3:10]}"
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}-{digits[3:]}"
    if len(digits) <= 10:
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:10]}"


def _check_roll_number(value: str | None) -> str | None:
    if value is None:
        return None
    if not is_valid_roll_number(value):
        raise ValueError("Roll number format: XX0000XX000 (e.g., CS2021BT001)")
    return format_roll_number(value)


def _check_phone_number(value: str | None) -> str | None:
    if value is None:
        return None
    if not is_valid_phone_number(value):
        raise ValueError("Please enter a valid Pakistan phone number")
    return value


# Student forms


class StudentForm(BaseModel):
    """Data required to register a student."""

    name: str = Field(..., min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    roll_number: str
    department: Department
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone_number: str
    academic_year: AcademicYear
    profile_image: str | None = None

    @field_validator("roll_number")
    @classmethod
    def check_roll_number(cls, value: str | None) -> str | None:
        return _check_roll_number(value)

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: str | None) -> str | None:
        return _check_phone_number(value)


class StudentUpdateForm(BaseModel):
    """Partial student update; omitted fields stay unchanged."""

    name: str | None = Field(
        default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN
    )
    roll_number: str | None = None
    department: Department | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone_number: str | None = None
    academic_year: AcademicYear | None = None
    profile_image: str | None = None

    @field_validator("roll_number")
    @classmethod
    def check_roll_number(cls, value: str | None) -> str | None:
        return _check_roll_number(value)

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: str | None) -> str | None:
        return _check_phone_number(value)


# Subject forms


class SubjectForm(BaseModel):
    """Data required to add a subject to the catalog."""

    name: str = Field(..., min_length=2, max_length=100)
    code: str = Field(..., min_length=3, max_length=10, pattern=SUBJECT_CODE_PATTERN)
    credit_hours: int = Field(..., ge=1, le=6)
    instructor_name: str = Field(..., min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)


class SubjectUpdateForm(BaseModel):
    """Partial subject update; omitted fields stay unchanged."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    code: str | None = Field(
        default=None, min_length=3, max_length=10, pattern=SUBJECT_CODE_PATTERN
    )
    credit_hours: int | None = Field(default=None, ge=1, le=6)
    instructor_name: str | None = Field(
        default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN
    )


# Semester forms


class SemesterForm(BaseModel):
    """Data required to add a semester."""

    name: str = Field(..., min_length=1, max_length=50)
    year: str = Field(..., min_length=1, max_length=10)
    is_active: bool = False


def validate(form_cls: type[FormT], data: Mapping[str, Any]) -> FormT:
    """Validate raw input against a form.

    Args:
        form_cls: Form model to validate with.
        data: Raw field values.

    Returns:
        The validated form.

    Raises:
        RecordValidationError: If any field is missing or malformed.
    """
    try:
        return form_cls.model_validate(dict(data))
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise RecordValidationError(
            f"Invalid {form_cls.__name__} data: {fields}",
            errors=e.errors(include_url=False, include_context=False),
        ) from e
