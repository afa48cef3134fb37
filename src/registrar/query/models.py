"""Data models for the Query Engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

from registrar.records.models import AcademicYear, Department

T = TypeVar("T")


class SortKey(StrEnum):
    """Student fields a listing can be sorted by."""

    NAME = "name"
    ROLL_NUMBER = "roll_number"
    DEPARTMENT = "department"
    CREATED_AT = "created_at"


class SortOrder(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class StudentFilter:
    """Search criteria for a student listing.

    Empty values match every student. Department and academic year accept
    either the enum or its display string.

    Attributes:
        query: Case-insensitive substring matched against name, roll number and email.
        department: Exact department to keep.
        academic_year: Exact academic year to keep.
    """

    query: str = ""
    department: Department | None = None
    academic_year: AcademicYear | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "query", self.query or "")
        object.__setattr__(
            self, "department", Department(self.department) if self.department else None
        )
        object.__setattr__(
            self,
            "academic_year",
            AcademicYear(self.academic_year) if self.academic_year else None,
        )


@dataclass
class Page(Generic[T]):
    """One page of a filtered and sorted listing.

    Attributes:
        items: Records on this page.
        page: 1-based page number.
        page_size: Maximum records per page.
        total_items: Number of records matching the filter.
        total_pages: Number of pages needed for total_items.
    """

    items: list[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 12
    total_items: int = 0
    total_pages: int = 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


@dataclass
class DashboardStats:
    """Aggregate figures for a collection of students."""

    total: int
    departments: int
    top_department: Department | None
    recent_registrations: int
    total_enrollments: int
    average_cgpa: float
