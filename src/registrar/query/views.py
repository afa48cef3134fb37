"""Filter, sort and paginate student listings.

Every function here is pure: it reads the records it is given and returns new
lists, so the stages can be composed freely (filter, then sort, then paginate)
on each refresh of a view.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any, TypeVar

from registrar.grading import cgpa
from registrar.query.models import DashboardStats, Page, SortKey, SortOrder, StudentFilter
from registrar.records.models import utcnow

T = TypeVar("T")

RECENT_REGISTRATION_WINDOW = timedelta(days=7)


def _matches(student: Any, filters: StudentFilter) -> bool:
    if filters.query:
        needle = filters.query.lower()
        haystacks = (student.name, student.roll_number, student.email)
        if not any(needle in value.lower() for value in haystacks):
            return False
    if filters.department is not None and student.department != filters.department:
        return False
    if filters.academic_year is not None and student.academic_year != filters.academic_year:
        return False
    return True


def filter_students(students: Sequence[T], filters: StudentFilter | None = None) -> list[T]:
    """Students matching every criterion of the filter, in input order."""
    if filters is None:
        return list(students)
    return [s for s in students if _matches(s, filters)]


def _instant(value: datetime | str) -> datetime:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def sort_students(
    students: Sequence[T],
    key: SortKey | str = SortKey.CREATED_AT,
    order: SortOrder | str = SortOrder.DESC,
) -> list[T]:
    """Stable sort by one student field.

    Students with equal keys keep their input order in both directions.
    Creation timestamps compare as instants.

    Raises:
        ValueError: If key or order is unknown.
    """
    sort_key = SortKey(key)
    reverse = SortOrder(order) is SortOrder.DESC

    if sort_key is SortKey.CREATED_AT:
        return sorted(students, key=lambda s: _instant(s.created_at), reverse=reverse)
    return sorted(students, key=lambda s: str(getattr(s, sort_key.value)), reverse=reverse)


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed to show total items."""
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    return math.ceil(total / page_size)


def paginate(items: Sequence[T], page_size: int, page: int) -> list[T]:
    """Slice out one 1-based page. Pages past the end are empty.

    Raises:
        ValueError: If page_size or page is less than 1.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    if page < 1:
        raise ValueError(f"page must be at least 1, got {page}")
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def query_students(
    students: Sequence[T],
    filters: StudentFilter | None = None,
    key: SortKey | str = SortKey.CREATED_AT,
    order: SortOrder | str = SortOrder.DESC,
    page_size: int = 12,
    page: int = 1,
) -> Page[T]:
    """Filter, sort and paginate in one pass."""
    matched = sort_students(filter_students(students, filters), key, order)
    return Page(
        items=paginate(matched, page_size, page),
        page=page,
        page_size=page_size,
        total_items=len(matched),
        total_pages=page_count(len(matched), page_size),
    )


def summarize_students(students: Sequence[Any], now: datetime | None = None) -> DashboardStats:
    """Aggregate counts and average CGPA for a collection of students.

    Args:
        students: Students with their enrollments loaded.
        now: Reference instant for recent registrations (defaults to utcnow).

    Returns:
        DashboardStats for the collection.
    """
    if now is None:
        now = utcnow()
    cutoff = now - RECENT_REGISTRATION_WINDOW

    departments = Counter(s.department for s in students)
    top = departments.most_common(1)

    total_cgpa = sum(cgpa(s.enrollments) for s in students)

    return DashboardStats(
        total=len(students),
        departments=len(departments),
        top_department=top[0][0] if top else None,
        recent_registrations=sum(1 for s in students if _instant(s.created_at) > cutoff),
        total_enrollments=sum(len(s.enrollments) for s in students),
        average_cgpa=total_cgpa / len(students) if students else 0.0,
    )
