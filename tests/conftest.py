"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timedelta
from typing import Any

import pytest

from registrar.enrollment import EnrollmentManager
from registrar.records import RecordStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


class FakeClock:
    """Clock that advances one second on every reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 9, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


# Shared fixtures


@pytest.fixture
def clock() -> FakeClock:
    """A deterministic clock."""
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> Iterator[RecordStore]:
    """Create an in-memory RecordStore for testing."""
    record_store = RecordStore(":memory:", clock=clock)
    yield record_store
    record_store.close()


@pytest.fixture
def manager(store: RecordStore) -> EnrollmentManager:
    """EnrollmentManager over the in-memory store."""
    return EnrollmentManager(store)


def student_fields(**overrides: Any) -> dict[str, Any]:
    """Valid student fields with optional overrides."""
    fields: dict[str, Any] = {
        "name": "Ayesha Khan",
        "roll_number": "CS2021BT001",
        "department": "Computer Science",
        "email": "ayesha.khan@example.edu",
        "phone_number": "0300-1234567",
        "academic_year": "Second Year",
    }
    fields.update(overrides)
    return fields


def subject_fields(**overrides: Any) -> dict[str, Any]:
    """Valid subject fields with optional overrides."""
    fields: dict[str, Any] = {
        "name": "Calculus I",
        "code": "MATH101",
        "credit_hours": 3,
        "instructor_name": "Imran Ali",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_student() -> Any:
    """Factory for student field dictionaries."""
    return student_fields


@pytest.fixture
def make_subject() -> Any:
    """Factory for subject field dictionaries."""
    return subject_fields
