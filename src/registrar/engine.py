"""RecordsEngine - one object wiring the store, enrollments and queries together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from registrar.config import RegistrarConfig
from registrar.enrollment import EnrollmentManager
from registrar.export import students_to_csv
from registrar.grading import cgpa, cgpa_for_semester
from registrar.logging import setup_logging_from_config
from registrar.query import (
    DashboardStats,
    Page,
    SortKey,
    SortOrder,
    StudentFilter,
    filter_students,
    query_students,
    sort_students,
    summarize_students,
)
from registrar.records import RecordStore, Semester, Student, Subject
from registrar.validation import (
    StudentForm,
    SemesterForm,
    StudentUpdateForm,
    SubjectForm,
    SubjectUpdateForm,
    validate,
)

logger = logging.getLogger(__name__)


class RecordsEngine:
    """Entry point handed to callers that need the academic records.

    Callers receive the engine explicitly and mutate records only through
    ``store`` and ``enrollments``; there is no module-level instance.
    """

    def __init__(self, store: RecordStore, page_size: int = 12) -> None:
        """Initialize the engine.

        Args:
            store: RecordStore holding the records.
            page_size: Students per page in listings.
        """
        self.store = store
        self.enrollments = EnrollmentManager(store)
        self.page_size = page_size

    @classmethod
    def from_config(cls, config: RegistrarConfig, configure_logging: bool = False) -> RecordsEngine:
        """Build an engine from configuration.

        Args:
            config: Loaded configuration.
            configure_logging: Also install the rotating log handlers.
        """
        if configure_logging:
            setup_logging_from_config(config)
        logger.info("Opening records at %s", config.db_path)
        return cls(RecordStore(config.db_path), page_size=config.page_size)

    def close(self) -> None:
        """Close the underlying store."""
        self.store.close()

    # --- Validated registration ---

    def register_student(self, data: Mapping[str, Any]) -> Student:
        """Validate raw student input and add the student.

        Raises:
            RecordValidationError: If the input is malformed
            RollNumberExistsError: If the roll number is taken
        """
        form = validate(StudentForm, data)
        return self.store.add_student(**form.model_dump())

    def edit_student(self, student_id: str, data: Mapping[str, Any]) -> Student:
        """Validate a partial student update and apply it.

        Raises:
            RecordValidationError: If the input is malformed
            StudentNotFoundError: If student doesn't exist
            RollNumberExistsError: If the new roll number is taken
        """
        form = validate(StudentUpdateForm, data)
        return self.store.update_student(student_id, **form.model_dump(exclude_unset=True))

    def register_subject(self, data: Mapping[str, Any]) -> Subject:
        """Validate raw subject input and add it to the catalog.

        Raises:
            RecordValidationError: If the input is malformed
            SubjectCodeExistsError: If the code is taken
        """
        form = validate(SubjectForm, data)
        return self.store.add_subject(**form.model_dump())

    def edit_subject(self, subject_id: str, data: Mapping[str, Any]) -> Subject:
        """Validate a partial subject update and apply it.

        Enrollments already holding the subject keep their recorded details.

        Raises:
            RecordValidationError: If the input is malformed
            SubjectNotFoundError: If subject doesn't exist
            SubjectCodeExistsError: If the new code is taken
        """
        form = validate(SubjectUpdateForm, data)
        return self.store.update_subject(subject_id, **form.model_dump(exclude_unset=True))

    def register_semester(self, data: Mapping[str, Any]) -> Semester:
        """Validate raw semester input and add the semester.

        Raises:
            RecordValidationError: If the input is malformed
        """
        form = validate(SemesterForm, data)
        return self.store.add_semester(**form.model_dump())

    # --- Aggregates and views ---

    def student_cgpa(self, student_id: str) -> float:
        """CGPA across all of a student's enrollments (0.0 if none)."""
        return cgpa(self.enrollments.list_for_student(student_id))

    def semester_cgpa(self, student_id: str, semester: str) -> float:
        """CGPA of a student within one semester."""
        return cgpa_for_semester(self.enrollments.list_for_student(student_id), semester)

    def view(
        self,
        filters: StudentFilter | None = None,
        key: SortKey | str = SortKey.CREATED_AT,
        order: SortOrder | str = SortOrder.DESC,
        page: int = 1,
    ) -> Page[Student]:
        """One page of the student listing."""
        return query_students(
            self.store.list_students(),
            filters,
            key,
            order,
            page_size=self.page_size,
            page=page,
        )

    def export_csv(
        self,
        filters: StudentFilter | None = None,
        key: SortKey | str = SortKey.CREATED_AT,
        order: SortOrder | str = SortOrder.DESC,
    ) -> str:
        """CSV of every student matching the filter, in listing order."""
        students = sort_students(filter_students(self.store.list_students(), filters), key, order)
        return students_to_csv(students)

    def stats(self) -> DashboardStats:
        """Aggregate figures over all students."""
        return summarize_students(self.store.list_students(), now=self.store.now())
