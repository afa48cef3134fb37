"""EnrollmentManager - links students to subjects for a semester."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from registrar.records.exceptions import (
    EnrollmentNotFoundError,
    StudentNotFoundError,
    SubjectNotFoundError,
)
from registrar.records.models import Enrollment, Grade, Semester, Student, Subject

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from registrar.records.store import RecordStore

logger = logging.getLogger(__name__)


class EnrollmentManager:
    """Creates, grades and removes the enrollments owned by a student.

    Enrollments are only ever created here. Each one stores a snapshot of the
    subject taken at enrollment time, so later catalog edits do not rewrite a
    student's academic history.
    """

    def __init__(self, store: RecordStore) -> None:
        """Initialize the manager.

        Args:
            store: RecordStore whose database, clock and id factory are shared.
        """
        self.store = store
        self._db = store.database

    def _load_student(self, session: Session, student_id: str) -> Student:
        student = session.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student with id '{student_id}' not found")
        return student

    def enroll(self, student_id: str, subject_id: str, semester: str) -> Enrollment:
        """Enroll a student in a subject for a semester.

        The new enrollment starts at the lowest grade and is appended after
        the student's existing enrollments. Enrolling twice in the same
        subject is allowed.

        Args:
            student_id: The student's unique ID
            subject_id: The subject's unique ID
            semester: Semester label, e.g. "Fall 2024"

        Returns:
            The created Enrollment

        Raises:
            StudentNotFoundError: If student doesn't exist
            SubjectNotFoundError: If subject doesn't exist
        """
        session = self._db.get_session()
        try:
            student = self._load_student(session, student_id)
            subject = session.get(Subject, subject_id)
            if subject is None:
                raise SubjectNotFoundError(f"Subject with id '{subject_id}' not found")

            now = self.store.now()
            position = max((e.position for e in student.enrollments), default=0) + 1
            enrollment = Enrollment(
                id=self.store.id_factory(),
                subject_id=subject.id,
                snapshot=subject.snapshot(),
                semester=semester,
                grade=Grade.lowest(),
                position=position,
                enrolled_at=now,
            )
            student.enrollments.append(enrollment)
            student.updated_at = self.store.now(after=student.updated_at)

            session.commit()
            logger.info(
                "Enrolled student %s in %s for %s (enrollment %s)",
                student_id,
                subject.code,
                semester,
                enrollment.id,
            )
            return enrollment
        finally:
            session.close()

    def set_grade(self, student_id: str, enrollment_id: str, grade: Grade | str) -> Enrollment:
        """Replace the grade of one of the student's enrollments.

        Args:
            student_id: The student's unique ID
            enrollment_id: The enrollment's unique ID
            grade: New letter grade

        Returns:
            The updated Enrollment

        Raises:
            StudentNotFoundError: If student doesn't exist
            EnrollmentNotFoundError: If the student has no such enrollment
            ValueError: If grade is not a known letter grade
        """
        new_grade = Grade(grade)
        session = self._db.get_session()
        try:
            student = self._load_student(session, student_id)
            enrollment = next((e for e in student.enrollments if e.id == enrollment_id), None)
            if enrollment is None:
                raise EnrollmentNotFoundError(
                    f"Enrollment '{enrollment_id}' not found for student '{student_id}'"
                )

            enrollment.grade = new_grade
            student.updated_at = self.store.now(after=student.updated_at)

            session.commit()
            logger.info("Set grade %s on enrollment %s", new_grade, enrollment_id)
            return enrollment
        finally:
            session.close()

    def remove(self, student_id: str, enrollment_id: str) -> bool:
        """Remove one of the student's enrollments.

        Returns:
            True if the enrollment was removed, False if it did not exist

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            student = self._load_student(session, student_id)
            enrollment = next((e for e in student.enrollments if e.id == enrollment_id), None)
            if enrollment is None:
                logger.debug(
                    "Enrollment %s not present on student %s, nothing removed",
                    enrollment_id,
                    student_id,
                )
                return False

            student.enrollments.remove(enrollment)
            student.updated_at = self.store.now(after=student.updated_at)

            session.commit()
            logger.info("Removed enrollment %s from student %s", enrollment_id, student_id)
            return True
        finally:
            session.close()

    def list_for_student(self, student_id: str) -> list[Enrollment]:
        """Enrollments of a student in the order they were created.

        Returns an empty list when the student doesn't exist.
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                return []
            return list(student.enrollments)
        finally:
            session.close()

    def available_subjects(self, student_id: str) -> list[Subject]:
        """Catalog subjects the student is not yet enrolled in, ordered by code.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            student = self._load_student(session, student_id)
            taken = {e.subject_id for e in student.enrollments}
            subjects = session.execute(select(Subject).order_by(Subject.code)).scalars().all()
            return [s for s in subjects if s.id not in taken]
        finally:
            session.close()

    def semester_options(self, student_id: str) -> list[str]:
        """Sorted semester labels offered for a student.

        Combines the configured semesters with labels already present on the
        student's enrollments.
        """
        session = self._db.get_session()
        try:
            labels = {
                s.label for s in session.execute(select(Semester)).scalars().all()
            }
            student = session.get(Student, student_id)
            if student is not None:
                labels.update(e.semester for e in student.enrollments)
            return sorted(labels)
        finally:
            session.close()
