"""RecordStore - Main API for record store operations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registrar.logging import mask_email
from registrar.records.database import Database
from registrar.records.exceptions import (
    RollNumberExistsError,
    SemesterNotFoundError,
    StudentNotFoundError,
    SubjectCodeExistsError,
    SubjectNotFoundError,
)
from registrar.records.models import (
    AcademicYear,
    Department,
    Semester,
    Student,
    Subject,
    generate_uuid,
    utcnow,
)

logger = logging.getLogger(__name__)

_Positioned = TypeVar("_Positioned", Student, Semester)

# Marks an update argument the caller did not pass
_UNSET: Any = object()


class RecordStore:
    """Main API for record store operations.

    Provides CRUD operations for Students, Subjects and Semesters. Every
    mutation is committed before the method returns.
    """

    def __init__(
        self,
        db_path: str = "registrar.db",
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            clock: Returns the current naive UTC instant (defaults to utcnow)
            id_factory: Returns a fresh unique id string (defaults to uuid4)
        """
        self._db = Database(db_path)
        self._db.create_tables()
        self.clock = clock if clock is not None else utcnow
        self.id_factory = id_factory if id_factory is not None else generate_uuid

    @property
    def database(self) -> Database:
        """The underlying database connection manager."""
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def now(self, after: datetime | None = None) -> datetime:
        """Current instant from the clock, forced past ``after`` when given."""
        current = self.clock()
        if after is not None and current <= after:
            current = after + timedelta(microseconds=1)
        return current

    @staticmethod
    def _next_position(session: Session, model: type[_Positioned]) -> int:
        highest = session.execute(select(func.max(model.position))).scalar()
        return (highest or 0) + 1

    # --- Student Operations ---

    def add_student(
        self,
        name: str,
        roll_number: str,
        department: Department | str,
        email: str,
        phone_number: str,
        academic_year: AcademicYear | str,
        profile_image: str | None = None,
    ) -> Student:
        """Register a new student.

        Args:
            name: Full name
            roll_number: Roll number in AA0000AA000 form
            department: Department name
            email: Contact email
            phone_number: Contact phone number
            academic_year: Year of study
            profile_image: Opaque image reference (optional)

        Returns:
            Created Student with generated ID and an empty enrollment list

        Raises:
            RollNumberExistsError: If the roll number is already registered
        """
        session = self._db.get_session()
        try:
            self._ensure_roll_number_free(session, roll_number)
            now = self.now()
            student = Student(
                id=self.id_factory(),
                name=name,
                roll_number=roll_number,
                department=department,
                email=email,
                phone_number=phone_number,
                academic_year=academic_year,
                profile_image=profile_image,
                position=self._next_position(session, Student),
                created_at=now,
                updated_at=now,
            )
            session.add(student)
            session.commit()
            logger.info(
                "Added student %s (%s, %s)", student.id, roll_number, mask_email(email)
            )
            return student
        except IntegrityError as e:
            session.rollback()
            if "students.roll_number" in str(e):
                raise RollNumberExistsError(
                    f"Student with roll number '{roll_number}' already exists"
                ) from e
            raise
        finally:
            session.close()

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        student = self.find_student(student_id)
        if student is None:
            raise StudentNotFoundError(f"Student with id '{student_id}' not found")
        return student

    def find_student(self, student_id: str) -> Student | None:
        """Get student by ID, or None if it doesn't exist."""
        session = self._db.get_session()
        try:
            return session.get(Student, student_id)
        finally:
            session.close()

    def get_student_by_roll_number(self, roll_number: str) -> Student:
        """Get student by roll number.

        Raises:
            StudentNotFoundError: If no student has this roll number
        """
        session = self._db.get_session()
        try:
            stmt = select(Student).where(Student.roll_number == roll_number)
            student = session.execute(stmt).scalar_one_or_none()
            if student is None:
                raise StudentNotFoundError(f"Student with roll number '{roll_number}' not found")
            return student
        finally:
            session.close()

    def list_students(self) -> list[Student]:
        """List all students in registration order."""
        session = self._db.get_session()
        try:
            stmt = select(Student).order_by(Student.position)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_student(
        self,
        student_id: str,
        name: str | None = None,
        roll_number: str | None = None,
        department: Department | str | None = None,
        email: str | None = None,
        phone_number: str | None = None,
        academic_year: AcademicYear | str | None = None,
        profile_image: str | None = _UNSET,
    ) -> Student:
        """Update student fields. Only provided fields are updated.

        The update timestamp is always refreshed, even when no field changes.
        Passing ``profile_image=None`` removes the photo.

        Returns:
            The updated Student

        Raises:
            StudentNotFoundError: If student doesn't exist
            RollNumberExistsError: If roll_number belongs to another student
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")

            if roll_number is not None and roll_number != student.roll_number:
                self._ensure_roll_number_free(session, roll_number, exclude_id=student_id)
                student.roll_number = roll_number
            if name is not None:
                student.name = name
            if department is not None:
                student.department = Department(department)
            if email is not None:
                student.email = email
            if phone_number is not None:
                student.phone_number = phone_number
            if academic_year is not None:
                student.academic_year = AcademicYear(academic_year)
            if profile_image is not _UNSET:
                student.profile_image = profile_image
            student.updated_at = self.now(after=student.updated_at)

            session.commit()
            logger.info("Updated student %s", student_id)
            return student
        finally:
            session.close()

    def delete_student(self, student_id: str) -> None:
        """Delete a student together with all of their enrollments.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")

            session.delete(student)
            session.commit()
            logger.info("Deleted student %s", student_id)
        finally:
            session.close()

    def clear_students(self) -> int:
        """Delete every student. Subjects and semesters are kept.

        Returns:
            Number of students removed
        """
        session = self._db.get_session()
        try:
            students = session.execute(select(Student)).scalars().all()
            for student in students:
                session.delete(student)
            session.commit()
            logger.info("Cleared %d students", len(students))
            return len(students)
        finally:
            session.close()

    @staticmethod
    def _ensure_roll_number_free(
        session: Session, roll_number: str, exclude_id: str | None = None
    ) -> None:
        stmt = select(Student.id).where(Student.roll_number == roll_number)
        if exclude_id is not None:
            stmt = stmt.where(Student.id != exclude_id)
        if session.execute(stmt).first() is not None:
            raise RollNumberExistsError(f"Student with roll number '{roll_number}' already exists")

    # --- Subject Operations ---

    def add_subject(
        self,
        name: str,
        code: str,
        credit_hours: int,
        instructor_name: str,
    ) -> Subject:
        """Add a subject to the catalog.

        Raises:
            SubjectCodeExistsError: If a subject with the same code exists
        """
        session = self._db.get_session()
        try:
            self._ensure_subject_code_free(session, code)
            now = self.now()
            subject = Subject(
                id=self.id_factory(),
                name=name,
                code=code,
                credit_hours=credit_hours,
                instructor_name=instructor_name,
                created_at=now,
                updated_at=now,
            )
            session.add(subject)
            session.commit()
            logger.info("Added subject %s (%s)", subject.id, code)
            return subject
        except IntegrityError as e:
            session.rollback()
            if "subjects.code" in str(e):
                raise SubjectCodeExistsError(f"Subject with code '{code}' already exists") from e
            raise
        finally:
            session.close()

    def get_subject(self, subject_id: str) -> Subject:
        """Get subject by ID.

        Raises:
            SubjectNotFoundError: If subject doesn't exist
        """
        session = self._db.get_session()
        try:
            subject = session.get(Subject, subject_id)
            if subject is None:
                raise SubjectNotFoundError(f"Subject with id '{subject_id}' not found")
            return subject
        finally:
            session.close()

    def get_subject_by_code(self, code: str) -> Subject:
        """Get subject by its catalog code.

        Raises:
            SubjectNotFoundError: If no subject has this code
        """
        session = self._db.get_session()
        try:
            stmt = select(Subject).where(Subject.code == code)
            subject = session.execute(stmt).scalar_one_or_none()
            if subject is None:
                raise SubjectNotFoundError(f"Subject with code '{code}' not found")
            return subject
        finally:
            session.close()

    def list_subjects(self) -> list[Subject]:
        """List all subjects, ordered by code."""
        session = self._db.get_session()
        try:
            stmt = select(Subject).order_by(Subject.code)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_subject(
        self,
        subject_id: str,
        name: str | None = None,
        code: str | None = None,
        credit_hours: int | None = None,
        instructor_name: str | None = None,
    ) -> Subject:
        """Update subject fields. Only provided fields are updated.

        Existing enrollments keep the subject details they were created with.

        Raises:
            SubjectNotFoundError: If subject doesn't exist
            SubjectCodeExistsError: If code belongs to another subject
        """
        session = self._db.get_session()
        try:
            subject = session.get(Subject, subject_id)
            if subject is None:
                raise SubjectNotFoundError(f"Subject with id '{subject_id}' not found")

            if code is not None and code != subject.code:
                self._ensure_subject_code_free(session, code, exclude_id=subject_id)
                subject.code = code
            if name is not None:
                subject.name = name
            if credit_hours is not None:
                subject.credit_hours = credit_hours
            if instructor_name is not None:
                subject.instructor_name = instructor_name
            subject.updated_at = self.now(after=subject.updated_at)

            session.commit()
            logger.info("Updated subject %s", subject_id)
            return subject
        finally:
            session.close()

    def delete_subject(self, subject_id: str) -> None:
        """Remove a subject from the catalog.

        Enrollments referencing the subject are left as they are.

        Raises:
            SubjectNotFoundError: If subject doesn't exist
        """
        session = self._db.get_session()
        try:
            subject = session.get(Subject, subject_id)
            if subject is None:
                raise SubjectNotFoundError(f"Subject with id '{subject_id}' not found")

            session.delete(subject)
            session.commit()
            logger.info("Deleted subject %s", subject_id)
        finally:
            session.close()

    @staticmethod
    def _ensure_subject_code_free(
        session: Session, code: str, exclude_id: str | None = None
    ) -> None:
        stmt = select(Subject.id).where(Subject.code == code)
        if exclude_id is not None:
            stmt = stmt.where(Subject.id != exclude_id)
        if session.execute(stmt).first() is not None:
            raise SubjectCodeExistsError(f"Subject with code '{code}' already exists")

    # --- Semester Operations ---

    def add_semester(self, name: str, year: str, is_active: bool = False) -> Semester:
        """Add a semester."""
        session = self._db.get_session()
        try:
            now = self.now()
            semester = Semester(
                id=self.id_factory(),
                name=name,
                year=year,
                is_active=is_active,
                position=self._next_position(session, Semester),
                created_at=now,
                updated_at=now,
            )
            session.add(semester)
            session.commit()
            logger.info("Added semester %s (%s)", semester.id, semester.label)
            return semester
        finally:
            session.close()

    def get_semester(self, semester_id: str) -> Semester:
        """Get semester by ID.

        Raises:
            SemesterNotFoundError: If semester doesn't exist
        """
        session = self._db.get_session()
        try:
            semester = session.get(Semester, semester_id)
            if semester is None:
                raise SemesterNotFoundError(f"Semester with id '{semester_id}' not found")
            return semester
        finally:
            session.close()

    def list_semesters(self) -> list[Semester]:
        """List all semesters in the order they were added."""
        session = self._db.get_session()
        try:
            stmt = select(Semester).order_by(Semester.position)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def get_active_semester(self) -> Semester | None:
        """First semester flagged active, if any."""
        session = self._db.get_session()
        try:
            stmt = (
                select(Semester)
                .where(Semester.is_active.is_(True))
                .order_by(Semester.position)
                .limit(1)
            )
            return session.execute(stmt).scalar_one_or_none()
        finally:
            session.close()

    def update_semester(
        self,
        semester_id: str,
        name: str | None = None,
        year: str | None = None,
        is_active: bool | None = None,
    ) -> Semester:
        """Update semester fields. Only provided fields are updated.

        Raises:
            SemesterNotFoundError: If semester doesn't exist
        """
        session = self._db.get_session()
        try:
            semester = session.get(Semester, semester_id)
            if semester is None:
                raise SemesterNotFoundError(f"Semester with id '{semester_id}' not found")

            if name is not None:
                semester.name = name
            if year is not None:
                semester.year = year
            if is_active is not None:
                semester.is_active = is_active
            semester.updated_at = self.now(after=semester.updated_at)

            session.commit()
            logger.info("Updated semester %s", semester_id)
            return semester
        finally:
            session.close()

    def delete_semester(self, semester_id: str) -> None:
        """Delete a semester. Enrollment labels are free-form and unaffected.

        Raises:
            SemesterNotFoundError: If semester doesn't exist
        """
        session = self._db.get_session()
        try:
            semester = session.get(Semester, semester_id)
            if semester is None:
                raise SemesterNotFoundError(f"Semester with id '{semester_id}' not found")

            session.delete(semester)
            session.commit()
            logger.info("Deleted semester %s", semester_id)
        finally:
            session.close()
