"""SQLAlchemy models for the record store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    composite,
    mapped_column,
    relationship,
)


class Department(StrEnum):
    """Academic departments a student can belong to."""

    COMPUTER_SCIENCE = "Computer Science"
    INFORMATION_TECHNOLOGY = "Information Technology"
    ELECTRONICS = "Electronics"
    MECHANICAL = "Mechanical"
    CIVIL = "Civil"
    ELECTRICAL = "Electrical"
    CHEMICAL = "Chemical"
    BIOTECHNOLOGY = "Biotechnology"


class AcademicYear(StrEnum):
    """Year of study."""

    FIRST = "First Year"
    SECOND = "Second Year"
    THIRD = "Third Year"
    FOURTH = "Fourth Year"


class Grade(StrEnum):
    """Letter grades, highest first."""

    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    F = "F"

    @classmethod
    def lowest(cls) -> Grade:
        """Grade assigned to new enrollments."""
        return list(cls)[-1]


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form SQLite stores."""
    return datetime.now(UTC).replace(tzinfo=None)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _enum_column(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        values_callable=_enum_values,
        native_enum=False,
        validate_strings=True,
        length=32,
    )


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


@dataclass(frozen=True)
class SubjectSnapshot:
    """Subject attributes copied into an enrollment when it is created.

    Snapshots are never rewritten when the source subject changes or is
    deleted; an enrollment keeps describing the course as it was taken.
    """

    name: str
    code: str
    credit_hours: int
    instructor_name: str


class Student(Base):
    """Student model - a registered student and their enrollments."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    roll_number: Mapped[str] = mapped_column(String(11), nullable=False, unique=True)
    department: Mapped[Department] = mapped_column(_enum_column(Department), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    academic_year: Mapped[AcademicYear] = mapped_column(
        _enum_column(AcademicYear), nullable=False
    )
    profile_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    enrollments: Mapped[list[Enrollment]] = relationship(
        "Enrollment",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="Enrollment.position",
        lazy="selectin",
    )

    def __init__(
        self,
        name: str,
        roll_number: str,
        department: Department | str,
        email: str,
        phone_number: str,
        academic_year: AcademicYear | str,
        id: str | None = None,
        profile_image: str | None = None,
        position: int = 0,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.position = position
        self.name = name
        self.roll_number = roll_number
        self.department = Department(department)
        self.email = email
        self.phone_number = phone_number
        self.academic_year = AcademicYear(academic_year)
        self.profile_image = profile_image
        self.enrollments = []
        self.created_at = created_at if created_at is not None else utcnow()
        self.updated_at = updated_at if updated_at is not None else self.created_at

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id!r}, name={self.name!r}, "
            f"roll_number={self.roll_number!r})>"
        )


class Subject(Base):
    """Subject model - an entry in the course catalog."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    credit_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    instructor_name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        name: str,
        code: str,
        credit_hours: int,
        instructor_name: str,
        id: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.code = code
        self.credit_hours = credit_hours
        self.instructor_name = instructor_name
        self.created_at = created_at if created_at is not None else utcnow()
        self.updated_at = updated_at if updated_at is not None else self.created_at

    def snapshot(self) -> SubjectSnapshot:
        """Capture the subject's current attributes for an enrollment."""
        return SubjectSnapshot(
            name=self.name,
            code=self.code,
            credit_hours=self.credit_hours,
            instructor_name=self.instructor_name,
        )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id!r}, code={self.code!r}, name={self.name!r})>"


class Semester(Base):
    """Semester model - a term students can enroll in."""

    __tablename__ = "semesters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[str] = mapped_column(String(10), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        name: str,
        year: str,
        id: str | None = None,
        is_active: bool = False,
        position: int = 0,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.position = position
        self.name = name
        self.year = year
        self.is_active = is_active
        self.created_at = created_at if created_at is not None else utcnow()
        self.updated_at = updated_at if updated_at is not None else self.created_at

    @property
    def label(self) -> str:
        """Label used on enrollments, e.g. 'Fall 2024'."""
        return f"{self.name} {self.year}"

    def __repr__(self) -> str:
        return f"<Semester(id={self.id!r}, label={self.label!r}, active={self.is_active!r})>"


class Enrollment(Base):
    """Enrollment model - a student's graded registration in a subject.

    ``subject_id`` is a plain reference rather than a foreign key so that
    deleting a catalog subject leaves historical enrollments untouched.
    """

    __tablename__ = "enrollments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    snapshot: Mapped[SubjectSnapshot] = composite(
        SubjectSnapshot,
        mapped_column("snapshot_name", String(100), nullable=False),
        mapped_column("snapshot_code", String(10), nullable=False),
        mapped_column("snapshot_credit_hours", Integer, nullable=False),
        mapped_column("snapshot_instructor_name", String(100), nullable=False),
    )
    grade: Mapped[Grade] = mapped_column(_enum_column(Grade), nullable=False)
    semester: Mapped[str] = mapped_column(String(60), nullable=False)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    student: Mapped[Student] = relationship("Student", back_populates="enrollments")

    def __init__(
        self,
        subject_id: str,
        snapshot: SubjectSnapshot,
        semester: str,
        id: str | None = None,
        grade: Grade | str | None = None,
        position: int = 0,
        enrolled_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.subject_id = subject_id
        self.snapshot = snapshot
        self.semester = semester
        self.grade = Grade(grade) if grade is not None else Grade.lowest()
        self.position = position
        self.enrolled_at = enrolled_at if enrolled_at is not None else utcnow()

    @property
    def subject_name(self) -> str:
        return self.snapshot.name

    @property
    def subject_code(self) -> str:
        return self.snapshot.code

    @property
    def credit_hours(self) -> int:
        return self.snapshot.credit_hours

    @property
    def instructor_name(self) -> str:
        return self.snapshot.instructor_name

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, subject_code={self.subject_code!r}, "
            f"grade={self.grade!r}, semester={self.semester!r})>"
        )
