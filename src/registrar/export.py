"""CSV and JSON snapshot export of records.

Snapshot documents hold one flat record per entity under the keys
``students``, ``subjects`` and ``semesters``; enrollments are embedded in
their student. Instants are ISO-8601 strings.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from registrar.records.exceptions import RegistrarError
from registrar.records.models import (
    Enrollment,
    Semester,
    Student,
    Subject,
    SubjectSnapshot,
)
from registrar.records.store import RecordStore

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Name",
    "Roll Number",
    "Department",
    "Email",
    "Phone",
    "Academic Year",
    "Registration Date",
]


def students_to_csv(students: Iterable[Any]) -> str:
    """Render students as CSV, header row first.

    Rows follow the input order, so pass an already filtered and sorted list.
    Fields containing commas, quotes or newlines are quoted.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for student in students:
        writer.writerow(
            [
                student.name,
                student.roll_number,
                str(student.department),
                student.email,
                student.phone_number,
                str(student.academic_year),
                student.created_at.date().isoformat(),
            ]
        )
    return buffer.getvalue()


# --- Snapshot serialization ---


def _enrollment_record(enrollment: Enrollment) -> dict[str, Any]:
    return {
        "id": enrollment.id,
        "subject_id": enrollment.subject_id,
        "subject_name": enrollment.subject_name,
        "subject_code": enrollment.subject_code,
        "credit_hours": enrollment.credit_hours,
        "instructor_name": enrollment.instructor_name,
        "grade": str(enrollment.grade),
        "semester": enrollment.semester,
        "enrolled_at": enrollment.enrolled_at.isoformat(),
    }


def _student_record(student: Student) -> dict[str, Any]:
    return {
        "id": student.id,
        "name": student.name,
        "roll_number": student.roll_number,
        "department": str(student.department),
        "email": student.email,
        "phone_number": student.phone_number,
        "academic_year": str(student.academic_year),
        "profile_image": student.profile_image,
        "created_at": student.created_at.isoformat(),
        "updated_at": student.updated_at.isoformat(),
        "enrollments": [_enrollment_record(e) for e in student.enrollments],
    }


def _subject_record(subject: Subject) -> dict[str, Any]:
    return {
        "id": subject.id,
        "name": subject.name,
        "code": subject.code,
        "credit_hours": subject.credit_hours,
        "instructor_name": subject.instructor_name,
        "created_at": subject.created_at.isoformat(),
        "updated_at": subject.updated_at.isoformat(),
    }


def _semester_record(semester: Semester) -> dict[str, Any]:
    return {
        "id": semester.id,
        "name": semester.name,
        "year": semester.year,
        "is_active": semester.is_active,
        "created_at": semester.created_at.isoformat(),
        "updated_at": semester.updated_at.isoformat(),
    }


def dump_snapshot(store: RecordStore) -> dict[str, list[dict[str, Any]]]:
    """Serialize every record in the store to plain dictionaries."""
    return {
        "students": [_student_record(s) for s in store.list_students()],
        "subjects": [_subject_record(s) for s in store.list_subjects()],
        "semesters": [_semester_record(s) for s in store.list_semesters()],
    }


def load_snapshot(store: RecordStore, data: dict[str, Any]) -> None:
    """Restore a snapshot document into an empty store.

    Ids, timestamps and enrollment snapshots are kept exactly as recorded.

    Args:
        store: Target store; must not hold any records.
        data: Document produced by :func:`dump_snapshot`.

    Raises:
        RegistrarError: If the store already holds records.
        KeyError: If a record is missing a required field.
    """
    if not store.database.is_empty():
        raise RegistrarError("Snapshots can only be loaded into an empty store")

    session = store.database.get_session()
    try:
        for position, record in enumerate(data.get("students", []), start=1):
            student = Student(
                id=record["id"],
                name=record["name"],
                roll_number=record["roll_number"],
                department=record["department"],
                email=record["email"],
                phone_number=record["phone_number"],
                academic_year=record["academic_year"],
                profile_image=record.get("profile_image"),
                position=position,
                created_at=datetime.fromisoformat(record["created_at"]),
                updated_at=datetime.fromisoformat(record["updated_at"]),
            )
            for index, item in enumerate(record.get("enrollments", []), start=1):
                student.enrollments.append(
                    Enrollment(
                        id=item["id"],
                        subject_id=item["subject_id"],
                        snapshot=SubjectSnapshot(
                            name=item["subject_name"],
                            code=item["subject_code"],
                            credit_hours=item["credit_hours"],
                            instructor_name=item["instructor_name"],
                        ),
                        semester=item["semester"],
                        grade=item["grade"],
                        position=index,
                        enrolled_at=datetime.fromisoformat(item["enrolled_at"]),
                    )
                )
            session.add(student)

        for record in data.get("subjects", []):
            session.add(
                Subject(
                    id=record["id"],
                    name=record["name"],
                    code=record["code"],
                    credit_hours=record["credit_hours"],
                    instructor_name=record["instructor_name"],
                    created_at=datetime.fromisoformat(record["created_at"]),
                    updated_at=datetime.fromisoformat(record["updated_at"]),
                )
            )

        for position, record in enumerate(data.get("semesters", []), start=1):
            session.add(
                Semester(
                    id=record["id"],
                    name=record["name"],
                    year=record["year"],
                    is_active=record.get("is_active", False),
                    position=position,
                    created_at=datetime.fromisoformat(record["created_at"]),
                    updated_at=datetime.fromisoformat(record["updated_at"]),
                )
            )

        session.commit()
        logger.info(
            "Loaded snapshot: %d students, %d subjects, %d semesters",
            len(data.get("students", [])),
            len(data.get("subjects", [])),
            len(data.get("semesters", [])),
        )
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def save_snapshot(store: RecordStore, path: str | Path) -> Path:
    """Write a JSON snapshot of the store to a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dump_snapshot(store), indent=2), encoding="utf-8")
    logger.info("Saved snapshot to %s", path)
    return path


def restore_snapshot(store: RecordStore, path: str | Path) -> None:
    """Load a JSON snapshot file into an empty store."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    load_snapshot(store, data)
