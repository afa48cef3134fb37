"""Integration tests for RecordsEngine."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from registrar.config import RegistrarConfig, load_config
from registrar.engine import RecordsEngine
from registrar.query import SortKey, SortOrder, StudentFilter
from registrar.records import (
    Department,
    RecordStore,
    RecordValidationError,
    RollNumberExistsError,
    SubjectCodeExistsError,
)

CALCULUS = {
    "name": "Calculus",
    "code": "MATH101",
    "credit_hours": 3,
    "instructor_name": "Imran Ali",
}
PHYSICS_LAB = {
    "name": "Physics Lab",
    "code": "PHY101L",
    "credit_hours": 1,
    "instructor_name": "Sara Noor",
}


def raw_student(**overrides: str) -> dict[str, str]:
    """Form input as a caller would submit it."""
    data = {
        "name": "Ayesha Khan",
        "roll_number": "cs-2021-bt-001",
        "department": "Computer Science",
        "email": "ayesha.khan@example.edu",
        "phone_number": "0300-1234567",
        "academic_year": "Second Year",
    }
    data.update(overrides)
    return data


@pytest.fixture
def engine(clock) -> Iterator[RecordsEngine]:
    """Engine over an in-memory store with small pages."""
    records = RecordsEngine(RecordStore(":memory:", clock=clock), page_size=2)
    yield records
    records.close()


@pytest.mark.integration
class TestFromConfig:
    """Tests for building an engine from configuration."""

    def test_uses_configured_database(self, tmp_path: Path) -> None:
        """db_path from YAML is resolved next to the config file."""
        config_path = tmp_path / "registrar.yaml"
        config_path.write_text("db_path: records.db\npage_size: 5\n")

        records = RecordsEngine.from_config(load_config(config_path))
        try:
            records.register_student(raw_student())
            assert records.page_size == 5
        finally:
            records.close()

        assert (tmp_path / "records.db").exists()

    def test_configures_logging(self, tmp_path: Path) -> None:
        """Log handlers are installed on request."""
        config = RegistrarConfig(db_path=":memory:", log_dir=str(tmp_path), log_level="INFO")

        records = RecordsEngine.from_config(config, configure_logging=True)
        try:
            records.register_student(raw_student())
        finally:
            records.close()
            logger = logging.getLogger("registrar")
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()

        content = (tmp_path / "registrar.log").read_text()
        assert "Added student" in content
        assert "ayesha.khan@example.edu" not in content


@pytest.mark.integration
class TestRegistration:
    """Validated registration through the engine."""

    def test_register_normalizes_roll_number(self, engine: RecordsEngine) -> None:
        """Roll number is stored uppercase without separators."""
        student = engine.register_student(raw_student())

        assert student.roll_number == "CS2021BT001"
        assert student.department is Department.COMPUTER_SCIENCE

    def test_register_rejects_bad_input(self, engine: RecordsEngine) -> None:
        """Malformed fields are reported and nothing is stored."""
        with pytest.raises(RecordValidationError) as exc_info:
            engine.register_student(raw_student(email="not-an-email", phone_number="12345"))

        fields = {err["loc"][0] for err in exc_info.value.errors}
        assert fields == {"email", "phone_number"}
        assert engine.store.list_students() == []

    def test_register_duplicate_roll_number(self, engine: RecordsEngine) -> None:
        """Normalized duplicates collide."""
        engine.register_student(raw_student())

        with pytest.raises(RollNumberExistsError):
            engine.register_student(raw_student(roll_number="CS2021BT001", email="b@example.edu"))

    def test_edit_student_partial(self, engine: RecordsEngine) -> None:
        """Only submitted fields change."""
        student = engine.register_student(raw_student())

        updated = engine.edit_student(student.id, {"academic_year": "Third Year"})

        assert str(updated.academic_year) == "Third Year"
        assert updated.name == "Ayesha Khan"

    def test_edit_student_clears_profile_image(self, engine: RecordsEngine) -> None:
        """Submitting profile_image as None removes the photo."""
        student = engine.register_student(
            raw_student(profile_image="data:image/png;base64,AAA")
        )

        updated = engine.edit_student(student.id, {"profile_image": None})

        assert updated.profile_image is None
        assert engine.store.get_student(student.id).profile_image is None

    def test_edit_student_without_image_keeps_it(self, engine: RecordsEngine) -> None:
        """Edits that leave out profile_image keep the photo."""
        student = engine.register_student(
            raw_student(profile_image="data:image/png;base64,AAA")
        )

        engine.edit_student(student.id, {"name": "Ayesha Siddiqui"})

        assert engine.store.get_student(student.id).profile_image == "data:image/png;base64,AAA"

    def test_register_subject_duplicate_code(self, engine: RecordsEngine) -> None:
        """Subject codes are unique."""
        engine.register_subject(CALCULUS)

        with pytest.raises(SubjectCodeExistsError):
            engine.register_subject(CALCULUS)

    def test_edit_subject_partial(self, engine: RecordsEngine) -> None:
        """Only submitted subject fields change."""
        subject = engine.register_subject(CALCULUS)

        updated = engine.edit_subject(subject.id, {"credit_hours": 4})

        assert updated.credit_hours == 4
        assert updated.code == "MATH101"
        assert updated.instructor_name == "Imran Ali"

    def test_edit_subject_keeps_enrollment_details(self, engine: RecordsEngine) -> None:
        """Enrollments keep the credit hours they were taken with."""
        student = engine.register_student(raw_student())
        subject = engine.register_subject(CALCULUS)
        engine.enrollments.enroll(student.id, subject.id, "Fall 2024")

        engine.edit_subject(subject.id, {"credit_hours": 4, "name": "Calculus II"})

        [enrollment] = engine.enrollments.list_for_student(student.id)
        assert enrollment.credit_hours == 3
        assert enrollment.subject_name == "Calculus"

    def test_edit_subject_rejects_bad_input(self, engine: RecordsEngine) -> None:
        """Out-of-range credit hours are reported."""
        subject = engine.register_subject(CALCULUS)

        with pytest.raises(RecordValidationError) as exc_info:
            engine.edit_subject(subject.id, {"credit_hours": 9})

        assert [err["loc"][0] for err in exc_info.value.errors] == ["credit_hours"]
        assert engine.store.get_subject(subject.id).credit_hours == 3

    def test_edit_subject_code_collision(self, engine: RecordsEngine) -> None:
        """Taking another subject's code fails."""
        engine.register_subject(CALCULUS)
        lab = engine.register_subject(PHYSICS_LAB)

        with pytest.raises(SubjectCodeExistsError):
            engine.edit_subject(lab.id, {"code": "MATH101"})

    def test_register_semester(self, engine: RecordsEngine) -> None:
        """Validated semesters are stored and labelled."""
        semester = engine.register_semester({"name": "Fall", "year": "2024", "is_active": True})

        assert semester.label == "Fall 2024"
        assert engine.store.get_active_semester().id == semester.id

    def test_register_semester_rejects_bad_input(self, engine: RecordsEngine) -> None:
        """Missing fields are reported and nothing is stored."""
        with pytest.raises(RecordValidationError) as exc_info:
            engine.register_semester({"name": ""})

        assert {err["loc"][0] for err in exc_info.value.errors} == {"name", "year"}
        assert engine.store.list_semesters() == []


@pytest.mark.integration
class TestViews:
    """Listing, export, CGPA and dashboard figures."""

    @pytest.fixture
    def populated(self, engine: RecordsEngine) -> RecordsEngine:
        engine.register_student(raw_student(name="Zara Ahmed", roll_number="CS2021BT003"))
        engine.register_student(
            raw_student(
                name="Bilal Raza",
                roll_number="EE2022BT010",
                department="Electrical",
                email="bilal@example.edu",
            )
        )
        engine.register_student(raw_student(name="Ali Hassan", roll_number="CS2021BT001"))
        return engine

    def test_view_sorted_by_name(self, populated: RecordsEngine) -> None:
        """Pages follow the requested order."""
        first = populated.view(key=SortKey.NAME, order=SortOrder.ASC)
        second = populated.view(key=SortKey.NAME, order=SortOrder.ASC, page=2)

        assert [s.name for s in first.items] == ["Ali Hassan", "Bilal Raza"]
        assert [s.name for s in second.items] == ["Zara Ahmed"]
        assert first.total_items == 3
        assert first.total_pages == 2
        assert first.has_next and not second.has_next

    def test_view_filtered(self, populated: RecordsEngine) -> None:
        """Filters narrow the listing."""
        page = populated.view(StudentFilter(department="Computer Science"))

        assert {s.name for s in page.items} == {"Ali Hassan", "Zara Ahmed"}

    def test_view_default_newest_first(self, populated: RecordsEngine) -> None:
        """Default order is newest registration first."""
        page = populated.view()

        assert [s.name for s in page.items] == ["Ali Hassan", "Bilal Raza"]

    def test_export_csv_matches_filter(self, populated: RecordsEngine) -> None:
        """Export covers every matching student, not one page."""
        text = populated.export_csv(StudentFilter(query="cs2021"), key="roll_number", order="asc")

        lines = text.splitlines()
        assert lines[0].startswith("Name,Roll Number,")
        assert [line.split(",")[1] for line in lines[1:]] == ["CS2021BT001", "CS2021BT003"]

    def test_student_cgpa(self, populated: RecordsEngine) -> None:
        """CGPA follows grades set through the engine."""
        student = populated.store.get_student_by_roll_number("CS2021BT001")
        subject = populated.register_subject(CALCULUS)
        lab = populated.register_subject(PHYSICS_LAB)
        math = populated.enrollments.enroll(student.id, subject.id, "Fall 2024")
        physics = populated.enrollments.enroll(student.id, lab.id, "Spring 2025")

        assert populated.student_cgpa(student.id) == 0.0

        populated.enrollments.set_grade(student.id, math.id, "A")
        populated.enrollments.set_grade(student.id, physics.id, "B")

        assert populated.student_cgpa(student.id) == pytest.approx((4.0 * 3 + 3.0 * 1) / 4)
        assert populated.semester_cgpa(student.id, "Fall 2024") == pytest.approx(4.0)

    def test_stats(self, populated: RecordsEngine) -> None:
        """Dashboard figures cover all students."""
        stats = populated.stats()

        assert stats.total == 3
        assert stats.departments == 2
        assert stats.top_department is Department.COMPUTER_SCIENCE
        assert stats.recent_registrations == 3
        assert stats.total_enrollments == 0
        assert stats.average_cgpa == 0.0
