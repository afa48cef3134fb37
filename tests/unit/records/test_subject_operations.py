"""Unit tests for RecordStore subject and semester operations."""

import pytest

from registrar.records import (
    RecordStore,
    SemesterNotFoundError,
    SubjectCodeExistsError,
    SubjectNotFoundError,
)


@pytest.mark.unit
class TestSubjects:
    """Tests for subject CRUD."""

    def test_add_subject(self, store: RecordStore, make_subject) -> None:
        """Create with all fields."""
        subject = store.add_subject(**make_subject())

        fetched = store.get_subject(subject.id)
        assert fetched.name == "Calculus I"
        assert fetched.code == "MATH101"
        assert fetched.credit_hours == 3
        assert fetched.instructor_name == "Imran Ali"
        assert fetched.created_at == fetched.updated_at

    def test_add_subject_duplicate_code_raises(self, store: RecordStore, make_subject) -> None:
        """SubjectCodeExistsError on duplicate code."""
        store.add_subject(**make_subject())

        with pytest.raises(SubjectCodeExistsError) as exc_info:
            store.add_subject(**make_subject(name="Calculus Again"))

        assert "MATH101" in str(exc_info.value)

    def test_get_subject_by_code(self, store: RecordStore, make_subject) -> None:
        """Lookup by code returns the subject."""
        subject = store.add_subject(**make_subject())

        assert store.get_subject_by_code("MATH101").id == subject.id

    def test_get_subject_not_found_raises(self, store: RecordStore) -> None:
        """SubjectNotFoundError for invalid ID."""
        with pytest.raises(SubjectNotFoundError):
            store.get_subject("nonexistent-id")

    def test_list_subjects_ordered_by_code(self, store: RecordStore, make_subject) -> None:
        """Subjects are listed by code."""
        store.add_subject(**make_subject(code="PHY101", name="Physics"))
        store.add_subject(**make_subject(code="CS101", name="Programming"))
        store.add_subject(**make_subject(code="MATH101"))

        codes = [s.code for s in store.list_subjects()]

        assert codes == ["CS101", "MATH101", "PHY101"]

    def test_update_subject(self, store: RecordStore, make_subject) -> None:
        """Only provided fields change and updated_at advances."""
        subject = store.add_subject(**make_subject())

        updated = store.update_subject(subject.id, credit_hours=4)

        assert updated.credit_hours == 4
        assert updated.name == "Calculus I"
        assert updated.updated_at > subject.updated_at

    def test_update_subject_code_collision_raises(
        self, store: RecordStore, make_subject
    ) -> None:
        """SubjectCodeExistsError when taking another subject's code."""
        store.add_subject(**make_subject())
        other = store.add_subject(**make_subject(code="CS101", name="Programming"))

        with pytest.raises(SubjectCodeExistsError):
            store.update_subject(other.id, code="MATH101")

    def test_update_subject_not_found_raises(self, store: RecordStore) -> None:
        """SubjectNotFoundError for invalid ID."""
        with pytest.raises(SubjectNotFoundError):
            store.update_subject("nonexistent-id", name="Nothing")

    def test_delete_subject(self, store: RecordStore, make_subject) -> None:
        """Deleted subject can no longer be fetched."""
        subject = store.add_subject(**make_subject())

        store.delete_subject(subject.id)

        with pytest.raises(SubjectNotFoundError):
            store.get_subject(subject.id)

    def test_delete_subject_not_found_raises(self, store: RecordStore) -> None:
        """SubjectNotFoundError for invalid ID."""
        with pytest.raises(SubjectNotFoundError):
            store.delete_subject("nonexistent-id")


@pytest.mark.unit
class TestSemesters:
    """Tests for semester CRUD."""

    def test_add_semester(self, store: RecordStore) -> None:
        """Semester is stored with its label."""
        semester = store.add_semester("Fall", "2024")

        fetched = store.get_semester(semester.id)
        assert fetched.name == "Fall"
        assert fetched.year == "2024"
        assert fetched.is_active is False
        assert fetched.label == "Fall 2024"

    def test_list_semesters_in_insertion_order(self, store: RecordStore) -> None:
        """Semesters are listed in the order added."""
        store.add_semester("Spring", "2025")
        store.add_semester("Fall", "2024")

        labels = [s.label for s in store.list_semesters()]

        assert labels == ["Spring 2025", "Fall 2024"]

    def test_get_active_semester(self, store: RecordStore) -> None:
        """The first active semester is returned."""
        store.add_semester("Spring", "2024")
        active = store.add_semester("Fall", "2024", is_active=True)
        store.add_semester("Spring", "2025", is_active=True)

        assert store.get_active_semester().id == active.id

    def test_get_active_semester_none(self, store: RecordStore) -> None:
        """None when no semester is active."""
        store.add_semester("Spring", "2024")

        assert store.get_active_semester() is None

    def test_update_semester(self, store: RecordStore) -> None:
        """Flag and fields update; updated_at advances."""
        semester = store.add_semester("Fall", "2024")

        updated = store.update_semester(semester.id, is_active=True, year="2025")

        assert updated.is_active is True
        assert updated.label == "Fall 2025"
        assert updated.updated_at > semester.updated_at

    def test_update_semester_not_found_raises(self, store: RecordStore) -> None:
        """SemesterNotFoundError for invalid ID."""
        with pytest.raises(SemesterNotFoundError):
            store.update_semester("nonexistent-id", name="Summer")

    def test_delete_semester(self, store: RecordStore) -> None:
        """Deleted semester can no longer be fetched."""
        semester = store.add_semester("Fall", "2024")

        store.delete_semester(semester.id)

        with pytest.raises(SemesterNotFoundError):
            store.get_semester(semester.id)
