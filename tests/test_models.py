"""
Unit tests for dashboard data models.
"""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace

from teacher_dashboard.gateway.models import (
    Assignment,
    Course,
    CoursesResult,
    Draft,
    MergedStudent,
    Student,
    StudentSubmission,
    parse_timestamp,
)
from teacher_dashboard.session.models import Identity


class TestCourse:
    """Tests for Course and CoursesResult."""

    def test_course_invalid_id(self):
        with pytest.raises(ValueError, match="positive integer"):
            Course(id=0, name="Test")

    def test_courses_result_from_api_response(self, courses_response: dict):
        result = CoursesResult.from_api_response(courses_response)

        assert [c.id for c in result.courses] == [12345, 678]
        assert result.last_synced_at == "2026-01-15T10:00:00Z"
        assert result.stale is True

    def test_courses_result_defaults(self):
        result = CoursesResult.from_api_response({"status": "ok"})

        assert result.courses == ()
        assert result.last_synced_at is None
        assert result.stale is False


class TestStudent:
    """Tests for Student parsing."""

    def test_from_api_response(self, student_response: dict):
        student = Student.from_api_response(student_response)

        assert student.student_canvas_id == 1
        assert student.email_available is True
        assert student.last_activity == datetime(2026, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_email_available_must_be_true(self, student_response: dict):
        """Only a literal true enables contact, not a present email."""
        student_response["email_available"] = "yes"
        student = Student.from_api_response(student_response)

        assert student.email == "carlos@school.example"
        assert student.email_available is False

    def test_missing_risk_defaults_to_not_available(self, student_response: dict):
        student_response["attendance_risk"] = None
        assert Student.from_api_response(student_response).attendance_risk == "no_attendance_yet"


class TestStudentSubmission:
    def test_from_api_response(self, submission_response: dict):
        submission = StudentSubmission.from_api_response(submission_response)

        assert submission.student_canvas_id == 3
        assert submission.missing_assignments_count == 1
        assert submission.missing_assignments[0].title == "Lab 1"
        assert submission.current_score == 71.25
        assert submission.final_score is None
        assert submission.has_grades is True

    def test_count_falls_back_to_list_length(self, submission_response: dict):
        del submission_response["missing_assignments_count"]
        assert StudentSubmission.from_api_response(submission_response).missing_assignments_count == 1


class TestAssignment:
    def test_from_api_response(self, assignment_response: dict):
        assignment = Assignment.from_api_response(assignment_response)

        assert assignment.assignment_id == 12
        assert assignment.due_status == "overdue"
        assert assignment.days_until_due == -5
        assert assignment.points_possible == 10.0
        assert assignment.due is not None

    def test_missing_due_date(self):
        assignment = Assignment.from_api_response({"assignment_id": 1, "title": "Extra credit"})

        assert assignment.due is None
        assert assignment.due_status == "no_due_date"


class TestMergedStudent:
    def test_contact_context_with_submission(self, sample_students, sample_submissions):
        merged = MergedStudent(sample_students[2], sample_submissions[1])
        context = merged.contact_context()

        assert context["inactive_days"] == 8
        assert context["attendance_risk"] == "medium"
        assert context["missing_assignments_count"] == 2
        assert context["missing_assignments_titles"] == ["Lab 1", "Essay Draft"]
        assert context["current_score"] is None

    def test_contact_context_without_submission(self, sample_students):
        context = MergedStudent(sample_students[0]).contact_context()

        assert context["missing_assignments_count"] == 0
        assert context["missing_assignments_titles"] == []
        assert context["final_score"] is None


def test_parse_timestamp_invalid():
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None


def test_draft_tolerates_missing_fields():
    assert Draft.from_api_response({"subject": "Hi"}) == Draft(subject="Hi", body="")


class TestIdentity:
    def test_from_auth_user(self):
        identity = Identity.from_auth_user(SimpleNamespace(
            id="abc",
            email="t@school.example",
            user_metadata={"first_name": "Ada", "last_name": "Lovelace"},
        ))

        assert identity.display_name == "Ada"
        assert identity.teacher_name == "Ada Lovelace"

    def test_from_auth_user_without_metadata(self):
        identity = Identity.from_auth_user(SimpleNamespace(id="abc", email=None, user_metadata=None))

        assert identity.email == ""
        assert identity.teacher_name == "Your Teacher"

    def test_names_fall_back(self):
        identity = Identity(id="abc", email="t@school.example")

        assert identity.display_name == "t@school.example"
        assert identity.teacher_name == "Your Teacher"

    def test_requires_id(self):
        with pytest.raises(ValueError):
            Identity(id="")

