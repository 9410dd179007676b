"""
Pytest configuration and shared fixtures.

Provides a mocked backend gateway and sample dashboard data.
"""

import pytest
from unittest.mock import MagicMock

from teacher_dashboard.gateway.client import DashboardGateway
from teacher_dashboard.gateway.models import (
    Assignment,
    Course,
    CoursesResult,
    Draft,
    MissingAssignment,
    Student,
    StudentSubmission,
    TokenStatus,
)
from teacher_dashboard.notifications import Notifier
from teacher_dashboard.session.models import Identity


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def identity() -> Identity:
    """The signed-in teacher."""
    return Identity(
        id="teacher-uuid-1",
        email="ms.frizzle@school.example",
        first_name="Valerie",
        last_name="Frizzle",
    )


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


# ============================================================================
# Backend Model Fixtures
# ============================================================================

@pytest.fixture
def sample_course() -> Course:
    return Course(id=12345, name="Introduction to Computer Science")


@pytest.fixture
def sample_students() -> list[Student]:
    """Three students in fetch order."""
    return [
        Student(
            student_canvas_id=1,
            name="Carlos Ramon",
            email="carlos@school.example",
            email_available=True,
            last_activity_at="2026-01-15T14:30:00Z",
            inactive_days=2,
            inactive_7_plus=False,
            attendance_days=1,
            attendance_risk="none",
        ),
        Student(
            student_canvas_id=2,
            name="arnold Perlstein",
            email="arnold@school.example",
            email_available=False,
            last_activity_at=None,
            inactive_days=12,
            inactive_7_plus=False,
            attendance_days=10,
            attendance_risk="high",
        ),
        Student(
            student_canvas_id=3,
            name="Dorothy Ann",
            email=None,
            email_available=True,
            last_activity_at="2026-01-10T09:00:00Z",
            inactive_days=8,
            inactive_7_plus=True,
            attendance_days=4,
            attendance_risk="medium",
        ),
    ]


@pytest.fixture
def sample_submissions() -> list[StudentSubmission]:
    """Submission records for students 1 and 3 only."""
    return [
        StudentSubmission(
            student_canvas_id=1,
            missing_assignments=(),
            missing_assignments_count=0,
            has_missing_assignments=False,
            current_score=92.5,
            final_score=88.0,
            grade_url="https://canvas.example.com/courses/12345/grades/1",
        ),
        StudentSubmission(
            student_canvas_id=3,
            missing_assignments=(
                MissingAssignment(assignment_id=501, title="Lab 1", due_at="2026-01-05T23:59:00Z"),
                MissingAssignment(assignment_id=502, title="Essay Draft", due_at="2026-01-08T23:59:00Z"),
            ),
            missing_assignments_count=2,
            has_missing_assignments=True,
            current_score=None,
            final_score=None,
            grade_url="https://canvas.example.com/courses/12345/grades/3",
        ),
    ]


@pytest.fixture
def sample_assignments() -> list[Assignment]:
    """Assignments in backend order (not sorted by due date)."""
    return [
        Assignment(assignment_id=10, title="Final Project", due_at=None, due_status="no_due_date"),
        Assignment(
            assignment_id=11,
            title="Quiz 2",
            due_at="2026-02-10T23:59:00Z",
            due_status="future",
            days_until_due=14,
            total_students=3,
            submitted_count=0,
            pending_count=3,
        ),
        Assignment(
            assignment_id=12,
            title="Lab 1",
            due_at="2026-01-05T23:59:00Z",
            due_status="overdue",
            days_until_due=-5,
            points_possible=10.0,
            total_students=3,
            submitted_count=2,
            pending_count=1,
        ),
        Assignment(assignment_id=13, title="Reading Log", due_at=None, due_status="no_due_date"),
    ]


# ============================================================================
# Gateway Fixtures
# ============================================================================

@pytest.fixture
def gateway(
    sample_course: Course,
    sample_students: list[Student],
    sample_submissions: list[StudentSubmission],
    sample_assignments: list[Assignment],
) -> MagicMock:
    """A gateway mock that answers every endpoint successfully."""
    mock = MagicMock(spec=DashboardGateway)
    mock.get_courses.return_value = CoursesResult(
        courses=(sample_course,),
        last_synced_at="2026-01-15T10:00:00",
        stale=False,
    )
    mock.get_students.return_value = sample_students
    mock.get_submissions.return_value = sample_submissions
    mock.get_assignments.return_value = sample_assignments
    mock.get_token_status.return_value = TokenStatus(has_token=False)
    mock.generate_contact_draft.return_value = Draft(subject="Checking in", body="Hi Carlos, ...")
    mock.generate_reminder_draft.return_value = Draft(subject="Reminder: Lab 1", body="Hi everyone, ...")
    mock.send_contact_email.return_value = "sent"
    mock.send_reminder.return_value = "sent"
    return mock


# ============================================================================
# API Response Fixtures
# ============================================================================

@pytest.fixture
def courses_response() -> dict:
    return {
        "status": "ok",
        "courses": [
            {"id": 12345, "name": "Introduction to Computer Science"},
            {"id": 678, "name": "Marine Biology"},
        ],
        "lastSyncedAt": "2026-01-15T10:00:00Z",
        "stale": True,
    }


@pytest.fixture
def student_response() -> dict:
    return {
        "student_canvas_id": 1,
        "name": "Carlos Ramon",
        "email": "carlos@school.example",
        "email_available": True,
        "last_activity_at": "2026-01-15T14:30:00Z",
        "inactive_days": 2,
        "inactive_7_plus": False,
        "last_attended_at": "2026-01-14T09:00:00Z",
        "attendance_days": 1,
        "attendance_risk": "none",
    }


@pytest.fixture
def submission_response() -> dict:
    return {
        "student_canvas_id": 3,
        "name": "Dorothy Ann",
        "enrollment_state": "active",
        "missing_assignments_count": 1,
        "has_missing_assignments": True,
        "missing_assignments": [
            {
                "assignment_id": 501,
                "title": "Lab 1",
                "due_at": "2026-01-05T23:59:00Z",
                "points_possible": 10,
                "preview_url": "https://canvas.example.com/preview/501",
            }
        ],
        "current_score": 71.25,
        "final_score": None,
        "grade_url": "https://canvas.example.com/courses/12345/grades/3",
    }


@pytest.fixture
def assignment_response() -> dict:
    return {
        "assignment_id": 12,
        "title": "Lab 1",
        "due_at": "2026-01-05T23:59:00Z",
        "points_possible": 10,
        "assignment_url": "https://canvas.example.com/courses/12345/assignments/12",
        "days_until_due": -5,
        "due_status": "overdue",
        "total_students": 3,
        "submitted_count": 2,
        "pending_count": 1,
    }
