"""
Dashboard backend data models.

These models represent the payloads returned by the workflow backend's
webhook endpoints. Canvas IDs are integers and form the primary identity.
Only the fields the dashboard renders are kept.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional


ATTENDANCE_RISKS = ("none", "medium", "high", "no_attendance_yet")
DUE_STATUSES = ("overdue", "due_today", "due_soon", "future", "no_due_date")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the backend, None if absent or invalid."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None


def _optional_int(value) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def _optional_float(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class Course:
    """
    Represents a Canvas course as listed by the backend.

    Attributes:
        id: Canvas course ID
        name: Course display name
    """
    id: int
    name: str

    def __post_init__(self):
        if not isinstance(self.id, int) or self.id <= 0:
            raise ValueError(f"Course ID must be a positive integer, got {self.id}")

    @classmethod
    def from_api_response(cls, data: dict) -> "Course":
        """Create Course from backend response."""
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "Unknown Course",
        )


@dataclass(frozen=True)
class CoursesResult:
    """
    A course list together with its sync metadata.

    Attributes:
        courses: Courses in backend order
        last_synced_at: Raw timestamp of the last backend sync, if any
        stale: True when the backend's cached Canvas data should be refreshed
    """
    courses: tuple[Course, ...] = ()
    last_synced_at: Optional[str] = None
    stale: bool = False

    @classmethod
    def from_api_response(cls, data: dict, courses: Optional[Iterable[Course]] = None) -> "CoursesResult":
        """Build from the payload, or from already parsed courses when given."""
        if courses is None:
            courses = (Course.from_api_response(c) for c in data.get("courses") or [])
        return cls(
            courses=tuple(courses),
            last_synced_at=data.get("lastSyncedAt") or None,
            stale=bool(data.get("stale", False)),
        )


@dataclass(frozen=True)
class Student:
    """
    Activity and attendance data for one enrolled student.

    The backend's ``email_available`` flag is authoritative for whether the
    student can be contacted, regardless of ``email``.
    """
    student_canvas_id: int
    name: str
    email: Optional[str] = None
    email_available: bool = False
    last_activity_at: Optional[str] = None
    inactive_days: Optional[int] = None
    inactive_7_plus: bool = False
    last_attended_at: Optional[str] = None
    attendance_days: Optional[int] = None
    attendance_risk: str = "no_attendance_yet"

    @property
    def last_activity(self) -> Optional[datetime]:
        return parse_timestamp(self.last_activity_at)

    @classmethod
    def from_api_response(cls, data: dict) -> "Student":
        """Create Student from backend response."""
        return cls(
            student_canvas_id=int(data["student_canvas_id"]),
            name=data.get("name") or "",
            email=data.get("email"),
            email_available=data.get("email_available") is True,
            last_activity_at=data.get("last_activity_at"),
            inactive_days=_optional_int(data.get("inactive_days")),
            inactive_7_plus=bool(data.get("inactive_7_plus", False)),
            last_attended_at=data.get("last_attended_at"),
            attendance_days=_optional_int(data.get("attendance_days")),
            attendance_risk=data.get("attendance_risk") or "no_attendance_yet",
        )


@dataclass(frozen=True)
class MissingAssignment:
    """An assignment a student has not submitted by its due date."""
    assignment_id: int
    title: str
    due_at: Optional[str] = None
    points_possible: Optional[float] = None
    preview_url: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "MissingAssignment":
        return cls(
            assignment_id=int(data["assignment_id"]),
            title=data.get("title") or "Untitled Assignment",
            due_at=data.get("due_at"),
            points_possible=_optional_float(data.get("points_possible")),
            preview_url=data.get("preview_url") or "",
        )


@dataclass(frozen=True)
class StudentSubmission:
    """
    Submission summary for one student, joined to Student on
    ``student_canvas_id``.
    """
    student_canvas_id: int
    missing_assignments: tuple[MissingAssignment, ...] = ()
    missing_assignments_count: int = 0
    has_missing_assignments: bool = False
    current_score: Optional[float] = None
    final_score: Optional[float] = None
    grade_url: str = ""

    @property
    def has_grades(self) -> bool:
        return self.current_score is not None or self.final_score is not None

    @classmethod
    def from_api_response(cls, data: dict) -> "StudentSubmission":
        """Create StudentSubmission from backend response."""
        missing = tuple(
            MissingAssignment.from_api_response(a)
            for a in data.get("missing_assignments") or []
        )
        count = data.get("missing_assignments_count")
        return cls(
            student_canvas_id=int(data["student_canvas_id"]),
            missing_assignments=missing,
            missing_assignments_count=int(count) if count is not None else len(missing),
            has_missing_assignments=bool(data.get("has_missing_assignments", bool(missing))),
            current_score=_optional_float(data.get("current_score")),
            final_score=_optional_float(data.get("final_score")),
            grade_url=data.get("grade_url") or "",
        )


@dataclass(frozen=True)
class Assignment:
    """
    A course assignment with its submission progress across the roster.

    ``due_status`` and ``days_until_due`` are computed by the backend;
    ``days_until_due`` is negative for overdue assignments.
    """
    assignment_id: int
    title: str
    due_at: Optional[str] = None
    points_possible: Optional[float] = None
    assignment_url: str = ""
    due_status: str = "no_due_date"
    days_until_due: Optional[int] = None
    submitted_count: int = 0
    pending_count: int = 0
    total_students: int = 0

    @property
    def due(self) -> Optional[datetime]:
        return parse_timestamp(self.due_at)

    @classmethod
    def from_api_response(cls, data: dict) -> "Assignment":
        """Create Assignment from backend response."""
        return cls(
            assignment_id=int(data["assignment_id"]),
            title=data.get("title") or "Untitled Assignment",
            due_at=data.get("due_at"),
            points_possible=_optional_float(data.get("points_possible")),
            assignment_url=data.get("assignment_url") or "",
            due_status=data.get("due_status") or "no_due_date",
            days_until_due=_optional_int(data.get("days_until_due")),
            submitted_count=int(data.get("submitted_count") or 0),
            pending_count=int(data.get("pending_count") or 0),
            total_students=int(data.get("total_students") or 0),
        )


@dataclass(frozen=True)
class TokenStatus:
    """Whether the teacher has a Canvas token stored with the backend."""
    has_token: bool
    last4: Optional[str] = None


@dataclass(frozen=True)
class Draft:
    """An AI-generated email subject/body pair."""
    subject: str = ""
    body: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "Draft":
        return cls(subject=data.get("subject") or "", body=data.get("body") or "")


@dataclass
class MergedStudent:
    """
    A student together with their submission record, if it has arrived.

    Attributes:
        student: Activity/attendance data
        submission: Matching submission summary, None until loaded
    """
    student: Student
    submission: Optional[StudentSubmission] = None

    @property
    def student_canvas_id(self) -> int:
        return self.student.student_canvas_id

    def contact_context(self) -> dict:
        """Context the backend uses to draft a message to this student."""
        submission = self.submission
        return {
            "inactive_days": self.student.inactive_days,
            "attendance_days": self.student.attendance_days,
            "attendance_risk": self.student.attendance_risk,
            "missing_assignments_count": submission.missing_assignments_count if submission else 0,
            "missing_assignments_titles": (
                [a.title for a in submission.missing_assignments] if submission else []
            ),
            "current_score": submission.current_score if submission else None,
            "final_score": submission.final_score if submission else None,
        }
