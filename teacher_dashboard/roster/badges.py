"""
Derived display state for the student roster.

Every function here is a pure mapping from backend data to what the
roster shows; nothing is fetched or mutated.
"""

from dataclasses import dataclass
from typing import Optional

from ..formatting import format_activity_time
from ..gateway.models import Assignment, MergedStudent, Student, StudentSubmission

LOADING_ASSIGNMENTS_TEXT = "Loading assignment data..."
NEVER_LOGGED_IN_TEXT = "Never logged in"
EMAIL_UNAVAILABLE_NOTE = (
    "This student has no email confirmed in Canvas, so they cannot be "
    "contacted via email from this tool."
)


@dataclass(frozen=True)
class Badge:
    """
    A short status label.

    Attributes:
        text: Label shown to the teacher
        tone: One of destructive, warning, caution, success, secondary, muted
    """
    text: str
    tone: str = "secondary"

    @property
    def is_alert(self) -> bool:
        return self.tone in ("destructive", "warning")


@dataclass(frozen=True)
class ContactAffordance:
    """State of the per-student contact button."""
    enabled: bool
    label: str
    note: Optional[str] = None


@dataclass(frozen=True)
class AssignmentsSummary:
    """What the roster's assignments column shows for one student."""
    loading: bool
    status: Optional[Badge] = None
    missing_titles: tuple[str, ...] = ()
    score_lines: tuple[str, ...] = ()
    grade_url: str = ""

    @property
    def placeholder(self) -> Optional[str]:
        return LOADING_ASSIGNMENTS_TEXT if self.loading else None


def attendance_badge(student: Student) -> Badge:
    """
    Map attendance risk to its badge.

    Unknown risk values fall through to "not available".
    """
    risk = student.attendance_risk
    days = student.attendance_days

    if risk == "high":
        return Badge(f"No attendance for {days} days", "destructive")
    if risk == "medium":
        return Badge(f"Low attendance ({days} days)", "warning")
    if risk == "none":
        return Badge("Attending", "success")
    return Badge("Attendance data not available yet", "muted")


def activity_badge(student: Student) -> Optional[Badge]:
    """Inactivity flag for the last-activity column, None when not at risk."""
    if student.inactive_days and student.inactive_7_plus:
        return Badge(f"Inactive for {student.inactive_days} days", "destructive")
    if (
        student.last_activity_at is None
        and student.inactive_days
        and student.inactive_days >= 7
    ):
        return Badge("No activity", "destructive")
    return None


def last_activity_text(student: Student) -> str:
    return format_activity_time(student.last_activity) or NEVER_LOGGED_IN_TEXT


def due_date_badge(assignment: Assignment) -> Optional[Badge]:
    """Badge for an assignment's due status."""
    status = assignment.due_status

    if not assignment.due_at or status == "no_due_date":
        return Badge("No due date", "secondary")
    if status == "overdue":
        return Badge(f"Overdue ({abs(assignment.days_until_due or 0)} days ago)", "destructive")
    if status == "due_today":
        return Badge("Due today", "warning")
    if status == "due_soon":
        return Badge(f"Due in {assignment.days_until_due} days", "caution")
    if status == "future":
        return Badge(f"Due in {assignment.days_until_due} days", "secondary")
    return None


def contact_affordance(student: Student) -> ContactAffordance:
    """Contact is offered only when the backend confirms an email."""
    if student.email_available is True:
        return ContactAffordance(enabled=True, label="Contact student")
    return ContactAffordance(
        enabled=False,
        label="Email not available",
        note=EMAIL_UNAVAILABLE_NOTE,
    )


def _score_text(score: Optional[float]) -> str:
    if score is None:
        return "Not available"
    return f"{score:g}"


def assignments_summary(submission: Optional[StudentSubmission]) -> AssignmentsSummary:
    """Summarize missing work and grades, or a placeholder until loaded."""
    if submission is None:
        return AssignmentsSummary(loading=True)

    if submission.has_missing_assignments:
        status = Badge(f"Missing: {submission.missing_assignments_count}", "destructive")
        titles = tuple(a.title for a in submission.missing_assignments)
    else:
        status = Badge("All submitted", "success")
        titles = ()

    if submission.has_grades:
        score_lines = (
            f"Current Score: {_score_text(submission.current_score)}",
            f"Final Score: {_score_text(submission.final_score)}",
        )
    else:
        score_lines = ("Grade not available yet",)

    return AssignmentsSummary(
        loading=False,
        status=status,
        missing_titles=titles,
        score_lines=score_lines,
        grade_url=submission.grade_url,
    )


@dataclass(frozen=True)
class StudentRow:
    """Everything the roster table renders for one student."""
    student_canvas_id: int
    name: str
    email: Optional[str]
    last_activity: str
    activity_badge: Optional[Badge]
    attendance: Badge
    assignments: AssignmentsSummary
    contact: ContactAffordance


def student_row(merged: MergedStudent) -> StudentRow:
    student = merged.student
    return StudentRow(
        student_canvas_id=student.student_canvas_id,
        name=student.name,
        email=student.email,
        last_activity=last_activity_text(student),
        activity_badge=activity_badge(student),
        attendance=attendance_badge(student),
        assignments=assignments_summary(merged.submission),
        contact=contact_affordance(student),
    )


def can_remind(assignment: Assignment) -> bool:
    """Reminders are offered for every assignment that is not yet overdue."""
    return assignment.due_status != "overdue"


@dataclass(frozen=True)
class AssignmentRow:
    """One line of the assignments table."""
    assignment: Assignment
    due: Optional[Badge]
    can_remind: bool


def assignment_row(assignment: Assignment) -> AssignmentRow:
    return AssignmentRow(
        assignment=assignment,
        due=due_date_badge(assignment),
        can_remind=can_remind(assignment),
    )
