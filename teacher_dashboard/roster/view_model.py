"""
Course roster view-model.

Loads students, submissions and assignments for one course, merges them on
``student_canvas_id`` and exposes sorted, display-ready rows.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Union

from ..compose.workflow import ContactStudentCompose, ReminderCompose
from ..gateway.client import DashboardGateway, GatewayError
from ..gateway.models import Assignment, MergedStudent, Student, StudentSubmission
from ..notifications import Notifier
from ..session.models import Identity
from .badges import AssignmentRow, StudentRow, assignment_row, can_remind, student_row
from .sorting import SortField, SortState, sort_assignments, sort_students

logger = logging.getLogger(__name__)


class RosterViewModel:
    """
    State of a single course's overview page.

    Students are the primary resource: if they cannot be fetched the page
    reports an error. Submissions, assignments and the course name are
    secondary: failures are logged and the affected sections show
    placeholders.

    Usage:
        roster = RosterViewModel(gateway, identity, course_id=123, notifier=notifier)
        roster.load()
        roster.sort_by("last_activity")
        for row in roster.rows():
            print(row.name, row.attendance.text)
    """

    def __init__(
        self,
        gateway: DashboardGateway,
        identity: Optional[Identity],
        course_id: int,
        notifier: Notifier,
    ):
        self.gateway = gateway
        self.identity = identity
        self.course_id = course_id
        self.notifier = notifier

        self.course_name: Optional[str] = None
        self.students: list[Student] = []
        self.submissions: list[StudentSubmission] = []
        self.assignments: list[Assignment] = []
        self.loading = True
        self.assignments_loading = True
        self.error: Optional[str] = None
        self.sort = SortState()
        self.active_compose: Optional[Union[ContactStudentCompose, ReminderCompose]] = None

        self._submissions_by_student: dict[int, StudentSubmission] = {}
        self._generation = 0

    @property
    def display_course_name(self) -> str:
        return self.course_name or f"Course {self.course_id}"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """
        Fetch the three roster collections concurrently.

        Returns:
            True if students were loaded; False on error or if the load was
            superseded before it finished
        """
        if self.identity is None:
            self.notifier.error("Error", "You must be logged in to view students")
            return False

        self._generation += 1
        generation = self._generation
        self.loading = True
        self.assignments_loading = True

        teacher_id = self.identity.id
        with ThreadPoolExecutor(max_workers=4, thread_name_prefix="roster") as pool:
            course_future = pool.submit(self.gateway.get_courses, teacher_id)
            students_future = pool.submit(self.gateway.get_students, teacher_id, self.course_id)
            submissions_future = pool.submit(self.gateway.get_submissions, teacher_id, self.course_id)
            assignments_future = pool.submit(self.gateway.get_assignments, teacher_id, self.course_id)

        if generation != self._generation:
            logger.debug(f"Discarding roster responses for superseded load of course {self.course_id}")
            return False

        try:
            courses = course_future.result()
            found = next((c for c in courses.courses if c.id == self.course_id), None)
            if found is not None:
                self.course_name = found.name
        except GatewayError as e:
            logger.error(f"Error fetching course details (non-blocking): {e}")

        loaded = True
        try:
            self.students = students_future.result()
            self.error = None
        except GatewayError as e:
            logger.error(f"Error fetching students: {e}")
            self.error = "Failed to load students. Please try again."
            self.notifier.error("Error", self.error)
            loaded = False

        try:
            self._set_submissions(submissions_future.result())
        except GatewayError as e:
            logger.error(f"Error fetching submissions (non-blocking): {e}")

        try:
            self.assignments = sort_assignments(assignments_future.result())
        except GatewayError as e:
            logger.error(f"Error fetching assignments (non-blocking): {e}")

        self.loading = False
        self.assignments_loading = False
        return loaded

    def dispose(self) -> None:
        """Leave the view: drop any in-flight responses and the open compose session."""
        self._generation += 1
        if self.active_compose is not None:
            self.active_compose.close()
            self.active_compose = None

    def _set_submissions(self, submissions: list[StudentSubmission]) -> None:
        self.submissions = submissions
        self._submissions_by_student = {s.student_canvas_id: s for s in submissions}

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def submission_for(self, student_canvas_id: int) -> Optional[StudentSubmission]:
        return self._submissions_by_student.get(student_canvas_id)

    def merged(self, student: Student) -> MergedStudent:
        return MergedStudent(student=student, submission=self.submission_for(student.student_canvas_id))

    def sort_by(self, field: Union[SortField, str]) -> SortState:
        """Toggle the sort on ``field``."""
        self.sort = self.sort.toggle(SortField(field))
        return self.sort

    def sorted_students(self) -> list[Student]:
        return sort_students(self.students, self.sort)

    def rows(self) -> list[StudentRow]:
        return [student_row(self.merged(s)) for s in self.sorted_students()]

    def assignment_rows(self) -> list[AssignmentRow]:
        return [assignment_row(a) for a in self.assignments]

    def find_student(self, student_canvas_id: int) -> Optional[Student]:
        return next((s for s in self.students if s.student_canvas_id == student_canvas_id), None)

    def find_assignment(self, assignment_id: int) -> Optional[Assignment]:
        return next((a for a in self.assignments if a.assignment_id == assignment_id), None)

    # ------------------------------------------------------------------
    # Compose
    # ------------------------------------------------------------------

    def open_contact(self, student_canvas_id: int) -> ContactStudentCompose:
        """
        Open a contact session for one student and request its draft.

        Raises:
            KeyError: If the student is not on the roster
            ValueError: If the student has no confirmed email
        """
        student = self.find_student(student_canvas_id)
        if student is None:
            raise KeyError(f"Student {student_canvas_id} is not enrolled in course {self.course_id}")
        if student.email_available is not True:
            raise ValueError(f"{student.name} has no email confirmed in Canvas")

        session = ContactStudentCompose(
            self.gateway,
            self.identity,
            self.notifier,
            self.course_id,
            self.display_course_name,
            self.merged(student),
        )
        self._activate(session)
        return session

    def open_reminder(self, assignment_id: int) -> ReminderCompose:
        """
        Open a reminder session for one assignment and request its draft.

        Raises:
            KeyError: If the assignment is not in this course
            ValueError: If the assignment is already overdue
        """
        assignment = self.find_assignment(assignment_id)
        if assignment is None:
            raise KeyError(f"Assignment {assignment_id} not found in course {self.course_id}")
        if not can_remind(assignment):
            raise ValueError(f'"{assignment.title}" is overdue; reminders are only sent before the due date')

        session = ReminderCompose(
            self.gateway,
            self.identity,
            self.notifier,
            self.course_id,
            self.display_course_name,
            assignment,
            lambda: self.students,
        )
        self._activate(session)
        return session

    def _activate(self, session) -> None:
        if self.active_compose is not None:
            self.active_compose.close()
        self.active_compose = session
        session.open()
