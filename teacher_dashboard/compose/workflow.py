"""
Compose-and-send workflow.

A compose session asks the backend for an AI draft, lets the teacher edit
it, and sends it. The same state machine backs "contact student" and
"send assignment reminder":

    IDLE -> OPENING -> EDITABLE -> SENDING -> CLOSED
                          ^            |
                          +-- failure -+
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Callable, Optional, Sequence

from ..gateway.client import DashboardGateway, GatewayError
from ..gateway.models import Assignment, Draft, MergedStudent, Student
from ..notifications import Notifier
from ..session.models import Identity

logger = logging.getLogger(__name__)

DRAFT_ERROR_MESSAGE = "We couldn't generate the draft right now. Please try again."
SENT_STATUS = "sent"


class ComposeState(Enum):
    """Lifecycle of a compose session."""
    IDLE = auto()
    OPENING = auto()
    EDITABLE = auto()
    SENDING = auto()
    CLOSED = auto()


class ComposeError(Exception):
    """Raised when a message cannot be delivered."""
    pass


class ComposeSession(ABC):
    """
    One compose dialog.

    Scratch state (subject, body, inline error) lives only as long as the
    session: it is discarded on close and never shared between sessions.

    Subclasses supply the draft request, the delivery request and the
    user-facing wording.
    """

    title = "Compose"
    generating_text = "Generating email draft…"
    success_title = "Sent successfully!"
    failure_title = "Error sending"
    failure_description = "There was a problem sending. Please try again."

    def __init__(
        self,
        gateway: DashboardGateway,
        identity: Optional[Identity],
        notifier: Notifier,
        course_id: int,
        course_name: str,
    ):
        self.gateway = gateway
        self.identity = identity
        self.notifier = notifier
        self.course_id = course_id
        self.course_name = course_name

        self.state = ComposeState.IDLE
        self.subject = ""
        self.body = ""
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state not in (ComposeState.IDLE, ComposeState.CLOSED)

    @property
    def is_generating(self) -> bool:
        return self.state is ComposeState.OPENING

    @property
    def is_sending(self) -> bool:
        return self.state is ComposeState.SENDING

    @property
    def can_send(self) -> bool:
        return (
            self.state is ComposeState.EDITABLE
            and bool(self.subject.strip())
            and bool(self.body.strip())
        )

    @property
    def can_regenerate(self) -> bool:
        return self.state is ComposeState.EDITABLE

    @property
    def teacher_name(self) -> str:
        return self.identity.teacher_name if self.identity else "Your Teacher"

    @property
    @abstractmethod
    def description(self) -> str:
        """One-line description of what is being composed."""

    @abstractmethod
    def _request_draft(self) -> Draft:
        """Ask the backend for a draft."""

    @abstractmethod
    def _deliver(self, subject: str, body: str) -> str:
        """Send the message and return the backend status."""

    @property
    def success_description(self) -> str:
        return "Your message has been sent."

    def open(self) -> None:
        """Start the session with an empty draft and request one from the backend."""
        if self.is_open:
            logger.debug("Compose session already open")
            return
        self.subject = ""
        self.body = ""
        self.error = None
        self._generate()

    def regenerate(self) -> None:
        """Request a fresh draft, replacing the current content on success."""
        if not self.can_regenerate:
            logger.debug(f"Cannot regenerate while {self.state.name}")
            return
        self._generate()

    def edit(self, subject: Optional[str] = None, body: Optional[str] = None) -> bool:
        """
        Replace the subject and/or body.

        Returns:
            False if the fields are locked (draft or send in flight, or closed)
        """
        if self.state is not ComposeState.EDITABLE:
            return False
        if subject is not None:
            self.subject = subject
        if body is not None:
            self.body = body
        return True

    def _generate(self) -> None:
        self.state = ComposeState.OPENING
        self.error = None
        try:
            draft = self._request_draft()
        except (GatewayError, ComposeError) as e:
            logger.error(f"Error generating draft: {e}")
            self.error = DRAFT_ERROR_MESSAGE
        else:
            self.subject = draft.subject
            self.body = draft.body
        finally:
            if self.state is ComposeState.OPENING:
                self.state = ComposeState.EDITABLE

    def send(self) -> bool:
        """
        Send the current subject and body.

        Only a backend status of "sent" counts as success. On failure the
        session stays editable so the teacher can retry.

        Returns:
            True if the message was sent and the session closed
        """
        if not self.can_send:
            logger.debug("Send refused: session not ready or fields blank")
            return False

        self.state = ComposeState.SENDING
        try:
            status = self._deliver(self.subject.strip(), self.body.strip())
            if status != SENT_STATUS:
                raise ComposeError(f"Unexpected response status: {status!r}")
        except (GatewayError, ComposeError) as e:
            logger.error(f"Error sending: {e}")
            self.state = ComposeState.EDITABLE
            self.notifier.error(self.failure_title, self.failure_description)
            return False

        self.notifier.success(self.success_title, self.success_description)
        self.close()
        return True

    def close(self) -> None:
        """Close the session and discard its scratch state."""
        self.state = ComposeState.CLOSED
        self.subject = ""
        self.body = ""
        self.error = None

    def _require_teacher_email(self) -> str:
        if self.identity is None or not self.identity.email:
            raise ComposeError("Teacher email not available")
        return self.identity.email


class ContactStudentCompose(ComposeSession):
    """Draft and send a personal email to one student."""

    title = "Contact student"
    success_title = "Email sent successfully!"
    failure_title = "Error sending email"
    failure_description = "There was a problem sending the email. Please try again."

    def __init__(
        self,
        gateway: DashboardGateway,
        identity: Optional[Identity],
        notifier: Notifier,
        course_id: int,
        course_name: str,
        student: MergedStudent,
    ):
        super().__init__(gateway, identity, notifier, course_id, course_name)
        self.student = student

    @property
    def description(self) -> str:
        return f"Compose an email to {self.student.student.name}"

    @property
    def success_description(self) -> str:
        return f"Your message has been sent to {self.student.student.name}"

    def _recipient(self) -> dict:
        student = self.student.student
        return {
            "course_id_canvas": self.course_id,
            "student_canvas_id": student.student_canvas_id,
            "student_name": student.name,
            "student_email": student.email,
            "context": self.student.contact_context(),
        }

    def _request_draft(self) -> Draft:
        if self.identity is None:
            raise ComposeError("Not authenticated")
        payload = {
            "teacher_id": self.identity.id,
            "teacher_name": self.teacher_name,
            "course_name": self.course_name,
            **self._recipient(),
        }
        return self.gateway.generate_contact_draft(payload)

    def _deliver(self, subject: str, body: str) -> str:
        payload = {
            "teacher_id": self.identity.id if self.identity else None,
            "teacher_email": self._require_teacher_email(),
            **self._recipient(),
            "subject": subject,
            "body": body,
        }
        return self.gateway.send_contact_email(payload)


class ReminderCompose(ComposeSession):
    """
    Draft and send a reminder about one assignment.

    The roster as it stands when the reminder is sent goes along with it;
    the backend decides which students receive it.
    """

    title = "Send reminder"
    generating_text = "Generating reminder draft…"
    success_title = "Reminder sent successfully!"
    failure_title = "Error sending reminder"
    failure_description = "There was a problem sending the reminder. Please try again."

    def __init__(
        self,
        gateway: DashboardGateway,
        identity: Optional[Identity],
        notifier: Notifier,
        course_id: int,
        course_name: str,
        assignment: Assignment,
        roster: Callable[[], Sequence[Student]],
    ):
        super().__init__(gateway, identity, notifier, course_id, course_name)
        self.assignment = assignment
        self._roster = roster

    @property
    def students(self) -> tuple[Student, ...]:
        return tuple(self._roster())

    @property
    def description(self) -> str:
        return f'Send a reminder about "{self.assignment.title}"'

    @property
    def success_description(self) -> str:
        return "Your reminder has been sent to all students"

    def _request_draft(self) -> Draft:
        payload = {
            "course_name": self.course_name,
            "teacher_name": self.teacher_name,
            "assignment": {
                "assignment_id": self.assignment.assignment_id,
                "title": self.assignment.title,
                "due_at": self.assignment.due_at,
                "points_possible": self.assignment.points_possible,
            },
        }
        return self.gateway.generate_reminder_draft(payload)

    def _deliver(self, subject: str, body: str) -> str:
        payload = {
            "teacher_email": self._require_teacher_email(),
            "students": [
                {
                    "student_canvas_id": s.student_canvas_id,
                    "name": s.name,
                    "email": s.email,
                    "email_available": s.email_available,
                }
                for s in self.students
            ],
            "subject": subject,
            "body": body,
        }
        return self.gateway.send_reminder(payload)
