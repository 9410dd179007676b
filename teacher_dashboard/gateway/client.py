"""
Workflow backend API client.

Thin HTTP/JSON wrapper over the backend's webhook endpoints. The backend owns
Canvas access, token storage, draft generation and email delivery; this
client only moves JSON. Canvas tokens are never logged.
"""

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .models import (
    Assignment,
    Course,
    CoursesResult,
    Draft,
    Student,
    StudentSubmission,
    TokenStatus,
)

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the backend is unreachable or returns an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class DashboardGateway:
    """
    Client for the dashboard's workflow backend.

    Handles:
    - Query/body encoding for every webhook endpoint
    - Mapping transport and HTTP failures to GatewayError
    - Parsing responses into dashboard models

    No automatic retries are made unless ``max_retries`` is raised, and then
    only for GET requests.

    Usage:
        gateway = DashboardGateway(base_url="https://backend.example.com/webhook/canvas")

        result = gateway.get_courses(teacher_id)
        for course in result.courses:
            print(course.name)
    """

    COURSES_ENDPOINT = "/courses"
    COURSES_SYNC_ENDPOINT = "/courses/sync"
    STUDENTS_ENDPOINT = "/students"
    SUBMISSIONS_ENDPOINT = "/submissions"
    ASSIGNMENTS_ENDPOINT = "/assignments"
    TOKEN_STATUS_ENDPOINT = "/token-status"
    SAVE_TOKEN_ENDPOINT = "/save-token"
    CONTACT_DRAFT_ENDPOINT = "/contact-student"
    CONTACT_SEND_ENDPOINT = "/contact-student/send"
    REMINDER_DRAFT_ENDPOINT = "/assignments/remind"
    REMINDER_SEND_ENDPOINT = "/assignments/remind/send"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 0,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: Webhook root (e.g., https://host/webhook/canvas)
            timeout: Request timeout in seconds
            max_retries: Retry budget for transient GET failures
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._session = requests.Session()

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

        logger.info(f"Dashboard gateway initialized for {self.base_url}")

    def __repr__(self) -> str:
        return f"DashboardGateway(base_url='{self.base_url}')"

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        payload: Optional[dict] = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Make a request to the backend.

        Args:
            method: HTTP method (GET or POST)
            endpoint: Endpoint path under the webhook root
            params: Query parameters
            payload: JSON body for POST requests
            expect_json: Parse and return the JSON body

        Returns:
            Parsed JSON response, or None when ``expect_json`` is False

        Raises:
            GatewayError: On network failure, non-2xx status or invalid JSON
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            error_msg = f"Backend error on {endpoint}: HTTP {status_code}"
            error_body = None
            try:
                error_body = e.response.json()
                if isinstance(error_body, dict) and error_body.get("message"):
                    error_msg = f"Backend error on {endpoint}: {error_body['message']}"
            except (ValueError, AttributeError):
                pass

            logger.error(error_msg)
            raise GatewayError(error_msg, status_code=status_code, response=error_body) from e

        except requests.exceptions.RequestException as e:
            error_msg = f"Backend request to {endpoint} failed: {e}"
            logger.error(error_msg)
            raise GatewayError(error_msg) from e

        if not expect_json:
            return None

        try:
            return response.json()
        except ValueError as e:
            error_msg = f"Backend returned invalid JSON from {endpoint}"
            logger.error(error_msg)
            raise GatewayError(error_msg, status_code=response.status_code) from e

    def _get_object(self, endpoint: str, params: dict) -> dict:
        data = self._request("GET", endpoint, params=params)
        if not isinstance(data, dict):
            raise GatewayError(f"Unexpected response shape from {endpoint}")
        return data

    def _post_object(self, endpoint: str, payload: dict) -> dict:
        data = self._request("POST", endpoint, payload=payload)
        if not isinstance(data, dict):
            raise GatewayError(f"Unexpected response shape from {endpoint}")
        return data

    def get_courses(self, teacher_id: str) -> CoursesResult:
        """
        Fetch the teacher's course list with its sync metadata.

        Returns:
            CoursesResult in backend order
        """
        logger.info("Fetching courses...")

        data = self._get_object(self.COURSES_ENDPOINT, {"teacher_id": teacher_id})

        courses = []
        for course_data in data.get("courses") or []:
            try:
                courses.append(Course.from_api_response(course_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed course data: {e}")
                continue

        result = CoursesResult.from_api_response(data, courses)

        logger.info(f"Found {len(result.courses)} courses (stale: {result.stale})")
        return result

    def trigger_sync(self, teacher_id: str) -> None:
        """Ask the backend to refresh its cached Canvas courses."""
        logger.info("Triggering course sync...")
        self._request(
            "GET",
            self.COURSES_SYNC_ENDPOINT,
            params={"teacher_id": teacher_id},
            expect_json=False,
        )

    def get_students(self, teacher_id: str, course_id: int) -> list[Student]:
        """Fetch activity/attendance data for every student in a course."""
        logger.info(f"Fetching students for course {course_id}")

        data = self._get_object(
            self.STUDENTS_ENDPOINT,
            {"teacher_id": teacher_id, "course_id_canvas": course_id},
        )

        students = []
        for student_data in data.get("students") or []:
            try:
                students.append(Student.from_api_response(student_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed student data: {e}")
                continue

        logger.info(f"Found {len(students)} students in course {course_id}")
        return students

    def get_submissions(self, teacher_id: str, course_id: int) -> list[StudentSubmission]:
        """Fetch per-student submission summaries for a course."""
        logger.info(f"Fetching submissions for course {course_id}")

        data = self._get_object(
            self.SUBMISSIONS_ENDPOINT,
            {"teacher_id": teacher_id, "course_id_canvas": course_id},
        )

        submissions = []
        for submission_data in data.get("students") or []:
            try:
                submissions.append(StudentSubmission.from_api_response(submission_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed submission data: {e}")
                continue

        logger.debug(f"Found {len(submissions)} submission records")
        return submissions

    def get_assignments(self, teacher_id: str, course_id: int) -> list[Assignment]:
        """Fetch assignments for a course, in backend order."""
        logger.info(f"Fetching assignments for course {course_id}")

        data = self._get_object(
            self.ASSIGNMENTS_ENDPOINT,
            {"teacher_id": teacher_id, "course_id_canvas": course_id},
        )

        assignments = []
        for assignment_data in data.get("assignments") or []:
            try:
                assignments.append(Assignment.from_api_response(assignment_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed assignment data: {e}")
                continue

        logger.debug(f"Found {len(assignments)} assignments")
        return assignments

    def get_token_status(self, teacher_id: str) -> TokenStatus:
        """
        Fetch whether a Canvas token is stored for the teacher.

        Raises:
            GatewayError: If the backend does not answer with status "ok"
        """
        data = self._get_object(self.TOKEN_STATUS_ENDPOINT, {"teacher_id": teacher_id})

        if data.get("status") != "ok":
            raise GatewayError("Failed to fetch token status", response=data)

        return TokenStatus(has_token=bool(data.get("hasToken")), last4=data.get("last4"))

    def save_token(self, teacher_id: str, canvas_token: str) -> TokenStatus:
        """
        Store a Canvas access token with the backend.

        Returns:
            The new TokenStatus with the token's last four characters

        Raises:
            GatewayError: If the backend does not answer with status "ok"
        """
        logger.info("Saving Canvas token")

        data = self._post_object(
            self.SAVE_TOKEN_ENDPOINT,
            {"teacher_id": teacher_id, "canvas_token": canvas_token},
        )

        if data.get("status") != "ok":
            raise GatewayError(data.get("message") or "Failed to save token", response=data)

        return TokenStatus(has_token=True, last4=data.get("last4"))

    def generate_contact_draft(self, payload: dict) -> Draft:
        """Ask the backend to draft an email to one student."""
        logger.info(f"Generating contact draft for student {payload.get('student_canvas_id')}")
        return Draft.from_api_response(self._post_object(self.CONTACT_DRAFT_ENDPOINT, payload))

    def send_contact_email(self, payload: dict) -> str:
        """Send a (possibly edited) email to one student. Returns the backend status."""
        logger.info(f"Sending email to student {payload.get('student_canvas_id')}")
        data = self._post_object(self.CONTACT_SEND_ENDPOINT, payload)
        return str(data.get("status", ""))

    def generate_reminder_draft(self, payload: dict) -> Draft:
        """Ask the backend to draft an assignment reminder."""
        assignment = payload.get("assignment") or {}
        logger.info(f"Generating reminder draft for assignment {assignment.get('assignment_id')}")
        return Draft.from_api_response(self._post_object(self.REMINDER_DRAFT_ENDPOINT, payload))

    def send_reminder(self, payload: dict) -> str:
        """Send a reminder; the backend fans it out to eligible students."""
        logger.info(f"Sending reminder to {len(payload.get('students') or [])} students")
        data = self._post_object(self.REMINDER_SEND_ENDPOINT, payload)
        return str(data.get("status", ""))

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
        logger.debug("Dashboard gateway session closed")

    def __enter__(self) -> "DashboardGateway":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
