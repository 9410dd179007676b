"""Workflow backend gateway module."""

from .client import DashboardGateway, GatewayError
from .models import Assignment, Course, CoursesResult, Draft, MergedStudent, Student, StudentSubmission, TokenStatus

__all__ = [
    "DashboardGateway",
    "GatewayError",
    "Assignment",
    "Course",
    "CoursesResult",
    "Draft",
    "MergedStudent",
    "Student",
    "StudentSubmission",
    "TokenStatus",
]
