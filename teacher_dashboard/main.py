#!/usr/bin/env python3
"""
Canvas Teacher Dashboard - Command Line Entry Point

Monitor student activity in your Canvas courses and send AI-drafted emails
and reminders through the dashboard backend.

Usage:
    teacher-dashboard login                   # Sign in
    teacher-dashboard courses --refresh       # Sync and list courses
    teacher-dashboard course 1234 --sort last_activity
    teacher-dashboard remind 1234 5678        # Draft and send a reminder

Environment Variables Required:
    DASHBOARD_WEBHOOK_URL   - Backend webhook root (e.g., https://host/webhook/canvas)
    SUPABASE_URL            - Session provider project URL
    SUPABASE_ANON_KEY       - Session provider public API key
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Optional

from config.settings import ConfigurationError, load_settings
from teacher_dashboard.app import Dashboard
from teacher_dashboard.compose.workflow import ComposeSession, ContactStudentCompose, ReminderCompose
from teacher_dashboard.gateway.client import GatewayError
from teacher_dashboard.notifications import Notification, Notifier
from teacher_dashboard.roster.sorting import SortDirection, SortField, SortState
from teacher_dashboard.session.provider import AuthenticationError, SessionError, SupabaseSessionProvider

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Canvas teacher dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    parser.add_argument(
        "--env",
        type=Path,
        help="Path to .env file (default: .env in current directory)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in to the dashboard")
    login.add_argument("--email", help="Account email (prompted if omitted)")

    commands.add_parser("logout", help="Sign out and clear the cached session")
    commands.add_parser("profile", help="Show profile and Canvas token status")
    commands.add_parser("connect-token", help="Connect or update your Canvas access token")

    courses = commands.add_parser("courses", help="List your courses")
    courses.add_argument("--refresh", action="store_true", help="Sync with Canvas before listing")

    course = commands.add_parser("course", help="Show students in a course")
    course.add_argument("course_id", type=int)
    course.add_argument(
        "--sort",
        choices=[f.value for f in SortField],
        default=SortField.NAME.value,
        help="Sort students by this field",
    )
    course.add_argument("--desc", action="store_true", help="Sort descending")

    assignments = commands.add_parser("assignments", help="Show assignments in a course")
    assignments.add_argument("course_id", type=int)

    contact = commands.add_parser("contact", help="Email one student")
    contact.add_argument("course_id", type=int)
    contact.add_argument("student_id", type=int)

    remind = commands.add_parser("remind", help="Send an assignment reminder")
    remind.add_argument("course_id", type=int)
    remind.add_argument("assignment_id", type=int)

    return parser.parse_args(argv)


def print_notification(notification: Notification) -> None:
    prefix = "!" if notification.is_error else "*"
    print(f"{prefix} {notification}")


def show_courses(dashboard: Dashboard, refresh: bool) -> int:
    controller = dashboard.courses()
    controller.load()
    if refresh:
        controller.refresh()

    print("=" * 50)
    print(f"Courses Dashboard [{controller.status_badge}]")
    if controller.last_updated_text:
        print(f"Last updated: {controller.last_updated_text}")
    print("=" * 50)

    if controller.error:
        print(controller.error)

    if not controller.courses:
        print("No courses yet. Try refreshing to pull your Canvas courses.")
    for c in controller.courses:
        print(f"{c.id:>10}  {c.name}")

    return 1 if controller.error else 0


def show_roster(dashboard: Dashboard, course_id: int, sort: str, descending: bool) -> int:
    roster = dashboard.roster(course_id)
    if not roster.load():
        return 1

    roster.sort = SortState(SortField(sort), SortDirection.DESC if descending else SortDirection.ASC)

    rows = roster.rows()
    print("=" * 50)
    print(f"{roster.display_course_name} - Students ({len(rows)})")
    print("=" * 50)

    if not rows:
        print("No students found. This course doesn't have any enrolled students yet.")

    for row in rows:
        print(f"{row.name} [{row.student_canvas_id}]" + (f" <{row.email}>" if row.email else ""))
        activity = row.last_activity
        if row.activity_badge:
            activity += f"  ({row.activity_badge.text})"
        print(f"    Last activity: {activity}")
        print(f"    Attendance:    {row.attendance.text}")
        if row.assignments.loading:
            print(f"    Assignments:   {row.assignments.placeholder}")
        else:
            print(f"    Assignments:   {row.assignments.status.text}")
            for title in row.assignments.missing_titles:
                print(f"      - {title}")
            for line in row.assignments.score_lines:
                print(f"    {line}")
            if row.assignments.grade_url:
                print(f"    Grade details: {row.assignments.grade_url}")
        contact = row.contact.label if row.contact.enabled else f"{row.contact.label} - {row.contact.note}"
        print(f"    Contact:       {contact}")

    return 0


def show_assignments(dashboard: Dashboard, course_id: int) -> int:
    roster = dashboard.roster(course_id)
    if not roster.load():
        return 1

    print("=" * 50)
    print(f"{roster.display_course_name} - Assignments")
    print("=" * 50)

    rows = roster.assignment_rows()
    if not rows:
        print("No assignments found.")
    for row in rows:
        assignment = row.assignment
        badge_text = f" [{row.due.text}]" if row.due else ""
        if not row.can_remind:
            badge_text += " (reminders closed)"
        print(f"{assignment.assignment_id:>10}  {assignment.title}{badge_text}")
        print(
            f"{'':>12}Submitted {assignment.submitted_count}/{assignment.total_students}, "
            f"pending {assignment.pending_count}"
        )

    return 0


def _read_body() -> str:
    print("Enter the new body. Finish with a line containing only '.'")
    lines = []
    while True:
        line = input()
        if line == ".":
            break
        lines.append(line)
    return "\n".join(lines)


def run_compose(session: ComposeSession) -> int:
    """Drive a compose session interactively until it is sent or cancelled."""
    print("=" * 50)
    print(session.title)
    print(session.description)
    print("=" * 50)

    while session.is_open:
        if session.error:
            print(f"! {session.error}")
        print(f"Subject: {session.subject}")
        print("Body:")
        print(session.body or "(empty)")
        print("-" * 50)

        options = "[e]dit subject, edit [b]ody, [r]egenerate, [c]ancel"
        if session.can_send:
            options = "[s]end, " + options
        choice = input(f"{options}: ").strip().lower()

        if choice == "s" and session.can_send:
            if session.send():
                return 0
        elif choice == "e":
            session.edit(subject=input("Subject: "))
        elif choice == "b":
            session.edit(body=_read_body())
        elif choice == "r":
            print(session.generating_text)
            session.regenerate()
        elif choice == "c":
            session.close()
            print("Cancelled")
            return 0

    return 0


def compose_contact(dashboard: Dashboard, course_id: int, student_id: int) -> int:
    roster = dashboard.roster(course_id)
    if not roster.load():
        return 1
    try:
        print(ContactStudentCompose.generating_text)
        session = roster.open_contact(student_id)
    except (KeyError, ValueError) as e:
        logger.error(str(e))
        return 1
    return run_compose(session)


def compose_reminder(dashboard: Dashboard, course_id: int, assignment_id: int) -> int:
    roster = dashboard.roster(course_id)
    if not roster.load():
        return 1
    try:
        print(ReminderCompose.generating_text)
        session = roster.open_reminder(assignment_id)
    except (KeyError, ValueError) as e:
        logger.error(str(e))
        return 1
    return run_compose(session)


def show_profile(dashboard: Dashboard) -> int:
    identity = dashboard.identity
    profile = dashboard.profile()
    profile.load()

    print("=" * 50)
    print("Teacher Profile")
    print("=" * 50)
    print(f"First name: {identity.first_name}")
    print(f"Last name:  {identity.last_name}")
    print(f"Email:      {identity.email}")
    print("-" * 50)
    print(f"Canvas:     {profile.connection_badge}")
    if profile.masked_token:
        print(f"Token:      {profile.masked_token}")
    print(f"Run 'teacher-dashboard connect-token' to {profile.action_label.lower()}")
    return 0


def connect_token(dashboard: Dashboard) -> int:
    profile = dashboard.profile()
    profile.load()

    print(profile.dialog_title)
    token = getpass.getpass("Canvas access token: ")
    if not profile.can_save(token):
        logger.error("A token is required")
        return 1

    if not profile.save_token(token):
        return 1

    print(f"{profile.connection_badge}: {profile.masked_token or ''}")
    return 0


def login(provider: SupabaseSessionProvider, email: Optional[str]) -> int:
    email = email or input("Email: ").strip()
    password = getpass.getpass("Password: ")
    try:
        identity = provider.sign_in_with_password(email, password)
    except AuthenticationError as e:
        logger.error(f"Login failed: {e}")
        return 1
    print(f"Signed in as {identity.display_name}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        settings = load_settings(env_file=args.env)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please check your .env file or environment variables")
        return 1

    if not args.verbose:
        logging.getLogger().setLevel(settings.log_level)

    dashboard = None
    try:
        dashboard = Dashboard.from_settings(settings, Notifier(sink=print_notification))

        if args.command == "login":
            return login(dashboard.session_provider, args.email)

        if dashboard.identity is None:
            dashboard.notifier.error("Error", "You must be logged in. Run 'teacher-dashboard login'.")
            return 1

        if args.command == "logout":
            dashboard.sign_out()
            return 0
        if args.command == "profile":
            return show_profile(dashboard)
        if args.command == "connect-token":
            return connect_token(dashboard)
        if args.command == "courses":
            return show_courses(dashboard, args.refresh)
        if args.command == "course":
            return show_roster(dashboard, args.course_id, args.sort, args.desc)
        if args.command == "assignments":
            return show_assignments(dashboard, args.course_id)
        if args.command == "contact":
            return compose_contact(dashboard, args.course_id, args.student_id)
        if args.command == "remind":
            return compose_reminder(dashboard, args.course_id, args.assignment_id)

        logger.error(f"Unknown command: {args.command}")
        return 1

    except (GatewayError, SessionError) as e:
        logger.error(f"Dashboard error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
    finally:
        if dashboard:
            dashboard.close()


if __name__ == "__main__":
    sys.exit(main())
