"""Compose-and-send module."""

from .workflow import ComposeSession, ComposeState, ContactStudentCompose, ReminderCompose

__all__ = ["ComposeSession", "ComposeState", "ContactStudentCompose", "ReminderCompose"]
