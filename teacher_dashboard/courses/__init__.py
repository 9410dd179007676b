"""Course list module."""

from .controller import CourseSyncController

__all__ = ["CourseSyncController"]
