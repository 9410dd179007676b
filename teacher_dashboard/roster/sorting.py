"""
Roster ordering.

Sorting never mutates the source collections; every function returns a
new list.
"""

import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence

from ..gateway.models import Assignment, Student

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SortField(Enum):
    NAME = "name"
    LAST_ACTIVITY = "last_activity"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortState:
    """
    Current roster sort.

    Toggling the active field flips its direction; choosing another field
    starts it ascending.
    """
    field: SortField = SortField.NAME
    direction: SortDirection = SortDirection.ASC

    def toggle(self, field: SortField) -> "SortState":
        if field is self.field:
            flipped = SortDirection.DESC if self.direction is SortDirection.ASC else SortDirection.ASC
            return SortState(field, flipped)
        return SortState(field, SortDirection.ASC)


def collation_key(text: str) -> str:
    """Case- and accent-insensitive key approximating locale collation."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def _timestamp(dt: datetime) -> float:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH).total_seconds()


def activity_key(student: Student) -> float:
    """Last activity as epoch seconds; never-active students count as epoch zero."""
    last_activity = student.last_activity
    return _timestamp(last_activity) if last_activity is not None else 0.0


def sort_students(students: Iterable[Student], state: SortState) -> list[Student]:
    """Return students ordered by ``state``; ties keep their fetch order."""
    if state.field is SortField.NAME:
        key = lambda s: collation_key(s.name)
    else:
        key = activity_key
    return sorted(students, key=key, reverse=state.direction is SortDirection.DESC)


def sort_assignments(assignments: Sequence[Assignment]) -> list[Assignment]:
    """
    Order assignments by due date, earliest first.

    Assignments without a due date come after all dated ones and keep
    their fetch order.
    """
    dated = [a for a in assignments if a.due is not None]
    undated = [a for a in assignments if a.due is None]
    return sorted(dated, key=lambda a: _timestamp(a.due)) + undated
