"""Course roster module."""

from .sorting import SortDirection, SortField, SortState
from .view_model import RosterViewModel

__all__ = ["RosterViewModel", "SortDirection", "SortField", "SortState"]
