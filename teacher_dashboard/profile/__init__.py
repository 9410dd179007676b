"""Teacher profile module."""

from .view_model import ProfileViewModel

__all__ = ["ProfileViewModel"]
