"""
Session data models.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """
    The authenticated teacher.

    Immutable for the lifetime of a session. View-models receive it
    explicitly rather than looking it up.

    Attributes:
        id: Opaque teacher ID issued by the session provider
        email: Teacher email, used as the sender address
        first_name: From the provider's user metadata
        last_name: From the provider's user metadata
    """
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("Identity requires a teacher ID")

    @property
    def display_name(self) -> str:
        """Name shown in the header: first name, falling back to email."""
        return self.first_name or self.email

    @property
    def teacher_name(self) -> str:
        """Signature name used in drafted emails."""
        return f"{self.first_name} {self.last_name}".strip() or "Your Teacher"

    @classmethod
    def from_auth_user(cls, user) -> "Identity":
        """Create Identity from the auth client's User object."""
        metadata = user.user_metadata or {}
        return cls(
            id=str(user.id),
            email=user.email or "",
            first_name=metadata.get("first_name") or "",
            last_name=metadata.get("last_name") or "",
        )
