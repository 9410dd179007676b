"""Teacher session module."""

from .models import Identity
from .provider import (
    AuthenticationError,
    FileSessionStorage,
    SessionError,
    SessionProvider,
    SupabaseSessionProvider,
)

__all__ = [
    "AuthenticationError",
    "FileSessionStorage",
    "Identity",
    "SessionError",
    "SessionProvider",
    "SupabaseSessionProvider",
]
