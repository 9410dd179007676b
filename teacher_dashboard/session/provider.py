"""
Session provider for teacher authentication.

Wraps the Supabase client's auth API and persists its session in a JSON
file so the CLI stays signed in between runs. Access and refresh tokens are
never logged.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from supabase import AuthApiError, AuthError, ClientOptions, create_client

from .models import Identity

logger = logging.getLogger(__name__)

AuthCallback = Callable[[str, Optional[Identity]], None]

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"


class SessionError(Exception):
    """Raised when the session provider cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(SessionError):
    """Raised when credentials are rejected."""
    pass


class SessionProvider(ABC):
    """
    Source of the current teacher identity.

    Subclasses must call ``_notify`` whenever the identity changes.
    """

    def __init__(self):
        self._listeners: list[AuthCallback] = []

    @abstractmethod
    def get_current_user(self) -> Optional[Identity]:
        """Return the signed-in teacher, or None."""

    @abstractmethod
    def sign_out(self) -> None:
        """End the current session."""

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        """
        Subscribe to identity changes.

        Returns:
            A function that removes the subscription
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, event: str, identity: Optional[Identity]) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, identity)
            except Exception as e:
                logger.error(f"Auth change listener failed: {e}", exc_info=True)


class FileSessionStorage:
    """
    Key/value storage for the auth client, kept in one JSON file.

    The file is readable only by its owner and is deleted once empty.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session cache {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data))
        self.path.chmod(0o600)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        logger.debug("Session cache saved")

    def remove_item(self, key: str) -> None:
        data = self._read()
        data.pop(key, None)
        if data:
            self._write(data)
        else:
            self.clear()

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Session cache removed")


class SupabaseSessionProvider(SessionProvider):
    """
    Session provider backed by Supabase Auth.

    Features:
    - Email/password sign-in
    - Session persisted through FileSessionStorage
    - Expired sessions refreshed on the next identity lookup

    Usage:
        provider = SupabaseSessionProvider(url, anon_key, Path("data/session.json"))
        provider.sign_in_with_password("teacher@example.edu", password)
        identity = provider.get_current_user()
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        session_path: Optional[Path] = None,
        client=None,
    ):
        """
        Initialize the provider.

        Args:
            url: Supabase project URL
            anon_key: Project's public API key (never logged)
            session_path: Where to persist the session between runs
            client: Prebuilt Supabase client; created from url/anon_key if omitted
        """
        super().__init__()
        self.url = url.rstrip("/")
        self.storage = FileSessionStorage(session_path) if session_path else None

        if client is None:
            options = {"auto_refresh_token": False, "persist_session": True}
            if self.storage is not None:
                options["storage"] = self.storage
            client = create_client(self.url, anon_key, ClientOptions(**options))
        self._client = client
        self._subscription = self._client.auth.on_auth_state_change(self._on_state_change)

    def __repr__(self) -> str:
        return f"SupabaseSessionProvider(url='{self.url}')"

    def _on_state_change(self, event, session) -> None:
        user = getattr(session, "user", None)
        identity = Identity.from_auth_user(user) if user is not None else None
        logger.debug(f"Auth state change: {event}")
        self._notify(str(event), identity)

    def sign_in_with_password(self, email: str, password: str) -> Identity:
        """
        Sign in and persist the resulting session.

        Raises:
            AuthenticationError: If the credentials are rejected
            SessionError: If the provider cannot be reached
        """
        logger.info("Signing in...")
        try:
            response = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthApiError as e:
            raise AuthenticationError(e.message or "Invalid credentials", status_code=e.status) from e
        except AuthError as e:
            raise SessionError(f"Session provider request failed: {e}") from e

        if response.user is None:
            raise AuthenticationError("Invalid credentials")

        identity = Identity.from_auth_user(response.user)
        logger.info(f"Signed in as {identity.email}")
        return identity

    def get_current_user(self) -> Optional[Identity]:
        """
        Return the signed-in teacher, refreshing an expired session first.

        A refresh token the provider rejects ends the session. A provider
        that cannot be reached leaves the stored session for the next run.

        Returns:
            Identity, or None when signed out or the session cannot be renewed
        """
        try:
            session = self._client.auth.get_session()
        except AuthApiError as e:
            logger.warning(f"Stored session rejected, signing out: {e.message}")
            self._clear_local_session()
            return None
        except AuthError as e:
            logger.error(f"Could not refresh session: {e}")
            return None

        if session is None or session.user is None:
            return None
        return Identity.from_auth_user(session.user)

    def sign_out(self) -> None:
        """Revoke the session with the provider and drop the stored session."""
        try:
            self._client.auth.sign_out()
        except AuthError as e:
            logger.warning(f"Logout request failed, clearing local session anyway: {e}")
            self._clear_local_session()
            return
        logger.info("Signed out")

    def _clear_local_session(self) -> None:
        try:
            self._client.auth.sign_out({"scope": "local"})
        except AuthError as e:
            logger.debug(f"Local sign-out failed: {e}")
            if self.storage is not None:
                self.storage.clear()
            self._notify(SIGNED_OUT, None)

    def close(self) -> None:
        """Stop listening to the auth client."""
        self._subscription.unsubscribe()
