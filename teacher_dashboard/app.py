"""
Dashboard application wiring.

Owns the session provider and backend gateway, follows identity changes,
and builds view-models bound to the current identity.
"""

import logging
from typing import Optional

from config.settings import Settings

from .courses.controller import CourseSyncController
from .gateway.client import DashboardGateway
from .notifications import Notifier
from .profile.view_model import ProfileViewModel
from .roster.view_model import RosterViewModel
from .session.models import Identity
from .session.provider import SessionError, SessionProvider, SupabaseSessionProvider

logger = logging.getLogger(__name__)


class Dashboard:
    """
    Entry point for the dashboard views.

    The identity is read once from the session provider and then kept up to
    date through its change subscription. Views created before a sign-out
    are disposed so late responses cannot repopulate them.

    Usage:
        with Dashboard.from_settings(settings) as dashboard:
            courses = dashboard.courses()
            courses.load()
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        gateway: DashboardGateway,
        notifier: Optional[Notifier] = None,
        sync_settle_delay: float = 1.0,
    ):
        self.session_provider = session_provider
        self.gateway = gateway
        self.notifier = notifier or Notifier()
        self.sync_settle_delay = sync_settle_delay

        self.identity: Optional[Identity] = session_provider.get_current_user()
        self._views: dict = {}
        self._unsubscribe = session_provider.on_auth_change(self._on_auth_change)

    @classmethod
    def from_settings(cls, settings: Settings, notifier: Optional[Notifier] = None) -> "Dashboard":
        provider = SupabaseSessionProvider(
            url=settings.supabase.url,
            anon_key=settings.supabase.anon_key,
            session_path=settings.supabase.session_path,
        )
        gateway = DashboardGateway(
            base_url=settings.backend.webhook_url,
            timeout=settings.backend.timeout,
            max_retries=settings.backend.max_retries,
        )
        return cls(provider, gateway, notifier, settings.backend.sync_settle_delay)

    @property
    def header_text(self) -> Optional[str]:
        return self.identity.display_name if self.identity else None

    def _on_auth_change(self, event: str, identity: Optional[Identity]) -> None:
        logger.debug(f"Auth change: {event}")
        if identity != self.identity:
            self._dispose_views()
        self.identity = identity

    def _activate(self, kind: str, view):
        previous = self._views.pop(kind, None)
        if previous is not None:
            previous.dispose()
        self._views[kind] = view
        return view

    def _dispose_views(self) -> None:
        for view in self._views.values():
            view.dispose()
        self._views.clear()

    def courses(self) -> CourseSyncController:
        """Open the course list, leaving the previous one."""
        controller = CourseSyncController(
            self.gateway,
            self.identity,
            self.notifier,
            settle_delay=self.sync_settle_delay,
        )
        return self._activate("courses", controller)

    def roster(self, course_id: int) -> RosterViewModel:
        """Open a course roster, leaving the previously open roster."""
        return self._activate("roster", RosterViewModel(self.gateway, self.identity, course_id, self.notifier))

    def profile(self) -> ProfileViewModel:
        return ProfileViewModel(self.gateway, self.identity, self.notifier)

    def sign_out(self) -> None:
        try:
            self.session_provider.sign_out()
        except SessionError as e:
            self.notifier.error("Error", str(e))
            raise
        self.notifier.success("Success", "You've been logged out successfully.")

    def close(self) -> None:
        self._unsubscribe()
        self._dispose_views()
        self.gateway.close()
        close = getattr(self.session_provider, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "Dashboard":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
