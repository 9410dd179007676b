"""
Course list controller.

Fetches the teacher's courses and reconciles stale backend data by
triggering a one-shot sync followed by a re-fetch.
"""

import logging
import time
from typing import Callable, Optional

from ..formatting import format_sync_time
from ..gateway.client import DashboardGateway, GatewayError
from ..gateway.models import Course, CoursesResult
from ..notifications import Notifier
from ..session.models import Identity

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Couldn't load courses. Please try Refresh."


class CourseSyncController:
    """
    Holds the course list view state.

    Core rules:
    - A stale result triggers at most one sync + re-fetch per load
    - Manual refresh always syncs, but never overlaps another refresh
    - Failures keep the previously displayed courses

    Each load is tagged with a generation; responses that arrive for a
    superseded generation are discarded.

    Usage:
        controller = CourseSyncController(gateway, identity, notifier)
        controller.load()
        for course in controller.courses:
            print(course.name)
    """

    def __init__(
        self,
        gateway: DashboardGateway,
        identity: Optional[Identity],
        notifier: Notifier,
        settle_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the controller.

        Args:
            gateway: Backend gateway
            identity: Signed-in teacher, None when signed out
            notifier: Sink for transient notifications
            settle_delay: Seconds to wait between triggering a sync and re-fetching
            sleep: Sleep function, replaceable in tests
        """
        self.gateway = gateway
        self.identity = identity
        self.notifier = notifier
        self.settle_delay = settle_delay
        self._sleep = sleep

        self.courses: tuple[Course, ...] = ()
        self.last_synced_at: Optional[str] = None
        self.is_stale = False
        self.is_loading = True
        self.is_refreshing = False
        self.error: Optional[str] = None

        self._generation = 0

    @property
    def status_badge(self) -> str:
        return "Needs refresh" if self.is_stale else "Up to date"

    @property
    def last_updated_text(self) -> Optional[str]:
        if not self.last_synced_at:
            return None
        return format_sync_time(self.last_synced_at)

    @property
    def can_refresh(self) -> bool:
        return self.identity is not None and not self.is_refreshing

    def load(self) -> tuple[Course, ...]:
        """
        Fetch the course list, syncing once if the backend reports it stale.

        Returns:
            The courses now displayed
        """
        if self.identity is None:
            self.notifier.error("Error", "You must be logged in to view courses")
            return self.courses

        self._generation += 1
        generation = self._generation

        result = self._fetch(generation)
        if generation == self._generation:
            self.is_loading = False

        if result is not None and result.stale:
            logger.info("Course data is stale, syncing with Canvas")
            self._sync(generation)

        return self.courses

    def refresh(self) -> bool:
        """
        Sync with Canvas and re-fetch, regardless of staleness.

        Returns:
            True if the refreshed list was applied
        """
        if self.identity is None:
            self.notifier.error("Error", "You must be logged in to refresh courses")
            return False

        if self.is_refreshing:
            logger.debug("Refresh already in progress, ignoring")
            return False

        return self._sync(self._generation)

    def dispose(self) -> None:
        """Discard any responses still in flight for this view."""
        self._generation += 1

    def _fetch(self, generation: int, show_toast: bool = False) -> Optional[CoursesResult]:
        try:
            result = self.gateway.get_courses(self.identity.id)
        except GatewayError as e:
            if generation != self._generation:
                return None
            logger.error(f"Failed to fetch courses: {e}")
            self.error = LOAD_ERROR_MESSAGE
            self.notifier.error("Error", "Failed to fetch courses.")
            return None

        if generation != self._generation:
            logger.debug("Discarding courses response for a superseded load")
            return None

        self.courses = result.courses
        self.last_synced_at = result.last_synced_at
        self.is_stale = result.stale
        self.error = None

        if show_toast and not result.stale:
            self.notifier.success("Courses updated", "Your course list has been refreshed.")

        return result

    def _sync(self, generation: int) -> bool:
        self.is_refreshing = True
        try:
            self.gateway.trigger_sync(self.identity.id)
            self._sleep(self.settle_delay)
            return self._fetch(generation, show_toast=True) is not None
        except GatewayError as e:
            logger.error(f"Sync error: {e}")
            if generation == self._generation:
                self.error = LOAD_ERROR_MESSAGE
                self.notifier.error("Error", "Couldn't refresh courses right now. Please try again.")
            return False
        finally:
            self.is_refreshing = False
