"""
Transient user notifications.

The dashboard's equivalent of toast messages: every notification is logged
and kept for the front-end to display.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Variant(Enum):
    """Notification styles."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    """A single transient message."""
    title: str
    description: str = ""
    variant: Variant = Variant.DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant is Variant.DESTRUCTIVE

    def __str__(self) -> str:
        if self.description:
            return f"{self.title}: {self.description}"
        return self.title


class Notifier:
    """
    Collects notifications and forwards them to an optional sink.

    Usage:
        notifier = Notifier(sink=print)
        notifier.error("Error", "Failed to fetch courses.")
    """

    def __init__(self, sink: Optional[Callable[[Notification], None]] = None):
        self._sink = sink
        self._history: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self._history.append(notification)
        if notification.is_error:
            logger.warning(str(notification))
        else:
            logger.info(str(notification))
        if self._sink is not None:
            self._sink(notification)

    def success(self, title: str, description: str = "") -> None:
        self.notify(Notification(title, description))

    def error(self, title: str, description: str = "") -> None:
        self.notify(Notification(title, description, Variant.DESTRUCTIVE))

    @property
    def history(self) -> list[Notification]:
        return self._history.copy()

    @property
    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()
