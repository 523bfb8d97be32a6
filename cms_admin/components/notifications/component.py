"""
Notification component - transient in-memory feed.

Independent of network state: entity stores and the session store post
feedback here, the UI reads it. Nothing is persisted; the feed resets when
the process restarts.
"""

from __future__ import annotations

import logging

from cms_admin.adapters.clock import SystemClock
from cms_admin.core.entities import NOTIFICATION_KINDS, Notification, NotificationKind
from cms_admin.ports.clock import ClockPort

logger = logging.getLogger(__name__)


class NotificationStore:
    """Newest-first notification log."""

    def __init__(self, clock: ClockPort | None = None) -> None:
        self._clock = clock or SystemClock()
        self._notifications: list[Notification] = []

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def add(
        self,
        message: str,
        kind: NotificationKind = "info",
        link: str | None = None,
    ) -> str:
        """Prepend a notification and return its id."""
        if kind not in NOTIFICATION_KINDS:
            raise ValueError(f"Unknown notification kind: {kind}")

        notification = Notification(
            message=message,
            kind=kind,
            created_at=self._clock.now_utc(),
            link=link,
        )
        self._notifications = [notification, *self._notifications]
        logger.debug(f"Notification [{kind}] {message}")
        return notification.id

    def success(self, message: str, link: str | None = None) -> str:
        return self.add(message, "success", link)

    def info(self, message: str, link: str | None = None) -> str:
        return self.add(message, "info", link)

    def error(self, message: str, link: str | None = None) -> str:
        return self.add(message, "error", link)

    def mark_read(self, notification_id: str) -> None:
        self._notifications = [
            n.model_copy(update={"read": True}) if n.id == notification_id else n
            for n in self._notifications
        ]

    def mark_all_read(self) -> None:
        self._notifications = [n.model_copy(update={"read": True}) for n in self._notifications]

    def remove(self, notification_id: str) -> None:
        self._notifications = [n for n in self._notifications if n.id != notification_id]

    def clear(self) -> None:
        self._notifications = []

    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.read)
