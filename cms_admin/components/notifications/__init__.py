"""
Notification component - in-memory feedback feed for the admin UI.
"""

from .component import NotificationStore

__all__ = ["NotificationStore"]
