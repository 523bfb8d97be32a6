"""
Users component - admin user account store.
"""

from .component import UserStore

__all__ = ["UserStore"]
