"""
Auth component - session store and login/profile/logout transitions.
"""

from .component import (
    INVALID_CREDENTIALS_MESSAGE,
    LOGIN_FAILED_MESSAGE,
    LOGIN_PATH,
    MISSING_TOKENS_MESSAGE,
    PROFILE_FAILED_MESSAGE,
    PROFILE_PATH,
    SessionStore,
)
from .models import AuthOutput, LoginInput, LoginPayload

__all__ = [
    # Store
    "SessionStore",
    # Models
    "AuthOutput",
    "LoginInput",
    "LoginPayload",
    # Constants
    "LOGIN_PATH",
    "PROFILE_PATH",
    "INVALID_CREDENTIALS_MESSAGE",
    "LOGIN_FAILED_MESSAGE",
    "MISSING_TOKENS_MESSAGE",
    "PROFILE_FAILED_MESSAGE",
]
