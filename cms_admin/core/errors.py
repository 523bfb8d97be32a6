"""
Error taxonomy for the admin client.

Every failure that crosses the HTTP boundary is mapped onto one of these
types. Stores turn them into display strings with ``display_message``.
"""

from __future__ import annotations

MISSING_TOKEN_MESSAGE = "Access token is missing. Please log in again."


class AdminClientError(Exception):
    """Base class for admin client errors."""


class NetworkError(AdminClientError):
    """Raised when no usable response was received (connection failure or undecodable encoding)."""

    def __init__(self, message: str = "Network error") -> None:
        self.message = message
        super().__init__(message)


class HttpError(AdminClientError):
    """Raised when the server answered with a non-2xx status or a failure envelope."""

    def __init__(self, status: int, server_message: str | None = None) -> None:
        self.status = status
        self.server_message = server_message
        super().__init__(f"HTTP {status}: {server_message or 'no message'}")

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class MissingCredentials(AdminClientError):
    """Raised before any network I/O when no access token is available."""

    def __init__(self) -> None:
        super().__init__(MISSING_TOKEN_MESSAGE)


def display_message(exc: BaseException, fallback: str) -> str:
    """
    Normalize an error into a string fit for the UI.

    Server-provided messages win; anything else falls back to the
    per-operation message supplied by the caller.
    """
    if isinstance(exc, HttpError) and exc.server_message:
        return exc.server_message
    if isinstance(exc, MissingCredentials):
        return MISSING_TOKEN_MESSAGE
    return fallback
