from typing import Protocol

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"


class TokenStoragePort(Protocol):
    """Durable client-local key/value storage for credentials."""

    def get(self, key: str) -> str | None:
        """Get the value stored under key."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove key; missing keys are ignored."""
        ...
