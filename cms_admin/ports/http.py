from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class ParsedResponse:
    """A 2xx response with its decoded JSON body."""

    status_code: int
    body: Any


class TokenSource(Protocol):
    """Read-only view of the current access token."""

    @property
    def access_token(self) -> str | None: ...


class HttpPort(Protocol):
    """Outbound REST calls relative to the configured base URL."""

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> ParsedResponse:
        """
        Perform a request and return the decoded body.

        Raises:
            NetworkError: no response was received
            HttpError: non-2xx status or undecodable body
        """
        ...
