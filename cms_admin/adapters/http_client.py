"""
HTTP client adapter (httpx).

Implements HttpPort. Wraps every call with the configured base URL and the
bearer token of the current session, and maps failures onto the client's
error taxonomy:

- no usable response (connect error, timeout,
  bad content-encoding, redirect loop)       -> NetworkError
- non-2xx                                    -> HttpError(status, server message)
- 2xx with an undecodable body               -> HttpError(status, "Invalid JSON response")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cms_admin.core.errors import HttpError, NetworkError
from cms_admin.ports.http import ParsedResponse, TokenSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
INVALID_JSON_MESSAGE = "Invalid JSON response"


def extract_server_message(body: Any) -> str | None:
    """Pull the human readable message out of an error envelope, if any."""
    if not isinstance(body, dict):
        return None
    for field in ("message", "msg"):
        value = body.get(field)
        if isinstance(value, str) and value.strip():
            return value
    return None


class HttpClient:
    """
    REST client bound to one base URL.

    The token source is only read, never written: the session store owns
    the token lifecycle.
    """

    def __init__(
        self,
        base_url: str,
        token_source: TokenSource | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            base_url: Root URL every request path is relative to
            token_source: Provider of the current bearer token
            timeout: Request timeout in seconds
            client: Pre-built httpx client (tests inject a TestClient here)
        """
        self.base_url = base_url.rstrip("/")
        self._token_source = token_source
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def bind_token_source(self, token_source: TokenSource) -> None:
        self._token_source = token_source

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_source.access_token if self._token_source else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> ParsedResponse:
        url = path.lstrip("/")
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug(f"{method} {url} params={query}")

        try:
            response = self._client.request(
                method,
                url,
                json=json,
                params=query or None,
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            logger.warning(f"{method} {url} failed without response: {e}")
            raise NetworkError(str(e) or "Network error") from e

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None
            decoded = False
        else:
            decoded = True

        if not response.is_success:
            message = extract_server_message(body) or (
                f"Request failed with status {response.status_code}"
            )
            logger.warning(f"{method} {url} -> {response.status_code}: {message}")
            raise HttpError(response.status_code, message)

        if not decoded:
            logger.warning(f"{method} {url} -> {response.status_code}: undecodable body")
            raise HttpError(response.status_code, INVALID_JSON_MESSAGE)

        return ParsedResponse(status_code=response.status_code, body=body)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
