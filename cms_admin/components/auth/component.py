"""
Auth component - session and access-token lifecycle.

States: anonymous -> authenticating -> authenticated | auth_failed.

The session store is the only writer of the token storage; everything else
reads the token through the ``access_token`` property. Authentication is
fail-closed: the authenticated flag is only set by a successful profile
fetch, and any failure while checking credentials (including network
errors) clears the stored tokens. The one exception is a rejected login
attempted from an already confirmed session: that session stays as it was.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from cms_admin.components.notifications import NotificationStore
from cms_admin.core.entities import AuthStatus, Profile
from cms_admin.core.envelopes import LEGACY, EnvelopeFormat
from cms_admin.core.errors import AdminClientError, HttpError, NetworkError
from cms_admin.ports.http import HttpPort
from cms_admin.ports.storage import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TokenStoragePort

from .models import AuthOutput, LoginInput, LoginPayload

logger = logging.getLogger(__name__)

LOGIN_PATH = "v1/auth/login"
PROFILE_PATH = "v1/auth/me"

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
LOGIN_FAILED_MESSAGE = "Login failed"
MISSING_TOKENS_MESSAGE = "Missing tokens in response"
PROFILE_FAILED_MESSAGE = "Failed to load profile"


class SessionStore:
    """Owns the session: status, profile and the persisted tokens."""

    envelope: EnvelopeFormat = LEGACY

    def __init__(
        self,
        http: HttpPort,
        storage: TokenStoragePort,
        notifications: NotificationStore | None = None,
    ) -> None:
        self._http = http
        self._storage = storage
        self._notifications = notifications
        self._access_token = storage.get(ACCESS_TOKEN_KEY)
        self.status: AuthStatus = "anonymous"
        self.profile: Profile | None = None
        self.error: str | None = None
        self.loading = False

    # --- Read-only views ---

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def is_authenticated(self) -> bool:
        return (
            self.status == "authenticated"
            and self.profile is not None
            and bool(self._access_token)
        )

    # --- Token persistence ---

    def _store_tokens(self, access_token: str, refresh_token: str | None) -> None:
        self._storage.set(ACCESS_TOKEN_KEY, access_token)
        if refresh_token:
            self._storage.set(REFRESH_TOKEN_KEY, refresh_token)
        else:
            self._storage.delete(REFRESH_TOKEN_KEY)
        self._access_token = access_token

    def _clear_tokens(self) -> None:
        self._storage.delete(ACCESS_TOKEN_KEY)
        self._storage.delete(REFRESH_TOKEN_KEY)
        self._access_token = None

    # --- Transitions ---

    def login(self, email: str, password: str) -> AuthOutput:
        return self.run_login(LoginInput(email=email, password=password))

    def run_login(self, inp: LoginInput) -> AuthOutput:
        # A rejected re-login leaves a confirmed session in place
        keep_session = self.is_authenticated
        self.status = "authenticating"
        self.error = None
        self.loading = True
        try:
            try:
                response = self._http.request(
                    "POST", LOGIN_PATH, json={"email": inp.email, "password": inp.password}
                )
                envelope = self.envelope.unwrap(response.body, response.status_code)
            except NetworkError as e:
                logger.warning(f"Login request failed: {e}")
                return self._fail(LOGIN_FAILED_MESSAGE, keep_session=keep_session)
            except HttpError as e:
                return self._fail(
                    e.server_message or INVALID_CREDENTIALS_MESSAGE, keep_session=keep_session
                )

            try:
                payload = LoginPayload.model_validate(envelope.data or {})
            except ValidationError:
                payload = LoginPayload()
            if not payload.access_token:
                return self._fail(MISSING_TOKENS_MESSAGE, keep_session=keep_session)

            self._store_tokens(payload.access_token, payload.refresh_token)
            profile = self.fetch_profile()
            if profile is None:
                return self._fail(PROFILE_FAILED_MESSAGE)

            message = envelope.message or "Login successful"
            logger.info(f"Logged in as {profile.email or profile.id}")
            if self._notifications is not None:
                self._notifications.success(message)
            return AuthOutput(profile=profile, success=True, message=message)
        finally:
            self.loading = False

    def fetch_profile(self) -> Profile | None:
        """
        Confirm the stored token by loading the current profile.

        Returns the profile, or None after resetting to anonymous.
        """
        if not self._access_token:
            self._reset()
            return None

        self.loading = True
        try:
            response = self._http.request("GET", PROFILE_PATH)
            envelope = self.envelope.unwrap(response.body, response.status_code)
            if not isinstance(envelope.data, dict):
                raise HttpError(response.status_code, "Profile missing from response")
            profile = Profile.model_validate(envelope.data)
        except (AdminClientError, ValidationError) as e:
            logger.warning(f"Profile fetch failed, clearing credentials: {e}")
            self._clear_tokens()
            self._reset()
            return None
        finally:
            self.loading = False

        self.profile = profile
        self.status = "authenticated"
        self.error = None
        return profile

    def restore(self) -> bool:
        """Return True when a persisted token is still accepted."""
        return self.fetch_profile() is not None

    def logout(self) -> None:
        self._clear_tokens()
        self._reset()
        self.error = None
        logger.info("Logged out")

    # --- Helpers ---

    def _reset(self) -> None:
        self.status = "anonymous"
        self.profile = None

    def _fail(self, message: str, *, keep_session: bool = False) -> AuthOutput:
        if keep_session:
            self.status = "authenticated"
        else:
            self._clear_tokens()
            self.status = "auth_failed"
            self.profile = None
        self.error = message
        logger.warning(f"Authentication failed: {message}")
        if self._notifications is not None:
            self._notifications.error(message)
        return AuthOutput(success=False, error=message)
