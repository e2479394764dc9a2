"""Access-token lifecycle: lazy load, just-in-time refresh, persisted expiry.

The safety margin is applied twice: once when computing ``expires_at`` after a
refresh and again in ``ensure_valid``. A token is therefore refreshed about ten
minutes before Spotify would actually reject it.
"""
import logging
import threading
import time
from typing import Any, Callable, Optional

import requests
from requests.auth import HTTPBasicAuth

from spotpanel.config import (
    REQUEST_TIMEOUT_SEC,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_SECRET,
    SPOTIFY_REFRESH_TOKEN,
    SPOTIFY_TOKEN_URL,
    TOKEN_SAFETY_MARGIN_SEC,
)
from spotpanel.core.errors import TokenRefreshError
from spotpanel.core.kv_store import KEY_ACCESS_TOKEN, KEY_TOKEN_EXPIRES_AT
from spotpanel.models.credentials import CredentialState

logger = logging.getLogger(__name__)


class CredentialManager:
    """Owns the access token and guarantees callers get one that is not about to expire."""

    def __init__(
        self,
        store,
        *,
        client_id: str = SPOTIFY_CLIENT_ID,
        client_secret: str = SPOTIFY_CLIENT_SECRET,
        refresh_token: str = SPOTIFY_REFRESH_TOKEN,
        token_url: str = SPOTIFY_TOKEN_URL,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._session = session or requests.Session()
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CredentialState(refresh_token=refresh_token)
        self.last_error: Optional[str] = None

    @property
    def state(self) -> CredentialState:
        return self._state

    @property
    def needs_refresh(self) -> bool:
        return self._clock() >= self._state.expires_at - TOKEN_SAFETY_MARGIN_SEC

    def initialize(self) -> None:
        """Load token and expiry from the store. Does not refresh; an expired token is refreshed on first use."""
        with self._lock:
            self._state.access_token = self._store.get(KEY_ACCESS_TOKEN, "") or ""
            try:
                self._state.expires_at = float(self._store.get(KEY_TOKEN_EXPIRES_AT, 0) or 0)
            except (TypeError, ValueError):
                self._state.expires_at = 0.0
        if self.needs_refresh:
            logger.info("Credentials: token missing or expired, will refresh on first use")

    def ensure_valid(self) -> str:
        """Return an access token, refreshing first if it is inside the safety window.

        A failed refresh is logged and recorded in ``last_error``; the stale token is
        returned so the caller proceeds and the Spotify call itself reports 401.
        """
        with self._lock:
            if self._clock() >= self._state.expires_at - TOKEN_SAFETY_MARGIN_SEC:
                try:
                    self._refresh_locked()
                except TokenRefreshError as e:
                    self.last_error = str(e)
                    logger.warning("Credentials: refresh failed, continuing with stale token: %s", e)
            return self._state.access_token

    def refresh(self) -> str:
        """Exchange the refresh token for a new access token. Raises TokenRefreshError."""
        with self._lock:
            try:
                return self._refresh_locked()
            except TokenRefreshError as e:
                self.last_error = str(e)
                raise

    def _refresh_locked(self) -> str:
        if not self._state.refresh_token:
            raise TokenRefreshError("No Spotify refresh token configured (SPOTIFY_REFRESH_TOKEN)")
        try:
            resp = self._session.post(
                self._token_url,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self._state.refresh_token,
                },
                auth=HTTPBasicAuth(self._client_id, self._client_secret),
                timeout=REQUEST_TIMEOUT_SEC,
            )
        except requests.RequestException as e:
            raise TokenRefreshError(f"Token endpoint unreachable: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise TokenRefreshError(
                f"Token endpoint returned HTTP {resp.status_code}", status=resp.status_code
            )
        try:
            payload = resp.json()
            access_token = payload["access_token"]
            expires_in = int(payload["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise TokenRefreshError(f"Malformed token response: {e}") from e

        issued_at = self._clock()
        expires_at = issued_at + (expires_in - TOKEN_SAFETY_MARGIN_SEC)
        self._state.access_token = access_token
        self._state.expires_at = expires_at
        try:
            self._store.set(KEY_ACCESS_TOKEN, access_token)
            self._store.set(KEY_TOKEN_EXPIRES_AT, expires_at)
        except OSError as e:
            # Token is valid in memory; it is refreshed again after a restart
            logger.warning("Credentials: could not persist refreshed token: %s", e)
        self.last_error = None
        logger.info("Credentials: refreshed access token (expires_in=%ss)", expires_in)
        return access_token

    def status(self) -> dict[str, Any]:
        with self._lock:
            return {
                "has_token": bool(self._state.access_token),
                "expires_at": self._state.expires_at,
                "needs_refresh": self.needs_refresh,
                "last_error": self.last_error,
            }
