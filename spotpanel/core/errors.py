"""Error taxonomy for the credential gate, the playback client and the command surface."""
from typing import Optional


class SpotpanelError(Exception):
    """Base class for errors raised by spotpanel."""


class TokenRefreshError(SpotpanelError):
    """The token endpoint was unreachable or rejected the refresh token.

    Non-fatal: the previous (possibly expired) access token stays in place.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class PlaybackClientError(SpotpanelError):
    """A Spotify Web API call failed. Never retried."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def unauthorized(self) -> bool:
        return self.status == 401


class OutOfRangeError(SpotpanelError):
    """Queue index outside the queue. Queue operations treat this as a no-op instead of raising."""


class UnknownCommandError(SpotpanelError):
    """No handler is registered for the command name."""
