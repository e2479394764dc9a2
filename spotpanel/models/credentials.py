"""Access/refresh token state."""
from dataclasses import dataclass


@dataclass
class CredentialState:
    """Current bearer token, the long-lived refresh token, and when the bearer token stops being usable."""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: float = 0.0  # epoch seconds, safety margin already subtracted
