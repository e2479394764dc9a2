"""Shared application state (injected into routes)."""
from typing import Optional

from spotpanel.config import STATE_PATH
from spotpanel.core.controller import PanelController
from spotpanel.core.credentials import CredentialManager
from spotpanel.core.kv_store import JsonStore
from spotpanel.core.queue_service import QueueService
from spotpanel.core.spotify_client import PlaybackClient


class AppState:
    """One instance of each component, wired together at startup."""

    def __init__(
        self,
        store: Optional[JsonStore] = None,
        *,
        credentials: Optional[CredentialManager] = None,
        playback_client: Optional[PlaybackClient] = None,
        settle_delay_sec: Optional[float] = None,
    ) -> None:
        self.store = store if store is not None else JsonStore(STATE_PATH)
        self.credentials = credentials or CredentialManager(self.store)
        self.playback_client = playback_client or PlaybackClient(self.credentials)
        self.queue_service = QueueService(self.store, self.playback_client)
        kwargs = {} if settle_delay_sec is None else {"settle_delay_sec": settle_delay_sec}
        self.controller = PanelController(
            self.playback_client, self.queue_service, self.credentials, **kwargs
        )

    def initialize(self) -> None:
        """Load persisted credentials and queue. Does not contact Spotify."""
        self.credentials.initialize()
        self.queue_service.load()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState()
    return _state
