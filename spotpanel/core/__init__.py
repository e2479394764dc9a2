"""Core services: credentials, Spotify client, local queue, panel commands."""
from spotpanel.core.controller import PanelController
from spotpanel.core.credentials import CredentialManager
from spotpanel.core.queue_service import QueueService
from spotpanel.core.spotify_client import PlaybackClient

__all__ = ["CredentialManager", "PanelController", "PlaybackClient", "QueueService"]
