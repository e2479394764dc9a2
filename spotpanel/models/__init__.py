"""Data models for credentials, queue entries, playback and devices."""
from spotpanel.models.credentials import CredentialState
from spotpanel.models.playback import Device, PlaybackSnapshot
from spotpanel.models.track import QueueEntry

__all__ = [
    "CredentialState",
    "Device",
    "PlaybackSnapshot",
    "QueueEntry",
]
