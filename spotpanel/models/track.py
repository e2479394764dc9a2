"""Local queue entries."""
from dataclasses import asdict, dataclass
from typing import Any, Optional


def track_id_from_uri(uri: Optional[str]) -> str:
    """Return the trailing segment of spotify:track:<id>, or "" if there is none."""
    if not uri:
        return ""
    return uri.split(":")[-1]


@dataclass
class QueueEntry:
    """Track reference held in the local queue."""
    name: str
    artist: str
    uri: str
    id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QueueEntry":
        """Build from a stored or client-supplied dict; a missing id is derived from the uri."""
        uri = data.get("uri") or ""
        return cls(
            name=data.get("name") or "",
            artist=data.get("artist") or "",
            uri=uri,
            id=data.get("id") or track_id_from_uri(uri),
        )

    @classmethod
    def from_spotify_track(cls, track: dict[str, Any]) -> "QueueEntry":
        """Map a Spotify track object (search result, playlist item) to a queue entry."""
        artists = track.get("artists") or []
        uri = track.get("uri") or ""
        return cls(
            name=track.get("name") or "",
            artist=", ".join(a.get("name", "") for a in artists),
            uri=uri,
            id=track.get("id") or track_id_from_uri(uri),
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
