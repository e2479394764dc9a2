"""Playback state and devices from Spotify."""
from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass
class Device:
    """Spotify Connect device."""
    id: str
    name: str
    type: str
    is_active: bool
    volume_percent: Optional[int]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Device":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            type=data.get("type") or "",
            is_active=bool(data.get("is_active", False)),
            volume_percent=data.get("volume_percent"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PlaybackSnapshot:
    """Point-in-time read of remote playback. Not cached beyond one request."""
    is_playing: bool
    shuffle_state: bool
    repeat_state: str  # "off" | "track" | "context"
    volume_percent: Optional[int]
    progress_ms: Optional[int]  # None when Spotify reports no position
    duration_ms: int
    active_device: Optional[Device]
    track_name: str = ""
    artist_name: str = ""
    album_name: str = ""
    track_uri: str = ""
    context_uri: Optional[str] = None

    @classmethod
    def from_api(cls, pb: Optional[dict[str, Any]]) -> Optional["PlaybackSnapshot"]:
        """Map a Spotify current_playback() response; None when nothing is active."""
        if not pb:
            return None
        item = pb.get("item") or {}
        album = item.get("album") or {}
        artists = item.get("artists") or []
        context = pb.get("context") or {}
        device_data = pb.get("device")
        device = Device.from_api(device_data) if device_data else None
        progress = pb.get("progress_ms")
        return cls(
            is_playing=bool(pb.get("is_playing", False)),
            shuffle_state=bool(pb.get("shuffle_state", False)),
            repeat_state=pb.get("repeat_state") or "off",
            volume_percent=device.volume_percent if device else None,
            progress_ms=int(progress) if progress is not None else None,
            duration_ms=int(item.get("duration_ms") or 0),
            active_device=device,
            track_name=item.get("name", ""),
            artist_name=", ".join(a.get("name", "") for a in artists),
            album_name=album.get("name", ""),
            track_uri=item.get("uri", ""),
            context_uri=context.get("uri"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
