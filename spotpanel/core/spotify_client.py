"""Spotify API client via Spotipy; every call goes through the credential gate first."""
import logging
from typing import Any, Callable, List, Optional

import requests
from spotipy import Spotify
from spotipy.exceptions import SpotifyException

from spotpanel.config import REQUEST_TIMEOUT_SEC
from spotpanel.core.errors import PlaybackClientError
from spotpanel.models.playback import Device, PlaybackSnapshot
from spotpanel.models.track import QueueEntry

logger = logging.getLogger(__name__)

REPEAT_MODES = ("off", "track", "context")


def _default_client_factory(token: str) -> Spotify:
    return Spotify(auth=token, requests_timeout=REQUEST_TIMEOUT_SEC, retries=0)


class PlaybackClient:
    """Thin wrapper over spotipy.Spotify. Errors surface as PlaybackClientError, never retried."""

    def __init__(self, credentials, client_factory: Optional[Callable[[str], Any]] = None) -> None:
        self._credentials = credentials
        self._client_factory = client_factory or _default_client_factory

    def _call(self, op: str, fn: Callable[[Any], Any]) -> Any:
        token = self._credentials.ensure_valid()
        sp = self._client_factory(token)
        try:
            return fn(sp)
        except requests.RequestException as e:
            logger.warning("Spotify %s failed: %s", op, e)
            raise PlaybackClientError(f"{op} failed: {e}") from e
        except SpotifyException as e:
            logger.warning("Spotify %s failed (status=%s): %s", op, e.http_status, e.msg)
            raise PlaybackClientError(f"{op} failed: {e.msg}", status=e.http_status) from e

    def get_current_playback_state(self) -> Optional[PlaybackSnapshot]:
        """Return current playback, or None when no device is active."""
        pb = self._call("current_playback", lambda sp: sp.current_playback())
        return PlaybackSnapshot.from_api(pb)

    def get_currently_playing_track(self) -> Optional[QueueEntry]:
        data = self._call("currently_playing", lambda sp: sp.current_user_playing_track())
        item = (data or {}).get("item")
        if not item:
            return None
        return QueueEntry.from_spotify_track(item)

    def get_recently_played(self, limit: int) -> List[QueueEntry]:
        data = self._call(
            "recently_played", lambda sp: sp.current_user_recently_played(limit=limit)
        )
        items = (data or {}).get("items") or []
        return [QueueEntry.from_spotify_track(i["track"]) for i in items if i.get("track")]

    def play(self, uris: Optional[List[str]] = None, context_uri: Optional[str] = None) -> None:
        """Start playback of explicit track URIs or of an album/playlist context."""
        if uris and context_uri:
            raise ValueError("play() takes uris or context_uri, not both")
        self._call(
            "start_playback",
            lambda sp: sp.start_playback(uris=uris, context_uri=context_uri),
        )

    def resume(self) -> None:
        self._call("start_playback", lambda sp: sp.start_playback())

    def pause(self) -> None:
        self._call("pause_playback", lambda sp: sp.pause_playback())

    def skip_to_next(self) -> None:
        self._call("next_track", lambda sp: sp.next_track())

    def skip_to_previous(self) -> None:
        self._call("previous_track", lambda sp: sp.previous_track())

    def seek(self, position_ms: int) -> None:
        if position_ms < 0:
            raise ValueError("position_ms must be >= 0")
        self._call("seek_track", lambda sp: sp.seek_track(int(position_ms)))

    def set_volume(self, percent: int) -> None:
        if not 0 <= percent <= 100:
            raise ValueError("volume must be between 0 and 100")
        self._call("volume", lambda sp: sp.volume(int(percent)))

    def set_shuffle(self, state: bool) -> None:
        self._call("shuffle", lambda sp: sp.shuffle(bool(state)))

    def set_repeat(self, state: str) -> None:
        if state not in REPEAT_MODES:
            raise ValueError(f"repeat state must be one of {REPEAT_MODES}")
        self._call("repeat", lambda sp: sp.repeat(state))

    def search_tracks(self, query: str, limit: int) -> List[QueueEntry]:
        data = self._call("search", lambda sp: sp.search(q=query, limit=limit, type="track"))
        items = ((data or {}).get("tracks") or {}).get("items") or []
        return [QueueEntry.from_spotify_track(t) for t in items if t]

    def get_user_playlists(self) -> List[dict]:
        """Return the user's playlists as id/name/uri/track count dicts."""
        data = self._call("current_user_playlists", lambda sp: sp.current_user_playlists())
        out = []
        for p in (data or {}).get("items") or []:
            if not p:
                continue
            images = p.get("images") or []
            out.append(
                {
                    "id": p.get("id") or "",
                    "name": p.get("name") or "",
                    "uri": p.get("uri") or "",
                    "total_tracks": int((p.get("tracks") or {}).get("total") or 0),
                    "image_url": images[0]["url"] if images else None,
                }
            )
        return out

    def get_playlist_tracks(self, playlist_id: str, limit: int) -> List[QueueEntry]:
        data = self._call(
            "playlist_items", lambda sp: sp.playlist_items(playlist_id, limit=limit)
        )
        items = (data or {}).get("items") or []
        # Local files and removed tracks come back with track=None
        return [QueueEntry.from_spotify_track(i["track"]) for i in items if i.get("track")]

    def get_available_devices(self) -> List[Device]:
        data = self._call("devices", lambda sp: sp.devices())
        return [Device.from_api(d) for d in (data or {}).get("devices") or []]

    def transfer_playback(self, device_id: str) -> None:
        self._call(
            "transfer_playback",
            lambda sp: sp.transfer_playback(device_id=device_id, force_play=True),
        )
