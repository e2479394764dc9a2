"""Named panel commands. Each returns the state-update events the presentation layer renders."""
import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional

from spotpanel.config import PLAYLIST_TRACK_LIMIT, SEARCH_LIMIT, SETTLE_DELAY_SEC
from spotpanel.core.errors import PlaybackClientError, UnknownCommandError

logger = logging.getLogger(__name__)

Event = Dict[str, Any]

# off -> context -> track -> off
_NEXT_REPEAT = {"off": "context", "context": "track", "track": "off"}


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _require(payload: dict, key: str) -> Any:
    value = payload.get(key)
    if value is None or value == "":
        raise ValueError(f"Missing '{key}'")
    return value


def _require_int(payload: dict, key: str) -> int:
    value = _require(payload, key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' must be an integer") from None


class PanelController:
    """Command surface over the playback client, the queue and the credential gate.

    Commands that change the current track wait ``settle_delay_sec`` before reading
    playback back. Spotify applies those changes asynchronously and this is a fixed
    wait, not a confirmation; a slower service leaves the returned state stale until
    the next refresh.
    """

    COMMANDS = (
        "play_pause",
        "skip",
        "previous",
        "search",
        "play_track",
        "add_to_queue",
        "remove_from_queue",
        "play_from_queue",
        "clear_queue",
        "toggle_autoplay",
        "set_volume",
        "toggle_shuffle",
        "toggle_repeat",
        "open_playlist",
        "play_playlist",
        "add_playlist_to_queue",
        "refresh",
        "seek_to",
        "get_devices",
        "switch_device",
    )

    def __init__(
        self,
        playback_client,
        queue_service,
        credentials,
        *,
        settle_delay_sec: float = SETTLE_DELAY_SEC,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = playback_client
        self._queue = queue_service
        self._credentials = credentials
        self._settle_delay_sec = settle_delay_sec
        self._sleep = sleep

    def dispatch(self, name: str, payload: Optional[dict] = None) -> List[Event]:
        """Run a command by name (camelCase or snake_case).

        Spotify failures come back as a "notice" event; bad payloads raise ValueError.
        """
        command = _snake_case(name)
        if command not in self.COMMANDS:
            raise UnknownCommandError(name)
        handler = getattr(self, command)
        try:
            events = handler(payload or {})
        except PlaybackClientError as e:
            logger.warning("Command %s failed: %s", command, e)
            events = [{"type": "notice", "level": "error", "message": str(e)}]
        return events + self._credential_warnings()

    def _credential_warnings(self) -> List[Event]:
        if self._credentials.last_error:
            return [{"type": "warning", "message": self._credentials.last_error}]
        return []

    def _settle(self) -> None:
        if self._settle_delay_sec > 0:
            self._sleep(self._settle_delay_sec)

    def _playback_event(self) -> Event:
        pb = self._client.get_current_playback_state()
        return {"type": "playback", "playback": pb.to_dict() if pb else None}

    def _queue_event(self) -> Event:
        return {"type": "queue", **self._queue.snapshot()}

    # Transport

    def play_pause(self, payload: dict) -> List[Event]:
        pb = self._client.get_current_playback_state()
        if pb is not None and pb.is_playing:
            self._client.pause()
        else:
            self._client.resume()
        return [self._playback_event()]

    def skip(self, payload: dict) -> List[Event]:
        self._client.skip_to_next()
        self._settle()
        return [self._playback_event()]

    def previous(self, payload: dict) -> List[Event]:
        self._client.skip_to_previous()
        self._settle()
        return [self._playback_event()]

    def seek_to(self, payload: dict) -> List[Event]:
        self._client.seek(_require_int(payload, "position_ms"))
        return [self._playback_event()]

    def set_volume(self, payload: dict) -> List[Event]:
        self._client.set_volume(_require_int(payload, "volume"))
        return [self._playback_event()]

    def toggle_shuffle(self, payload: dict) -> List[Event]:
        pb = self._client.get_current_playback_state()
        current = pb.shuffle_state if pb else False
        self._client.set_shuffle(not current)
        return [self._playback_event()]

    def toggle_repeat(self, payload: dict) -> List[Event]:
        pb = self._client.get_current_playback_state()
        current = pb.repeat_state if pb else "off"
        self._client.set_repeat(_NEXT_REPEAT.get(current, "off"))
        return [self._playback_event()]

    def refresh(self, payload: dict) -> List[Event]:
        return [self._playback_event(), self._queue_event()]

    # Search and tracks

    def search(self, payload: dict) -> List[Event]:
        query = str(_require(payload, "query")).strip()
        limit = int(payload.get("limit") or SEARCH_LIMIT)
        results = self._client.search_tracks(query, limit)
        return [{"type": "searchResults", "query": query, "tracks": [t.to_dict() for t in results]}]

    def play_track(self, payload: dict) -> List[Event]:
        self._client.play(uris=[_require(payload, "uri")])
        self._settle()
        return [self._playback_event()]

    # Local queue

    def add_to_queue(self, payload: dict) -> List[Event]:
        _require(payload, "uri")
        self._queue.enqueue(payload)
        return [self._queue_event()]

    def remove_from_queue(self, payload: dict) -> List[Event]:
        self._queue.remove_at(_require_int(payload, "index"))
        return [self._queue_event()]

    def play_from_queue(self, payload: dict) -> List[Event]:
        if self._queue.play_at(_require_int(payload, "index")):
            self._settle()
            return [self._queue_event(), self._playback_event()]
        return [self._queue_event()]

    def clear_queue(self, payload: dict) -> List[Event]:
        self._queue.clear()
        return [self._queue_event()]

    def toggle_autoplay(self, payload: dict) -> List[Event]:
        self._queue.set_autoplay(not self._queue.autoplay)
        return [self._queue_event()]

    # Playlists

    def open_playlist(self, payload: dict) -> List[Event]:
        playlist_id = payload.get("playlist_id")
        if not playlist_id:
            return [{"type": "playlists", "playlists": self._client.get_user_playlists()}]
        tracks = self._client.get_playlist_tracks(playlist_id, PLAYLIST_TRACK_LIMIT)
        return [
            {
                "type": "playlistTracks",
                "playlist_id": playlist_id,
                "tracks": [t.to_dict() for t in tracks],
            }
        ]

    def play_playlist(self, payload: dict) -> List[Event]:
        uri = payload.get("uri") or f"spotify:playlist:{_require(payload, 'playlist_id')}"
        self._client.play(context_uri=uri)
        self._settle()
        return [self._playback_event()]

    def add_playlist_to_queue(self, payload: dict) -> List[Event]:
        playlist_id = _require(payload, "playlist_id")
        tracks = self._client.get_playlist_tracks(playlist_id, PLAYLIST_TRACK_LIMIT)
        added = self._queue.enqueue_many(t.to_dict() for t in tracks)
        logger.info("Queue: added %d tracks from playlist %s", added, playlist_id)
        return [self._queue_event()]

    # Devices

    def get_devices(self, payload: dict) -> List[Event]:
        devices = self._client.get_available_devices()
        return [{"type": "devices", "devices": [d.to_dict() for d in devices]}]

    def switch_device(self, payload: dict) -> List[Event]:
        self._client.transfer_playback(_require(payload, "device_id"))
        self._settle()
        return self.get_devices(payload) + [self._playback_event()]
