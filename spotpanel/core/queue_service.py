"""Local play queue with a cursor, and the autoplay poll that advances it on track end.

The local queue is separate from Spotify's own queue. A background thread polls
playback every POLL_INTERVAL_SEC; when autoplay is on and Spotify reports
"not playing, progress 0" the next local entry is started. A user pausing at
the very start of a track looks the same and also advances the queue.
"""
import logging
import threading
from typing import Any, Iterable, List, Optional

from spotpanel.config import POLL_INTERVAL_SEC
from spotpanel.core.errors import OutOfRangeError
from spotpanel.core.kv_store import KEY_AUTOPLAY, KEY_QUEUE, KEY_QUEUE_INDEX
from spotpanel.models.track import QueueEntry

logger = logging.getLogger(__name__)


class QueueService:
    """Owns the local queue, its cursor and the autoplay flag; mirrors them to the store."""

    def __init__(self, store, playback_client, poll_interval_sec: float = POLL_INTERVAL_SEC) -> None:
        self._store = store
        self._client = playback_client
        self._poll_interval_sec = poll_interval_sec
        # Re-entrant: advance_and_play() calls play_at() while holding it
        self._lock = threading.RLock()
        self._queue: List[QueueEntry] = []
        self._current_index = 0
        self._autoplay = False
        self._poll_thread: Optional[threading.Thread] = None
        self._poll_stop = threading.Event()
        self.poll_failures = 0

    @property
    def queue(self) -> List[QueueEntry]:
        with self._lock:
            return list(self._queue)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def autoplay(self) -> bool:
        return self._autoplay

    @property
    def is_polling(self) -> bool:
        """True while the poll timer is armed."""
        return self._poll_thread is not None and self._poll_thread.is_alive()

    def load(self) -> None:
        """Load queue, cursor and autoplay flag from the store."""
        with self._lock:
            raw = self._store.get(KEY_QUEUE, []) or []
            entries = []
            for item in raw:
                try:
                    entries.append(QueueEntry.from_dict(item))
                except (AttributeError, TypeError):
                    continue
            self._queue = entries
            try:
                index = int(self._store.get(KEY_QUEUE_INDEX, 0) or 0)
            except (TypeError, ValueError):
                logger.warning("Queue: ignoring unreadable stored index")
                index = 0
            self._current_index = max(0, min(index, len(self._queue)))
            self._autoplay = bool(self._store.get(KEY_AUTOPLAY, False))
        logger.info(
            "Queue: loaded %d entries (index=%d, autoplay=%s)",
            len(self._queue),
            self._current_index,
            self._autoplay,
        )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._queue):
            raise OutOfRangeError(f"index {index} outside queue of {len(self._queue)}")

    def _save_queue(self) -> None:
        self._store.set(KEY_QUEUE, [e.to_dict() for e in self._queue])

    def _save_index(self) -> None:
        self._store.set(KEY_QUEUE_INDEX, self._current_index)

    def enqueue(self, track: dict[str, Any]) -> QueueEntry:
        """Append one track and save."""
        entry = QueueEntry.from_dict(track)
        with self._lock:
            self._queue.append(entry)
            self._save_queue()
        return entry

    def enqueue_many(self, tracks: Iterable[dict[str, Any]]) -> int:
        """Append a batch and save once. Returns the number of entries added."""
        entries = [QueueEntry.from_dict(t) for t in tracks]
        with self._lock:
            self._queue.extend(entries)
            self._save_queue()
        return len(entries)

    def remove_at(self, index: int) -> bool:
        """Remove the entry at index. Out-of-range indices are ignored."""
        with self._lock:
            try:
                self._check_index(index)
            except OutOfRangeError as e:
                logger.debug("Queue: remove ignored, %s", e)
                return False
            self._queue.pop(index)
            if index <= self._current_index and self._current_index > 0:
                self._current_index -= 1
            self._current_index = min(self._current_index, len(self._queue))
            self._save_queue()
            self._save_index()
            return True

    def play_at(self, index: int) -> bool:
        """Move the cursor to index and start that track. Out-of-range indices are ignored."""
        with self._lock:
            try:
                self._check_index(index)
            except OutOfRangeError as e:
                logger.debug("Queue: play ignored, %s", e)
                return False
            entry = self._queue[index]
            logger.info("Queue: playing %d/%d %s", index + 1, len(self._queue), entry.uri)
            # Cursor only moves once Spotify accepted the play
            self._client.play(uris=[entry.uri])
            self._current_index = index
            self._save_index()
            return True

    def advance_and_play(self) -> bool:
        """Play the entry after the cursor. No-op at the last entry (no wrap, no refill)."""
        with self._lock:
            if self._current_index >= len(self._queue) - 1:
                logger.debug("Queue: exhausted at index %d", self._current_index)
                return False
            return self.play_at(self._current_index + 1)

    def clear(self) -> None:
        with self._lock:
            self._queue = []
            self._current_index = 0
            self._save_queue()
            self._save_index()

    def set_autoplay(self, enabled: bool) -> None:
        with self._lock:
            self._autoplay = bool(enabled)
            self._store.set(KEY_AUTOPLAY, self._autoplay)
        logger.info("Queue: autoplay %s", "on" if enabled else "off")

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "queue": [e.to_dict() for e in self._queue],
                "current_index": self._current_index,
                "autoplay": self._autoplay,
                "polling": self.is_polling,
            }

    def poll_once(self) -> bool:
        """One poll tick. Returns True if the queue was advanced.

        Errors are logged and counted, never raised, so the timer keeps running.
        """
        with self._lock:
            if not self._autoplay or not self._queue:
                return False
            seen_index = self._current_index
        try:
            pb = self._client.get_current_playback_state()
            if pb is None or pb.is_playing or pb.progress_ms != 0:
                return False
            with self._lock:
                # A user command may have moved the cursor or turned autoplay off during the read
                if not self._autoplay or self._current_index != seen_index:
                    logger.debug("Queue: state changed during poll, not advancing")
                    return False
                logger.info("Queue: track ended, advancing")
                return self.advance_and_play()
        except Exception as e:
            self.poll_failures += 1
            logger.warning("Queue poll failed (%d so far): %s", self.poll_failures, e)
            return False

    def _poll_loop(self) -> None:
        while not self._poll_stop.wait(timeout=self._poll_interval_sec):
            self.poll_once()

    def start_polling(self) -> None:
        """Arm the poll timer. Idempotent."""
        if self.is_polling:
            return
        self._poll_stop.clear()
        self._poll_thread = threading.Thread(target=self._poll_loop, daemon=True)
        self._poll_thread.start()
        logger.info("Queue poll started (interval %.1fs)", self._poll_interval_sec)

    def stop_polling(self) -> None:
        self._poll_stop.set()
        if self._poll_thread is not None:
            self._poll_thread.join(timeout=self._poll_interval_sec + 1.0)
            self._poll_thread = None
