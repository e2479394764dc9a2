"""Test the panel command surface"""

from unittest.mock import Mock

import pytest

from conftest import make_snapshot
from spotpanel.core.controller import PanelController
from spotpanel.core.errors import PlaybackClientError, UnknownCommandError
from spotpanel.models.track import QueueEntry


@pytest.fixture
def sleep():
    return Mock()


@pytest.fixture
def gate():
    credentials = Mock()
    credentials.last_error = None
    return credentials


@pytest.fixture
def controller(playback_client, queue_service, gate, sleep):
    return PanelController(
        playback_client, queue_service, gate, settle_delay_sec=1.5, sleep=sleep
    )


def event_types(events):
    return [e["type"] for e in events]


class TestDispatch:

    def test_camel_and_snake_case_names(self, controller, playback_client):
        controller.dispatch("playPause")
        controller.dispatch("play_pause")
        assert playback_client.pause.call_count == 2

    def test_unknown_command(self, controller):
        with pytest.raises(UnknownCommandError):
            controller.dispatch("selfDestruct")

    def test_every_command_has_a_handler(self, controller):
        for name in controller.COMMANDS:
            assert callable(getattr(controller, name))

    def test_client_error_becomes_notice(self, controller, playback_client):
        playback_client.skip_to_next.side_effect = PlaybackClientError("No active device", status=404)
        events = controller.dispatch("skip")
        assert events == [{"type": "notice", "level": "error", "message": "No active device"}]
        playback_client.skip_to_next.assert_called_once()

    def test_credential_warning_appended(self, controller, gate):
        gate.last_error = "Token endpoint returned HTTP 400"
        events = controller.dispatch("clearQueue")
        assert events[-1] == {"type": "warning", "message": "Token endpoint returned HTTP 400"}

    def test_missing_argument(self, controller):
        with pytest.raises(ValueError):
            controller.dispatch("removeFromQueue", {})


class TestTransport:

    def test_play_pause_resumes_when_paused(self, controller, playback_client):
        playback_client.get_current_playback_state.return_value = make_snapshot(is_playing=False)
        controller.dispatch("playPause")
        playback_client.resume.assert_called_once()
        playback_client.pause.assert_not_called()

    def test_skip_waits_settle_delay_before_reading(self, controller, playback_client, sleep):
        events = controller.dispatch("skip")
        sleep.assert_called_once_with(1.5)
        assert event_types(events) == ["playback"]

    def test_skip_returns_stale_state_when_remote_is_slow(self, controller, playback_client):
        # The settle delay is not a completion signal: whatever Spotify reports after it is returned
        playback_client.get_current_playback_state.return_value = make_snapshot(
            track_uri="spotify:track:before-skip"
        )
        events = controller.dispatch("skip")
        assert events[0]["playback"]["track_uri"] == "spotify:track:before-skip"

    def test_toggle_repeat_cycles(self, controller, playback_client):
        playback_client.get_current_playback_state.return_value = make_snapshot(repeat_state="off")
        controller.dispatch("toggleRepeat")
        playback_client.set_repeat.assert_called_with("context")
        playback_client.get_current_playback_state.return_value = make_snapshot(repeat_state="track")
        controller.dispatch("toggleRepeat")
        playback_client.set_repeat.assert_called_with("off")

    def test_toggle_shuffle(self, controller, playback_client):
        playback_client.get_current_playback_state.return_value = make_snapshot(shuffle_state=True)
        controller.dispatch("toggleShuffle")
        playback_client.set_shuffle.assert_called_once_with(False)

    def test_set_volume_and_seek(self, controller, playback_client):
        controller.dispatch("setVolume", {"volume": 30})
        controller.dispatch("seekTo", {"position_ms": 65000})
        playback_client.set_volume.assert_called_once_with(30)
        playback_client.seek.assert_called_once_with(65000)


class TestQueueCommands:

    def test_add_play_remove(self, controller, playback_client, sample_tracks):
        for track in sample_tracks:
            controller.dispatch("addToQueue", track)
        events = controller.dispatch("playFromQueue", {"index": 1})
        assert event_types(events) == ["queue", "playback"]
        assert events[0]["current_index"] == 1
        playback_client.play.assert_called_once_with(uris=["spotify:track:bbb"])

        events = controller.dispatch("removeFromQueue", {"index": 0})
        assert events[0]["current_index"] == 0
        assert len(events[0]["queue"]) == 2

    def test_play_from_queue_out_of_range(self, controller, playback_client, sleep):
        events = controller.dispatch("playFromQueue", {"index": 4})
        assert event_types(events) == ["queue"]
        playback_client.play.assert_not_called()
        sleep.assert_not_called()

    def test_clear_queue(self, controller, queue_service, sample_tracks):
        queue_service.enqueue_many(sample_tracks)
        events = controller.dispatch("clearQueue")
        assert events[0]["queue"] == []
        assert events[0]["current_index"] == 0

    def test_toggle_autoplay(self, controller, queue_service):
        controller.dispatch("toggleAutoplay")
        assert queue_service.autoplay
        controller.dispatch("toggleAutoplay")
        assert not queue_service.autoplay

    def test_add_playlist_to_queue(self, controller, playback_client, queue_service):
        playback_client.get_playlist_tracks.return_value = [
            QueueEntry(name="A", artist="X", uri="spotify:track:a", id="a"),
            QueueEntry(name="B", artist="Y", uri="spotify:track:b", id="b"),
        ]
        controller.dispatch("addPlaylistToQueue", {"playlist_id": "pl1"})
        assert [e.id for e in queue_service.queue] == ["a", "b"]


class TestBrowse:

    def test_search(self, controller, playback_client):
        playback_client.search_tracks.return_value = [
            QueueEntry(name="Hit", artist="Star", uri="spotify:track:hit", id="hit")
        ]
        events = controller.dispatch("search", {"query": "  hit  "})
        playback_client.search_tracks.assert_called_once_with("hit", 10)
        assert events[0]["type"] == "searchResults"
        assert events[0]["tracks"][0]["id"] == "hit"

    def test_open_playlist_lists_then_opens(self, controller, playback_client):
        playback_client.get_user_playlists.return_value = [{"id": "pl1", "name": "Focus"}]
        assert controller.dispatch("openPlaylist")[0]["type"] == "playlists"
        playback_client.get_playlist_tracks.return_value = []
        events = controller.dispatch("openPlaylist", {"playlist_id": "pl1"})
        assert events[0] == {"type": "playlistTracks", "playlist_id": "pl1", "tracks": []}

    def test_play_playlist_by_id(self, controller, playback_client):
        controller.dispatch("playPlaylist", {"playlist_id": "pl1"})
        playback_client.play.assert_called_once_with(context_uri="spotify:playlist:pl1")

    def test_switch_device(self, controller, playback_client):
        playback_client.get_available_devices.return_value = []
        events = controller.dispatch("switchDevice", {"device_id": "d1"})
        playback_client.transfer_playback.assert_called_once_with("d1")
        assert event_types(events) == ["devices", "playback"]

    def test_refresh(self, controller):
        assert event_types(controller.dispatch("refresh")) == ["playback", "queue"]
