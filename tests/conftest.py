"""Test configuration and fixtures"""

from unittest.mock import Mock

import pytest

from spotpanel.core.credentials import CredentialManager
from spotpanel.core.kv_store import JsonStore
from spotpanel.core.queue_service import QueueService
from spotpanel.models.playback import PlaybackSnapshot


class FakeClock:
    """Settable replacement for time.time"""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def token_response(status_code=200, access_token="new-token", expires_in=3600):
    resp = Mock(status_code=status_code)
    resp.json.return_value = {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": expires_in,
    }
    return resp


def make_snapshot(**overrides):
    fields = dict(
        is_playing=True,
        shuffle_state=False,
        repeat_state="off",
        volume_percent=50,
        progress_ms=1000,
        duration_ms=200000,
        active_device=None,
    )
    fields.update(overrides)
    return PlaybackSnapshot(**fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "state.json")


@pytest.fixture
def session():
    s = Mock()
    s.post.return_value = token_response()
    return s


@pytest.fixture
def credentials(store, session, clock):
    manager = CredentialManager(
        store,
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-secret",
        token_url="https://accounts.example/api/token",
        session=session,
        clock=clock,
    )
    manager.initialize()
    return manager


@pytest.fixture
def playback_client():
    client = Mock()
    client.get_current_playback_state.return_value = make_snapshot()
    return client


@pytest.fixture
def queue_service(store, playback_client):
    service = QueueService(store, playback_client, poll_interval_sec=0.01)
    service.load()
    yield service
    service.stop_polling()


@pytest.fixture
def sample_tracks():
    return [
        {"name": "Alpha", "artist": "Band A", "uri": "spotify:track:aaa", "id": "aaa"},
        {"name": "Beta", "artist": "Band B", "uri": "spotify:track:bbb", "id": "bbb"},
        {"name": "Gamma", "artist": "Band C", "uri": "spotify:track:ccc", "id": "ccc"},
    ]
