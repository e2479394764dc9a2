"""Current playback state, current track and recent history (Spotify)."""
from fastapi import APIRouter, Depends, HTTPException

from spotpanel.api.state import AppState, get_state
from spotpanel.config import RECENTLY_PLAYED_LIMIT
from spotpanel.core.errors import PlaybackClientError

router = APIRouter()


@router.get("")
def get_playback(state: AppState = Depends(get_state)):
    """Return current playback state from Spotify (null when nothing is active)."""
    try:
        pb = state.playback_client.get_current_playback_state()
    except PlaybackClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"playback": pb.to_dict() if pb else None}


@router.get("/current-track")
def get_current_track(state: AppState = Depends(get_state)):
    try:
        track = state.playback_client.get_currently_playing_track()
    except PlaybackClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"track": track.to_dict() if track else None}


@router.get("/recent")
def get_recent(limit: int = RECENTLY_PLAYED_LIMIT, state: AppState = Depends(get_state)):
    """Return recently played tracks, newest first."""
    try:
        tracks = state.playback_client.get_recently_played(limit)
    except PlaybackClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"tracks": [t.to_dict() for t in tracks]}
