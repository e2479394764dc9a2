"""Panel command endpoint: POST a named command, get back state-update events."""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from spotpanel.api.state import AppState, get_state
from spotpanel.core.errors import UnknownCommandError

router = APIRouter()


class CommandBody(BaseModel):
    """Arguments for any command; each command reads only the fields it needs."""
    uri: Optional[str] = None
    name: Optional[str] = None
    artist: Optional[str] = None
    id: Optional[str] = None
    index: Optional[int] = None
    query: Optional[str] = None
    limit: Optional[int] = None
    volume: Optional[int] = None
    position_ms: Optional[int] = None
    playlist_id: Optional[str] = None
    device_id: Optional[str] = None


@router.get("")
def list_commands(state: AppState = Depends(get_state)):
    """Return the command names the panel can send."""
    return {"commands": list(state.controller.COMMANDS)}


@router.post("/{name}")
def run_command(
    name: str,
    body: CommandBody | None = Body(None),
    state: AppState = Depends(get_state),
):
    """Run a command, e.g. POST /api/commands/addToQueue {"uri": "spotify:track:..."}."""
    payload = body.model_dump(exclude_none=True) if body else {}
    try:
        events = state.controller.dispatch(name, payload)
    except UnknownCommandError:
        raise HTTPException(status_code=404, detail=f"Unknown command '{name}'")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"events": events}
