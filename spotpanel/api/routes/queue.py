"""Local queue state (read-only; changes go through /api/commands)."""
from fastapi import APIRouter, Depends

from spotpanel.api.state import AppState, get_state

router = APIRouter()


@router.get("")
def get_queue(state: AppState = Depends(get_state)):
    """Return queue entries, cursor, autoplay flag and whether the poll timer is armed."""
    return {**state.queue_service.snapshot(), "poll_failures": state.queue_service.poll_failures}
