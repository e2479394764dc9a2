"""Access-token status and manual refresh."""
from fastapi import APIRouter, Depends, HTTPException

from spotpanel.api.state import AppState, get_state
from spotpanel.core.errors import TokenRefreshError

router = APIRouter()


@router.get("/status")
def get_status(state: AppState = Depends(get_state)):
    """Return whether a token is held, when it expires and the last refresh error."""
    return state.credentials.status()


@router.post("/refresh")
def refresh_token(state: AppState = Depends(get_state)):
    """Force a token refresh now."""
    try:
        state.credentials.refresh()
    except TokenRefreshError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"ok": True, **state.credentials.status()}
