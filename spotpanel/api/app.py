"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from spotpanel.api.state import AppState, get_state
from spotpanel.config import ensure_data_dir

# Import routes after state to avoid circular imports
from spotpanel.api.routes import auth, commands, playback, queue

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dir()
    state = get_state()
    state.initialize()
    state.queue_service.start_polling()

    yield

    state.queue_service.stop_polling()


app = FastAPI(
    title="Spotpanel API",
    description="Local REST API for the Spotify control panel",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(commands.router, prefix="/api/commands", tags=["commands"])
app.include_router(playback.router, prefix="/api/playback", tags=["playback"])
app.include_router(queue.router, prefix="/api/queue", tags=["queue"])
