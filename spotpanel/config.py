"""Configuration: env, Spotify credentials, polling and storage paths."""
import os
from pathlib import Path

# Base paths (project root = parent of spotpanel package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID etc. are set
try:
    from dotenv import load_dotenv
    load_dotenv(BASE_DIR / ".env")
except ImportError:
    pass
DATA_DIR = Path(os.getenv("SPOTPANEL_DATA_DIR", str(BASE_DIR / "data")))
STATE_PATH = DATA_DIR / "state.json"

# API
API_HOST = os.getenv("SPOTPANEL_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("SPOTPANEL_API_PORT", "8000"))

# Spotify (refresh token is configured once and never rotated here)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_REFRESH_TOKEN = os.getenv("SPOTIFY_REFRESH_TOKEN", "")
SPOTIFY_TOKEN_URL = os.getenv("SPOTIFY_TOKEN_URL", "https://accounts.spotify.com/api/token")

# Tokens are never presented within this many seconds of server-side expiry
TOKEN_SAFETY_MARGIN_SEC = 300

REQUEST_TIMEOUT_SEC = float(os.getenv("SPOTPANEL_REQUEST_TIMEOUT_SEC", "10"))

# Queue autoplay poll period
POLL_INTERVAL_SEC = float(os.getenv("SPOTPANEL_POLL_INTERVAL_SEC", "5.0"))

# Wait after skip/previous/play before reading playback back (Spotify is eventually consistent)
SETTLE_DELAY_SEC = float(os.getenv("SPOTPANEL_SETTLE_DELAY_SEC", "1.0"))

SEARCH_LIMIT = int(os.getenv("SPOTPANEL_SEARCH_LIMIT", "10"))
PLAYLIST_TRACK_LIMIT = int(os.getenv("SPOTPANEL_PLAYLIST_TRACK_LIMIT", "50"))
RECENTLY_PLAYED_LIMIT = 10


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
