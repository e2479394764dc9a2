"""Entry: serve the Spotify control panel API with uvicorn."""
import logging
import uvicorn

from spotpanel.config import API_HOST, API_PORT

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "spotpanel.api.app:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
