"""
Production entrypoint for BuildTrack Reports.

Binds to 0.0.0.0:$PORT.
"""

import logging
import os

import uvicorn

from utils.config import Config

if __name__ == "__main__":
    config = Config.load()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", "8000"))
    logging.getLogger(__name__).info("Starting BuildTrack Reports on port %d", port)

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port)
