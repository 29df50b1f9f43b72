"""
Main application entry point for the InterviewIQ assessment platform.

Usage:
    - Direct: python -m interviewiq.main
    - ASGI server: uvicorn interviewiq.main:app
"""

import os

from interviewiq.app import create_app
from interviewiq.common.config import get_config
from interviewiq.common.logger import app_logger

logger = app_logger.getChild("main")

config = get_config()
app = create_app(config)

if __name__ == "__main__":
    import uvicorn

    reload_enabled = os.environ.get("RELOAD", "false").lower() == "true"
    logger.info(f"Starting server on {config.api.host}:{config.api.port} (reload: {reload_enabled})")

    uvicorn.run(
        "interviewiq.main:app",
        host=config.api.host,
        port=config.api.port,
        reload=reload_enabled,
        log_level=config.logging.level.lower()
    )
