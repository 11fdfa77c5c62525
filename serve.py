#!/usr/bin/env python3
"""
BookWorm API - Main Server

- src/core/config.py - Configuration management
- src/app.py - FastAPI application factory
- src/api/ - Route handlers
- src/services/ - Business logic (aggregate maintainer, managers)
"""

import sys

import uvicorn

from src.app import app
from src.core.config import APP_CONFIG
from src.utils.logger import setup_logger

logger = setup_logger()


def main():
    """
    ✅ MAIN: Start the FastAPI server
    """
    logger.info(f"🌐 Starting server on {APP_CONFIG['host']}:{APP_CONFIG['port']}")
    logger.info(f"🔧 Environment: {APP_CONFIG['env']}")

    try:
        if APP_CONFIG["debug"]:
            # Development mode: use import string for auto-reload
            uvicorn.run(
                "src.app:app",
                host=APP_CONFIG["host"],
                port=APP_CONFIG["port"],
                reload=True,
                access_log=True,
                log_level="info",
            )
        else:
            uvicorn.run(
                app,
                host=APP_CONFIG["host"],
                port=APP_CONFIG["port"],
                reload=False,
                access_log=False,
                log_level="warning",
            )
    except OSError as e:
        # e.g. port already in use
        logger.error(f"🔥 FATAL: server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
