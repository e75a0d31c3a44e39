"""
Business Directory - API Server Entry Point
===========================================

Run this to start the API:
    SERVER_PORT=8000 python main.py

Configuration comes from the environment (or a .env file):
    SERVER_HOST, SERVER_PORT, STORE_BACKEND (memory | mongo),
    MONGO_HOST, MONGO_PORT, MONGO_USER, MONGO_PASSWORD, MONGO_DATABASE,
    LOG_LEVEL
"""

import logging
import sys

import uvicorn

from business_directory.infrastructure.config import get_settings
from business_directory.infrastructure.persistence import build_repository
from business_directory.web import create_app

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main():
    """Start the API server."""
    settings = get_settings()
    setup_logging(settings.log_level)

    issues = settings.validate()
    if issues:
        for issue in issues:
            logger.error(issue)
        logger.error("Fatal error: invalid configuration, exiting")
        sys.exit(1)

    app = create_app(build_repository(settings))

    logger.info(
        f"Starting Business Directory at http://{settings.server.host}:{settings.server.port} "
        f"(store: {settings.store_backend})"
    )
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
