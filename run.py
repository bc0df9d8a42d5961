"""Entry point for the Subscription Tracker API.

Starts the FastAPI application with Uvicorn.  It is intended to be
executed from the project root, for example in Docker, where only a
single Python file needs to be specified.

Configuration (database path, migrations flag, listen address, log
level) is read from environment variables; see
``subscription_api/app/core/config.py`` for the supported names.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from subscription_api.app.core.config import settings
from subscription_api.app.main import app


async def run_api() -> None:
    """Serve the API on ``HTTP_HOST``:``HTTP_PORT`` (default ``0.0.0.0:8080``)."""
    config = Config(
        app=app,
        host=settings.http_host,
        port=settings.http_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Shutting down")
