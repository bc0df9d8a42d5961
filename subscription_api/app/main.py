"""
Main entrypoint for the Subscription Tracker API.

This module assembles the FastAPI application, sets up logging,
registers error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Run it with uvicorn or
another ASGI server, e.g.::

    uvicorn subscription_api.app.main:app --reload

Swagger UI is served by FastAPI at ``/docs``.
"""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request

from .api.errors import register_error_handlers
from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .repositories.base import SubscriptionRepository
from .repositories.sqlite import SQLiteSubscriptionRepository
from .services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[SubscriptionRepository] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the values read from the
        environment at import time.
    repository : Optional[SubscriptionRepository]
        Store backing the subscription service.  When omitted a
        ``SQLiteSubscriptionRepository`` for ``settings.database_url``
        is created and migrations run on startup if
        ``settings.db_migrate`` is set.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that startup steps
    # below can log.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
    )
    app.state.settings = settings

    database_path: Optional[str] = None
    if repository is None:
        database_path = get_database_path(settings.database_url)
        repository = SQLiteSubscriptionRepository(database_path)
    app.state.subscription_service = SubscriptionService(repository)

    register_error_handlers(app)
    app.include_router(v1_router, prefix="/api/v1")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # Stays 500 when the handler raises past the error handlers
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            logger.info(
                "HTTP %s %s -> %s in %.1f ms (client=%s, user_agent=%s)",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
                request.client.host if request.client else "-",
                request.headers.get("user-agent", "-"),
            )

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Only the SQLite store created here needs a schema.
        if database_path is not None and settings.db_migrate:
            version = init_db(database_path)
            logger.info("Database schema at version %s (%s)", version, database_path)
        logger.info("%s %s started", settings.project_name, settings.api_version)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
