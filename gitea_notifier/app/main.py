"""
Main entrypoint for the Gitea Slack notifier.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time as
``app``.  Run it with ``python run.py`` or directly with uvicorn::

    uvicorn gitea_notifier.app.main:app --port 4242
"""

from fastapi import FastAPI

from .core.config import settings
from .core.logging_config import setup_logging
from .api.v1.router import router as v1_router
from .core.db import init_db


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Configures logging, mounts the versioned routers and registers a
    start‑up hook that applies database migrations.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that start-up messages below are formatted.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health")
    def health() -> dict:
        """Liveness probe; does not touch the database."""
        return {"status": "ok", "service": "gitea-notifier"}

    @app.on_event("startup")
    async def startup_event() -> None:
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
