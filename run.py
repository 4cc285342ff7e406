"""Entry point for the notifier container.

Starts the FastAPI application with uvicorn on ``BIND_ADDRESS``
(``host:port``, default ``0.0.0.0:4242``).  Configuration such as the
Slack and Gitea tokens and the PostgreSQL credentials is read from the
environment; ``compose.yaml`` passes it through from a ``.env`` file.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from gitea_notifier.app.core.config import settings
from gitea_notifier.app.main import app


STARTUP_FAILURE = 3


async def main() -> None:
    """Serve the notifier until interrupted."""
    config = Config(
        app=app,
        host=settings.bind_host,
        port=settings.bind_port,
        reload=False,
        # Logging was set up by create_app; keep uvicorn from replacing it.
        log_config=None,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info(
        "Listening on %s:%d", settings.bind_host, settings.bind_port
    )
    await server.serve()
    if not server.started:
        # Non-zero exit so that the "on-failure" restart policy kicks in,
        # e.g. while the database container is still starting.
        raise SystemExit(STARTUP_FAILURE)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
