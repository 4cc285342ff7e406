"""
Application package initializer.

``main`` assembles the FastAPI application; ``core`` holds configuration,
logging and database helpers; ``services`` implements the webhook to
Slack pipeline; ``api`` exposes it over HTTP.
"""

from .main import app  # noqa: F401
