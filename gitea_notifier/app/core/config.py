"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  The deployment descriptor (``compose.yaml``) passes the Slack,
Gitea and PostgreSQL values through to the container unmodified.  Values
that are only needed when talking to an external service (tokens, the Slack
channel) are not validated at start‑up; use ``Settings.require`` at the
point of use so that a missing token fails only the requests that need it.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple


DEFAULT_PORT = 4242


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or malformed."""


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Gitea Slack Notifier")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # ``host:port`` the HTTP server listens on.  ``[::]:4242`` style IPv6
    # addresses are accepted as well.
    bind_address: str = os.getenv("BIND_ADDRESS", f"0.0.0.0:{DEFAULT_PORT}")

    slack_channel: str = os.getenv("SLACK_CHANNEL", "")
    slack_api_token: str = os.getenv("SLACK_API_TOKEN", "")
    slack_api_url: str = os.getenv("SLACK_API_URL", "https://slack.com/api")

    gitea_api_token: str = os.getenv("GITEA_API_TOKEN", "")
    # When empty, the Gitea API is reached through the scheme and host of
    # the pull request URL contained in each webhook.
    gitea_base_url: str = os.getenv("GITEA_BASE_URL", "")
    # Shared secret configured on the Gitea webhook.  When empty, the
    # ``X-Gitea-Signature`` header is not checked.
    gitea_webhook_secret: str = os.getenv("GITEA_WEBHOOK_SECRET", "")

    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "10"))

    # Full libpq connection string.  Takes precedence over the individual
    # ``POSTGRES_*`` values below.
    database_url: str = os.getenv("DATABASE_URL", "")
    postgres_host: str = os.getenv("POSTGRES_HOST", "db")
    postgres_port: int = int(os.getenv("POSTGRES_PORT", "5432"))
    postgres_user: str = os.getenv("POSTGRES_USER", "postgres")
    postgres_password: str = os.getenv("POSTGRES_PASSWORD", "")
    postgres_db: str = os.getenv("POSTGRES_DB", "postgres")

    def require(self, name: str) -> str:
        """Return the value of setting ``name`` or raise if it is empty."""
        value = getattr(self, name)
        if not value:
            raise ConfigurationError(f"Missing {name.upper()} environment variable")
        return value

    def _split_bind_address(self) -> Tuple[str, int]:
        address = self.bind_address.strip()
        if address.startswith("["):
            host, _, rest = address[1:].partition("]")
            port = rest[1:] if rest.startswith(":") else ""
        elif address.count(":") == 1:
            host, port = address.split(":")
        else:
            # Bare hostname, IPv4 address or unbracketed IPv6 address
            host, port = address, ""
        if not port:
            return host or "0.0.0.0", DEFAULT_PORT
        try:
            return host or "0.0.0.0", int(port)
        except ValueError:
            raise ConfigurationError(f"Invalid port in BIND_ADDRESS: {self.bind_address!r}") from None

    @property
    def bind_host(self) -> str:
        return self._split_bind_address()[0]

    @property
    def bind_port(self) -> int:
        return self._split_bind_address()[1]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables should
# be set before importing this module.
settings = Settings()
