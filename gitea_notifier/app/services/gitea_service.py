"""
Gitea REST API client.

Gitea hides user e‑mail addresses in webhook payloads when users enable
the "keep e‑mail private" option, replacing them with a ``noreply``
address.  The notifier needs the real address to find the matching Slack
account, so it asks the Gitea API (authenticated with
``GITEA_API_TOKEN``) for each user involved.  Lookups that fail are
logged and the anonymised address is kept.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional
from urllib.parse import quote, urlsplit

import requests

from gitea_notifier.app.core.config import ConfigurationError, settings
from gitea_notifier.app.schemas.webhook import Comment, Webhook, WebhookAction


logger = logging.getLogger(__name__)

_TRAILING_PUNCTUATION = ",.:;!?)"


class GiteaAPIError(RuntimeError):
    """Raised when a Gitea API call fails or returns an unexpected body."""


def parse_mentions(body: str) -> List[str]:
    """Return the usernames ``@mentioned`` in a comment body.

    Quoted lines (starting with ``>``) are skipped so that replying to a
    comment does not notify everyone mentioned in the quote again.
    """
    usernames: List[str] = []
    for line in body.splitlines():
        line = line.lstrip()
        if line.startswith(">"):
            continue
        for token in line.split():
            if not token.startswith("@"):
                continue
            name = token.lstrip("@").rstrip(_TRAILING_PUNCTUATION)
            if name and name not in usernames:
                usernames.append(name)
    return usernames


class GiteaService:
    """Lookups against the Gitea instance that sent a webhook."""

    @classmethod
    def base_url_for(cls, webhook: Webhook) -> str:
        """Return the Gitea root URL used for API calls about ``webhook``.

        ``GITEA_BASE_URL`` wins when configured; otherwise the scheme and
        host of the pull request URL are used and its path is dropped.
        """
        if settings.gitea_base_url:
            return settings.gitea_base_url.rstrip("/")
        parts = urlsplit(webhook.pull_request.url)
        if not parts.scheme or not parts.netloc:
            raise GiteaAPIError(f"Cannot derive Gitea URL from {webhook.pull_request.url!r}")
        return f"{parts.scheme}://{parts.netloc}"

    @classmethod
    def fetch_user_email(cls, base_url: str, username: str) -> str:
        """Return the e‑mail address of ``username`` as seen by the API token."""
        token = settings.require("gitea_api_token")
        url = f"{base_url}/api/v1/users/{quote(username, safe='')}"
        try:
            resp = requests.request(
                "get",
                url,
                headers={"Authorization": f"token {token}"},
                timeout=settings.request_timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise GiteaAPIError(f"Gitea user lookup for {username!r} failed: {exc}") from exc
        except ValueError as exc:
            raise GiteaAPIError(f"Gitea returned invalid JSON for {username!r}") from exc
        email = data.get("email") if isinstance(data, dict) else None
        if not email:
            raise GiteaAPIError(f"Gitea user {username!r} has no e-mail address")
        return email

    @classmethod
    def try_fetch_user_email(cls, base_url: str, username: str) -> Optional[str]:
        """Like ``fetch_user_email`` but log and return ``None`` on failure."""
        try:
            return cls.fetch_user_email(base_url, username)
        except (GiteaAPIError, ConfigurationError) as exc:
            logger.warning("Could not fetch e-mail of Gitea user %s: %s", username, exc)
            return None

    @classmethod
    def deanonymise(cls, webhook: Webhook) -> Webhook:
        """Replace the e‑mails of the people in ``webhook`` with their real ones.

        Covers the sender, the pull request author and, for review
        requests, the requested reviewer.  The webhook is updated in place
        and returned.
        """
        try:
            base_url = cls.base_url_for(webhook)
        except GiteaAPIError as exc:
            logger.warning("Skipping e-mail lookups: %s", exc)
            return webhook

        users = [webhook.sender, webhook.pull_request.user]
        if webhook.action == WebhookAction.REVIEW_REQUESTED and webhook.requested_reviewer:
            users.append(webhook.requested_reviewer)

        # The sender is frequently also the author; look each name up once.
        resolved: Dict[str, Optional[str]] = {}
        for user in users:
            if user.username not in resolved:
                resolved[user.username] = cls.try_fetch_user_email(base_url, user.username)
            email = resolved[user.username]
            if email:
                user.email = email
        return webhook

    @classmethod
    def mention_emails(cls, base_url: str, comment: Comment) -> List[str]:
        """Return the e‑mails of the users mentioned in ``comment``."""
        emails: List[str] = []
        for username in parse_mentions(comment.body):
            email = cls.try_fetch_user_email(base_url, username)
            if email:
                emails.append(email)
        return emails
