"""
Slack Web API client.

The notifier talks to Slack's HTTP API directly with ``requests``: it
only needs two methods, ``users.lookupByEmail`` to turn an e‑mail into a
Slack user that can be mentioned and ``chat.postMessage`` to post to the
configured channel.  Both authenticate with the bot token from
``SLACK_API_TOKEN``.

Slack answers most errors with HTTP 200 and ``{"ok": false, "error":
"..."}``; those are raised as ``SlackAPIError`` carrying the error code.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from gitea_notifier.app.core.config import settings
from gitea_notifier.app.schemas.slack import SlackUser


logger = logging.getLogger(__name__)


class SlackAPIError(RuntimeError):
    """Raised when a Slack API call fails."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"Slack {method} failed: {error}")
        self.method = method
        self.error = error


class SlackService:
    """Thin wrapper around the Slack Web API methods the notifier uses."""

    @classmethod
    def _request(
        cls,
        http_method: str,
        method: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Call Slack API ``method`` and return the decoded body of a successful call."""
        token = settings.require("slack_api_token")
        url = f"{settings.slack_api_url.rstrip('/')}/{method}"
        try:
            resp = requests.request(
                http_method,
                url,
                params=params,
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
                timeout=settings.request_timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise SlackAPIError(method, str(exc)) from exc
        except ValueError as exc:
            raise SlackAPIError(method, "invalid JSON response") from exc
        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error", "unknown_error") if isinstance(data, dict) else "unknown_error"
            raise SlackAPIError(method, error)
        return data

    @classmethod
    def lookup_user_by_email(cls, email: str) -> SlackUser:
        """Return the Slack user registered with ``email``."""
        data = cls._request("get", "users.lookupByEmail", params={"email": email})
        user = data.get("user")
        if not isinstance(user, dict) or not user.get("id"):
            raise SlackAPIError("users.lookupByEmail", "missing user in response")
        try:
            return SlackUser.model_validate(user)
        except ValidationError as exc:
            raise SlackAPIError("users.lookupByEmail", "malformed user in response") from exc

    @classmethod
    def find_users(cls, emails: List[str]) -> List[SlackUser]:
        """Resolve each e‑mail to a Slack user, skipping the ones that fail."""
        users: List[SlackUser] = []
        for email in emails:
            try:
                users.append(cls.lookup_user_by_email(email))
            except SlackAPIError as exc:
                logger.warning("No Slack user for %s: %s", email, exc.error)
        return users

    @classmethod
    def post_message(
        cls,
        blocks: List[Dict[str, Any]],
        text: str,
        thread_ts: Optional[str] = None,
    ) -> str:
        """Post a message to ``SLACK_CHANNEL`` and return its ``ts``.

        When ``thread_ts`` is given the message is posted as a reply in
        that thread.
        """
        payload: Dict[str, Any] = {
            "channel": settings.require("slack_channel"),
            "blocks": blocks,
            "text": text,
        }
        if thread_ts:
            payload["thread_ts"] = thread_ts
        data = cls._request("post", "chat.postMessage", payload=payload)
        ts = data.get("ts")
        if not ts:
            raise SlackAPIError("chat.postMessage", "missing ts in response")
        logger.info("Posted Slack message %s (thread %s)", ts, thread_ts or "-")
        return ts
