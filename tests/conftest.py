"""
Shared test fixtures.

Provides: sample Gitea webhook payloads, settings overrides and fake
``requests`` responses.  No test talks to a real database, Gitea or Slack.
"""

import copy
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
import requests

from gitea_notifier.app.core.config import settings


PULL_REQUEST = {
    "id": 101,
    "number": 7,
    "body": "Adds the thing.\nCloses #3",
    "comments": 0,
    "user": {"email": "alice@noreply.git.example.com", "username": "alice"},
    "title": "Add the thing",
    "html_url": "https://git.example.com/org/project/pulls/7",
    "url": "https://git.example.com/org/project/pulls/7",
    "state": "open",
    "merged": False,
}


@pytest.fixture
def pr_payload() -> Dict[str, Any]:
    """Payload of a ``pull_request`` webhook with action ``opened``."""
    return {
        "action": "opened",
        "number": 7,
        "pull_request": copy.deepcopy(PULL_REQUEST),
        "repository": {"full_name": "org/project"},
        "sender": {"email": "alice@noreply.git.example.com", "username": "alice"},
    }


@pytest.fixture
def comment_payload() -> Dict[str, Any]:
    """Payload of an ``issue_comment`` webhook on a pull request."""
    issue = copy.deepcopy(PULL_REQUEST)
    issue["id"] = 555
    issue.pop("merged")
    return {
        "action": "created",
        "issue": issue,
        "comment": {"body": "> @carol said something\n@bob could you look?"},
        "repository": {"full_name": "org/project"},
        "sender": {"email": "dave@noreply.git.example.com", "username": "dave"},
        "is_pull": True,
    }


@pytest.fixture
def configured(monkeypatch: pytest.MonkeyPatch):
    """Fill in the settings the services require."""
    monkeypatch.setattr(settings, "gitea_api_token", "gitea-token")
    monkeypatch.setattr(settings, "gitea_base_url", "")
    monkeypatch.setattr(settings, "slack_api_token", "xoxb-token")
    monkeypatch.setattr(settings, "slack_channel", "C123")
    monkeypatch.setattr(settings, "slack_api_url", "https://slack.test/api")
    monkeypatch.setattr(settings, "gitea_webhook_secret", "")
    return settings


def make_response(json_data: Any = None, status_code: int = 200) -> MagicMock:
    """Build a fake ``requests.Response``."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = json_data
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        resp.raise_for_status.return_value = None
    return resp
