"""
Pydantic models for Gitea webhook payloads.

Only the fields the notifier uses are modelled; everything else in the
payload is ignored.  Pull request and issue comment events share the same
shape: the former carries a ``pull_request`` object, the latter an
``issue`` object, both parsed into ``Webhook.pull_request``.  The action
specific data (``comment``, ``review``, ``requested_reviewer``) sits at the
top level of the payload next to ``action``.
"""

from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class RepositoryNameError(ValueError):
    """Raised when a repository ``full_name`` is not of the form ``owner/name``."""


class User(BaseModel):
    email: str = ""
    username: str


class Repository(BaseModel):
    full_name: str = Field(..., examples=["org/project"])

    def split_name(self) -> tuple[str, str]:
        """Return ``(owner, name)``; raises ``RepositoryNameError`` for malformed names."""
        owner, sep, name = self.full_name.partition("/")
        if not sep:
            raise RepositoryNameError(f"Invalid repository full_name: {self.full_name!r}")
        return owner, name


class Comment(BaseModel):
    body: str = ""


class PullRequestState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PullRequest(BaseModel):
    """A pull request, or the issue a comment was posted on."""

    id: int
    number: int
    body: str = ""
    comments: int = 0
    user: User
    title: str
    url: str = Field(..., validation_alias=AliasChoices("html_url", "url"))
    state: PullRequestState
    merged: bool = False

    @field_validator("body", mode="before")
    @classmethod
    def _none_body_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Review(BaseModel):
    type: Literal[
        "pull_request_review_approved",
        "pull_request_review_rejected",
        "pull_request_review_comment",
    ]
    content: str = ""

    @property
    def verb(self) -> str:
        return {
            "pull_request_review_approved": "approved",
            "pull_request_review_rejected": "rejected",
            "pull_request_review_comment": "commented on",
        }[self.type]


class WebhookAction(str, Enum):
    OPENED = "opened"
    CLOSED = "closed"
    REOPENED = "reopened"
    MERGED = "merged"
    CREATED = "created"
    REVIEWED = "reviewed"
    REVIEW_REQUESTED = "review_requested"

    def __str__(self) -> str:
        return self.value


SUPPORTED_ACTIONS = {action.value for action in WebhookAction}

_REQUIRED_FIELDS = {
    WebhookAction.CREATED: "comment",
    WebhookAction.REVIEWED: "review",
    WebhookAction.REVIEW_REQUESTED: "requested_reviewer",
}


def is_supported_action(payload: Dict[str, Any]) -> bool:
    """Return ``True`` if the raw payload carries an action the notifier handles."""
    return isinstance(payload, dict) and payload.get("action") in SUPPORTED_ACTIONS


class Webhook(BaseModel):
    """A validated Gitea webhook delivery."""

    action: WebhookAction
    pull_request: PullRequest = Field(
        ..., validation_alias=AliasChoices("pull_request", "issue")
    )
    sender: User
    repository: Repository
    comment: Optional[Comment] = None
    review: Optional[Review] = None
    requested_reviewer: Optional[User] = None

    @model_validator(mode="after")
    def _check_action_fields(self) -> "Webhook":
        required = _REQUIRED_FIELDS.get(self.action)
        if required and getattr(self, required) is None:
            raise ValueError(f"'{required}' is required for action '{self.action}'")
        # Gitea reports a merge as a close of a merged pull request
        if self.action == WebhookAction.CLOSED and self.pull_request.merged:
            self.action = WebhookAction.MERGED
        return self
