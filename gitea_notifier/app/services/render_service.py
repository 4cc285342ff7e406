"""
Slack message rendering.

Turns a validated webhook, plus the Slack users that should be
mentioned, into Block Kit blocks.  The functions here are pure; they do
no I/O.
"""

import re
from typing import Any, Dict, List

from gitea_notifier.app.schemas.slack import SlackUser
from gitea_notifier.app.schemas.webhook import PullRequest, Review, User, Webhook, WebhookAction


Block = Dict[str, Any]

# Slack rejects blocks whose text exceeds these lengths with "invalid_blocks".
MAX_SECTION_TEXT = 3000
MAX_HEADER_TEXT = 150
ELLIPSIS = "\u2026"

_PARTIAL_ENTITY = re.compile(r"&[a-z]*$")


def escape(text: str) -> str:
    """Escape the characters Slack treats as control characters in mrkdwn.

    User text such as ``<!channel>`` must reach Slack as literal text.
    """
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def truncate(text: str, limit: int) -> str:
    """Shorten ``text`` to at most ``limit`` characters, ending with an ellipsis."""
    if len(text) <= limit:
        return text
    cut = _PARTIAL_ENTITY.sub("", text[: limit - len(ELLIPSIS)])
    return cut + ELLIPSIS


def _markdown_section(text: str) -> Block:
    return {"type": "section", "text": {"type": "mrkdwn", "text": truncate(text, MAX_SECTION_TEXT)}}


def _header(text: str) -> Block:
    return {"type": "header", "text": {"type": "plain_text", "text": truncate(text, MAX_HEADER_TEXT)}}


def format_pull_request_url(pull_request: PullRequest) -> str:
    """Slack link markup pointing at the pull request, labelled with its title."""
    return f"<{pull_request.url}|{escape(pull_request.title)}>"


def quote_body(body: str) -> str:
    """Escape ``body`` and prefix every line with ``>``, keeping the line endings."""
    return "".join(">" + escape(line) for line in body.splitlines(keepends=True))


def render_pr_opened(webhook: Webhook) -> List[Block]:
    owner, name = webhook.repository.split_name()
    blocks = [
        _header(f"{owner} | {name}"),
        _markdown_section(
            f"Pull request {format_pull_request_url(webhook.pull_request)} "
            f"opened by {escape(webhook.sender.username)}"
        ),
    ]
    # Slack rejects section blocks with empty text
    if webhook.pull_request.body.strip():
        blocks.append(_markdown_section(quote_body(webhook.pull_request.body)))
    return blocks


def render_reviewed(webhook: Webhook, review: Review, slack_users: List[SlackUser]) -> List[Block]:
    who = slack_users[0].mention if slack_users else escape(webhook.pull_request.user.username)
    return [
        _markdown_section(f"{who}, {escape(webhook.sender.username)} has {review.verb} your PR")
    ]


def render_review_requested(webhook: Webhook, reviewer: User, slack_users: List[SlackUser]) -> List[Block]:
    who = slack_users[0].mention if slack_users else escape(reviewer.username)
    return [
        _markdown_section(
            f"{who}, {escape(webhook.sender.username)} has requested you to review "
            f"{format_pull_request_url(webhook.pull_request)}"
        )
    ]


def render_comment(slack_users: List[SlackUser]) -> List[Block]:
    mentions = " ".join(user.mention for user in slack_users)
    return [_markdown_section(f"{mentions}, you were mentioned in a comment")]


def render_basic_action(webhook: Webhook) -> List[Block]:
    return [
        _markdown_section(
            f"{format_pull_request_url(webhook.pull_request)} was {webhook.action.value}"
        )
    ]


def render_message(webhook: Webhook, slack_users: List[SlackUser]) -> List[Block]:
    """Return the blocks announcing ``webhook`` in Slack."""
    if webhook.action == WebhookAction.OPENED:
        return render_pr_opened(webhook)
    if webhook.action == WebhookAction.REVIEWED:
        return render_reviewed(webhook, webhook.review, slack_users)
    if webhook.action == WebhookAction.REVIEW_REQUESTED:
        return render_review_requested(webhook, webhook.requested_reviewer, slack_users)
    if webhook.action == WebhookAction.CREATED:
        return render_comment(slack_users)
    return render_basic_action(webhook)


def fallback_text(blocks: List[Block]) -> str:
    """Plain text used by Slack for notifications and clients without block support."""
    for block in blocks:
        text = block.get("text") or {}
        if block.get("type") == "section" and text.get("text"):
            return text["text"]
    for block in blocks:
        text = block.get("text") or {}
        if text.get("text"):
            return text["text"]
    return ""
