"""
Webhook to Slack notification pipeline.

``NotificationService.handle_webhook`` ties the other services together:
it de‑anonymises the e‑mails in the payload, works out who should be
mentioned, renders the message and posts it in the pull request's
thread, starting the thread when there is none yet.
"""

import logging
from typing import Any, Dict, List

from gitea_notifier.app.schemas.webhook import Webhook, WebhookAction
from gitea_notifier.app.services.gitea_service import GiteaAPIError, GiteaService
from gitea_notifier.app.services.render_service import fallback_text, render_message
from gitea_notifier.app.services.slack_service import SlackService
from gitea_notifier.app.services.thread_service import ThreadService


logger = logging.getLogger(__name__)


class NotificationService:
    """Service turning Gitea webhooks into Slack messages."""

    @classmethod
    def target_emails(cls, webhook: Webhook) -> List[str]:
        """E‑mails of the people the message about ``webhook`` should mention."""
        if webhook.action == WebhookAction.REVIEW_REQUESTED:
            return [webhook.requested_reviewer.email]
        if webhook.action == WebhookAction.REVIEWED:
            return [webhook.pull_request.user.email]
        if webhook.action == WebhookAction.CREATED:
            try:
                base_url = GiteaService.base_url_for(webhook)
            except GiteaAPIError as exc:
                logger.warning("Cannot resolve comment mentions: %s", exc)
                return []
            return GiteaService.mention_emails(base_url, webhook.comment)
        return []

    @classmethod
    def handle_webhook(cls, webhook: Webhook) -> Dict[str, Any]:
        """Post the Slack message for ``webhook``.

        Returns ``{"status": "skipped"}`` for comments that mention nobody
        known to Slack, otherwise ``{"status": "posted", "ts": ...,
        "thread_ts": ...}``.
        """
        repository = webhook.repository.full_name
        number = webhook.pull_request.number
        logger.info("Handling %s webhook for %s#%d", webhook.action.value, repository, number)

        GiteaService.deanonymise(webhook)
        emails = [email for email in cls.target_emails(webhook) if email]
        slack_users = SlackService.find_users(emails)

        if webhook.action == WebhookAction.CREATED and not slack_users:
            logger.info("Comment on %s#%d mentions no Slack user, skipping", repository, number)
            return {"status": "skipped"}

        blocks = render_message(webhook, slack_users)
        thread_ts = ThreadService.get_thread_ts(repository, number)
        ts = SlackService.post_message(blocks, fallback_text(blocks), thread_ts=thread_ts)
        if thread_ts is None:
            ThreadService.save_thread_ts(repository, number, ts)
        return {"status": "posted", "ts": ts, "thread_ts": thread_ts}
