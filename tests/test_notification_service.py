"""
Test suite for the webhook to Slack pipeline.

Gitea, Slack and the thread store are replaced with mocks so that the
tests check only the decisions ``NotificationService`` makes: who is
mentioned, when a message is skipped and how threads are started.
"""

from unittest.mock import patch

import pytest

from gitea_notifier.app.schemas.slack import SlackUser
from gitea_notifier.app.schemas.webhook import Webhook
from gitea_notifier.app.services.notification_service import NotificationService


MODULE = "gitea_notifier.app.services.notification_service"


@pytest.fixture
def services():
    """Patch every collaborator of ``NotificationService``."""
    with patch(f"{MODULE}.GiteaService") as gitea, patch(f"{MODULE}.SlackService") as slack, patch(
        f"{MODULE}.ThreadService"
    ) as threads:
        gitea.deanonymise.side_effect = lambda webhook: webhook
        gitea.base_url_for.return_value = "https://git.example.com"
        slack.find_users.return_value = []
        slack.post_message.return_value = "111.222"
        threads.get_thread_ts.return_value = None
        yield gitea, slack, threads


class TestTargetEmails:
    def test_review_requested_targets_reviewer(self, pr_payload, services):
        pr_payload["action"] = "review_requested"
        pr_payload["requested_reviewer"] = {"email": "bob@example.com", "username": "bob"}
        webhook = Webhook.model_validate(pr_payload)

        assert NotificationService.target_emails(webhook) == ["bob@example.com"]

    def test_reviewed_targets_author(self, pr_payload, services):
        pr_payload["action"] = "reviewed"
        pr_payload["review"] = {"type": "pull_request_review_rejected", "content": ""}
        webhook = Webhook.model_validate(pr_payload)

        assert NotificationService.target_emails(webhook) == ["alice@noreply.git.example.com"]

    def test_comment_targets_mentions(self, comment_payload, services):
        gitea, _, _ = services
        gitea.mention_emails.return_value = ["bob@example.com"]
        webhook = Webhook.model_validate(comment_payload)

        assert NotificationService.target_emails(webhook) == ["bob@example.com"]
        gitea.mention_emails.assert_called_once_with("https://git.example.com", webhook.comment)

    @pytest.mark.parametrize("action", ["opened", "closed", "reopened"])
    def test_other_actions_target_nobody(self, pr_payload, services, action):
        pr_payload["action"] = action
        assert NotificationService.target_emails(Webhook.model_validate(pr_payload)) == []


class TestHandleWebhook:
    def test_first_message_starts_thread(self, pr_payload, services):
        gitea, slack, threads = services
        webhook = Webhook.model_validate(pr_payload)

        result = NotificationService.handle_webhook(webhook)

        assert result == {"status": "posted", "ts": "111.222", "thread_ts": None}
        gitea.deanonymise.assert_called_once_with(webhook)
        blocks, text = slack.post_message.call_args.args
        assert blocks[0]["type"] == "header"
        assert text.startswith("Pull request <https://git.example.com/org/project/pulls/7|Add the thing>")
        assert slack.post_message.call_args.kwargs == {"thread_ts": None}
        threads.save_thread_ts.assert_called_once_with("org/project", 7, "111.222")

    def test_later_messages_reply_in_thread(self, pr_payload, services):
        _, slack, threads = services
        threads.get_thread_ts.return_value = "100.000"
        pr_payload["action"] = "closed"

        result = NotificationService.handle_webhook(Webhook.model_validate(pr_payload))

        assert result == {"status": "posted", "ts": "111.222", "thread_ts": "100.000"}
        assert slack.post_message.call_args.kwargs == {"thread_ts": "100.000"}
        threads.save_thread_ts.assert_not_called()

    def test_review_request_mentions_slack_user(self, pr_payload, services):
        _, slack, _ = services
        slack.find_users.return_value = [SlackUser(id="U9")]
        pr_payload["action"] = "review_requested"
        pr_payload["requested_reviewer"] = {"email": "bob@example.com", "username": "bob"}

        NotificationService.handle_webhook(Webhook.model_validate(pr_payload))

        slack.find_users.assert_called_once_with(["bob@example.com"])
        blocks, _ = slack.post_message.call_args.args
        assert blocks[0]["text"]["text"].startswith("<@U9>, alice has requested you to review")

    def test_comment_without_known_mentions_is_skipped(self, comment_payload, services):
        gitea, slack, threads = services
        gitea.mention_emails.return_value = ["ghost@example.com"]

        result = NotificationService.handle_webhook(Webhook.model_validate(comment_payload))

        assert result == {"status": "skipped"}
        slack.post_message.assert_not_called()
        threads.get_thread_ts.assert_not_called()

    def test_comment_is_threaded_by_pull_request_number(self, comment_payload, services):
        gitea, slack, threads = services
        gitea.mention_emails.return_value = ["bob@example.com"]
        slack.find_users.return_value = [SlackUser(id="U1")]
        threads.get_thread_ts.return_value = "100.000"

        result = NotificationService.handle_webhook(Webhook.model_validate(comment_payload))

        assert result["status"] == "posted"
        threads.get_thread_ts.assert_called_once_with("org/project", 7)
        blocks, _ = slack.post_message.call_args.args
        assert blocks[0]["text"]["text"] == "<@U1>, you were mentioned in a comment"

    def test_empty_emails_are_not_looked_up(self, pr_payload, services):
        _, slack, _ = services
        pr_payload["action"] = "review_requested"
        pr_payload["requested_reviewer"] = {"email": "", "username": "bob"}

        NotificationService.handle_webhook(Webhook.model_validate(pr_payload))

        slack.find_users.assert_called_once_with([])
