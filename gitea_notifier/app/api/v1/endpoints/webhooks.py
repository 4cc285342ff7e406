"""
Webhook endpoints for API v1.

Gitea is configured to deliver pull request, pull request review and
issue comment events to ``POST /api/v1/webhooks/gitea``.  Deliveries with
actions the notifier does not announce (``edited``, ``synchronized``,
``label_updated`` and so on) are acknowledged and ignored so that Gitea
does not mark the hook as failing.
"""

import json
import logging
from typing import Any, Dict

import psycopg2
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from gitea_notifier.app.core.config import ConfigurationError
from gitea_notifier.app.core.security import verified_body
from gitea_notifier.app.schemas.webhook import RepositoryNameError, Webhook, is_supported_action
from gitea_notifier.app.services.notification_service import NotificationService
from gitea_notifier.app.services.slack_service import SlackAPIError


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/gitea")
async def receive_gitea_webhook(body: bytes = Depends(verified_body)) -> Dict[str, Any]:
    """Announce a Gitea webhook delivery in Slack."""
    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body must be JSON")

    if not is_supported_action(payload):
        logger.debug("Ignoring webhook with action %r", payload.get("action") if isinstance(payload, dict) else None)
        return {"status": "ignored"}

    try:
        webhook = Webhook.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        )

    # The pipeline makes blocking HTTP and database calls
    try:
        return await run_in_threadpool(NotificationService.handle_webhook, webhook)
    except RepositoryNameError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    except (SlackAPIError, ConfigurationError) as exc:
        logger.error("Failed to post Slack message: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    except psycopg2.Error as exc:
        logger.error("Database error while handling webhook: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
