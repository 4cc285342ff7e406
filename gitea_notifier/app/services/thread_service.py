"""
Persistence of Slack thread roots.

The first message posted about a pull request becomes the thread root;
every later message about the same pull request is posted as a reply to
it.  Roots are keyed by repository ``full_name`` and pull request number,
which are the same for pull request and issue comment webhooks.
"""

import logging
from typing import Optional

from gitea_notifier.app.core.db import get_cursor


logger = logging.getLogger(__name__)


class ThreadService:
    """Service for storing and retrieving thread roots in ``slack_threads``."""

    @classmethod
    def get_thread_ts(cls, repository: str, number: int) -> Optional[str]:
        """Return the thread root ``ts`` for a pull request, or ``None``."""
        with get_cursor() as cursor:
            cursor.execute(
                "SELECT thread_ts FROM slack_threads WHERE repository = %s AND number = %s",
                (repository, number),
            )
            row = cursor.fetchone()
        return row["thread_ts"] if row else None

    @classmethod
    def save_thread_ts(cls, repository: str, number: int, thread_ts: str) -> bool:
        """Record ``thread_ts`` as the thread root of a pull request.

        An existing root is kept.  Returns ``True`` if a row was inserted.
        """
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO slack_threads (repository, number, thread_ts)
                VALUES (%s, %s, %s)
                ON CONFLICT (repository, number) DO NOTHING
                """,
                (repository, number, thread_ts),
            )
            inserted = cursor.rowcount == 1
        if inserted:
            logger.info("Thread %s started for %s#%d", thread_ts, repository, number)
        return inserted
