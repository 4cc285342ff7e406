"""
PostgreSQL integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a cursor context manager (``get_cursor``) and
``init_db`` which applies migrations on application start.  Connection
parameters come from ``settings``: ``DATABASE_URL`` when set, otherwise
the ``POSTGRES_*`` values that ``compose.yaml`` passes to both the
server and the database container.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  Migration 1
is the same schema that ``init.sql`` creates on first database start,
so either path leaves the database in the same state.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extras import RealDictCursor

from .config import settings


logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: thread roots of pull request conversations
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS slack_threads (
            repository TEXT NOT NULL,
            number BIGINT NOT NULL,
            thread_ts TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            PRIMARY KEY (repository, number)
        );
        """,
    ),
]


def get_connection():
    """Open a psycopg2 connection to the notifier database.

    Returns:
        psycopg2.extensions.connection: Open database connection.

    Raises:
        psycopg2.OperationalError: If the database is unreachable or credentials are invalid.
    """
    if settings.database_url:
        return psycopg2.connect(settings.database_url)
    return psycopg2.connect(
        host=settings.postgres_host,
        port=settings.postgres_port,
        dbname=settings.postgres_db,
        user=settings.postgres_user,
        password=settings.postgres_password,
    )


@contextmanager
def get_cursor() -> Iterator[RealDictCursor]:
    """Yield a dict-row cursor, committing on success and closing the connection on exit."""
    conn = get_connection()
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cursor:
            yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  To add a migration, append it with an incremented
    version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying database migration %d", version)
                cursor.execute(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (%s)", (version,)
                )
                current_version = version
