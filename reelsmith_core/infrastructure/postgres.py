"""
PostgreSQL access for the video generation ledger.

Each ledger call opens and closes its own connection, so pipeline runs
executing in worker threads never share a transaction.
"""

import psycopg
from loguru import logger

from reelsmith_core.config import settings


def get_db_connection(dsn: str | None = None):
    """
    Open a connection to the ledger database.

    Use it as a context manager; the block commits on success and the
    connection is closed on exit:

        with get_db_connection() as conn:
            conn.execute("SELECT status FROM video_generations WHERE id = %s", (job_id,))

    Args:
        dsn: Connection string override (defaults to settings.POSTGRES_DSN).
    """
    try:
        conn = psycopg.connect(dsn or settings.POSTGRES_DSN)
        logger.debug("Opened ledger connection")
        return conn
    except psycopg.Error as e:
        logger.error(f"Could not reach ledger database: {e}")
        raise
