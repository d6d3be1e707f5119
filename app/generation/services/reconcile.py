"""
Reconciliation of abandoned generation jobs.

A process killed mid-pipeline leaves its ledger row in a non-terminal
status. This marks such rows failed once they are older than a cutoff.
Jobs are never resumed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger

from app.generation.services.ledger import VideoLedgerService
from reelsmith_core.config import settings

ABANDONED_MESSAGE = "Abandoned: pipeline did not reach a terminal state"


def reconcile_stale_jobs(
    max_age_minutes: Optional[int] = None,
    ledger: Optional[VideoLedgerService] = None,
) -> dict:
    """
    Fail non-terminal jobs older than the cutoff.

    Args:
        max_age_minutes: Override age in minutes (defaults to STALE_JOB_MAX_AGE_MINUTES).
        ledger: Optional ledger service (for testing).

    Returns:
        dict: Summary with the failed job ids and the cutoff.
    """
    age = max_age_minutes if max_age_minutes is not None else settings.STALE_JOB_MAX_AGE_MINUTES
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=age)
    ledger = ledger or VideoLedgerService()

    job_ids = ledger.fail_stale_jobs(older_than=cutoff, error=ABANDONED_MESSAGE)

    logger.info(f"Reconciliation complete: failed={len(job_ids)}, cutoff={cutoff.isoformat()}")
    return {"failed": len(job_ids), "job_ids": job_ids, "cutoff": cutoff.isoformat()}
