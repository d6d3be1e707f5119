"""
Request-scoped context for pipeline runs.

RunContext carries the correlation ID and the caller's deadline across the
pipeline stages. Stage budgets are clamped to whatever is left of the
deadline so no stage can outlive the request that started it.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from .budget import StageBudget


class RunContext(BaseModel):
    """Request-scoped context for a generation run.

    Attributes:
        request_id: Unique identifier for request tracing.
        job_id: Ledger id of the job, once the row exists.
        deadline: Optional absolute (UTC) deadline for the whole pipeline.
    """

    request_id: str
    job_id: str | None = None
    deadline: datetime | None = None

    model_config = {"frozen": True}

    @classmethod
    def new(cls, deadline_seconds: float | None = None) -> "RunContext":
        """Create a fresh context, optionally with a relative deadline."""
        deadline = None
        if deadline_seconds is not None:
            deadline = datetime.now(timezone.utc) + timedelta(seconds=deadline_seconds)
        return cls(request_id=str(uuid.uuid4()), deadline=deadline)

    def with_job(self, job_id: str) -> "RunContext":
        """Return a new context bound to a ledger job id."""
        return self.model_copy(update={"job_id": job_id})

    def with_deadline(self, deadline: datetime) -> "RunContext":
        """Return a new context with the specified deadline."""
        return self.model_copy(update={"deadline": deadline})

    def remaining_seconds(self) -> float | None:
        """Seconds left before the deadline (never negative), or None."""
        if self.deadline is None:
            return None
        remaining = (self.deadline - datetime.now(timezone.utc)).total_seconds()
        return max(0.0, remaining)

    def bound(self, budget: StageBudget) -> StageBudget:
        """Limit a stage budget to the time remaining before the deadline."""
        remaining = self.remaining_seconds()
        if remaining is None:
            return budget
        return budget.clamped(remaining)

    @property
    def tag(self) -> str:
        """Log prefix for this run."""
        return f"[{self.job_id or self.request_id}]"

    def get_headers(self) -> dict[str, str]:
        """Get HTTP headers for propagating context to the provider."""
        return {"X-Request-Id": self.request_id}
