"""
Time budgets for interval-driven stages.

Polling and artifact retrieval both repeat an action at a fixed spacing
until it succeeds or a wall-clock budget runs out. StageBudget holds the
two numbers; Countdown measures one run against them.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class StageBudget(BaseModel):
    """Fixed-interval budget for a repeating stage.

    Attributes:
        interval: Seconds to wait between attempts.
        timeout: Total wall-clock seconds the stage may spend.
    """

    interval: float = Field(default=2.0, gt=0)
    timeout: float = Field(default=180.0, ge=0)

    model_config = {"frozen": True}

    def clamped(self, limit: float) -> "StageBudget":
        """Return a copy whose timeout does not exceed ``limit``."""
        if limit >= self.timeout:
            return self
        return self.model_copy(update={"timeout": max(0.0, limit)})

    def start(self, clock: Clock = time.monotonic) -> "Countdown":
        """Begin measuring a run of this stage."""
        return Countdown(self, clock)


class Countdown:
    """Tracks elapsed time of one stage run against its budget."""

    def __init__(self, budget: StageBudget, clock: Clock = time.monotonic):
        self.budget = budget
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    def remaining(self) -> float:
        return max(0.0, self.budget.timeout - self.elapsed)

    def expired(self) -> bool:
        return self.elapsed >= self.budget.timeout

    def next_delay(self) -> float:
        """Interval to sleep before the next attempt, never past the budget."""
        return min(self.budget.interval, self.remaining())
