"""
Ledger status state machine.

A job moves forward through ``queued -> generating -> uploading ->
completed``. ``failed`` is reachable from any non-terminal status.
``completed`` and ``failed`` are terminal.
"""

from __future__ import annotations

from enum import Enum

from reelsmith_core.domain.exceptions import InvalidTransitionError


class VideoStatus(str, Enum):
    """Canonical status values of a generation job."""

    QUEUED = "queued"
    GENERATING = "generating"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({VideoStatus.COMPLETED, VideoStatus.FAILED})

# Forward progression; FAILED is handled separately.
_ORDER = (
    VideoStatus.QUEUED,
    VideoStatus.GENERATING,
    VideoStatus.UPLOADING,
    VideoStatus.COMPLETED,
)


def can_transition(current: VideoStatus | str, target: VideoStatus | str) -> bool:
    """Whether a job in ``current`` may move to ``target``."""
    current = VideoStatus(current)
    target = VideoStatus(target)

    if current.is_terminal:
        return False
    if target is VideoStatus.FAILED:
        return True
    return _ORDER.index(target) == _ORDER.index(current) + 1


def transition(current: VideoStatus | str, target: VideoStatus | str) -> VideoStatus:
    """
    Validate a status change and return the new status.

    Raises:
        InvalidTransitionError: If the change would regress, skip a stage,
            or leave a terminal status.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(str(VideoStatus(current).value), str(VideoStatus(target).value))
    return VideoStatus(target)


def allowed_predecessors(target: VideoStatus | str) -> tuple[VideoStatus, ...]:
    """Statuses from which ``target`` can be reached (used to guard UPDATEs)."""
    target = VideoStatus(target)
    return tuple(status for status in VideoStatus if can_transition(status, target))
