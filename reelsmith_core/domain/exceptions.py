"""
Standard exceptions for reelsmith.

Each pipeline stage has its own error type so callers (and the ledger) can
tell a rejected submission from a generation that simply ran out of time.
"""

from __future__ import annotations

from reelsmith_core.runtime.errors import ErrorCode, RetryableError, TerminalError


class SubmissionError(TerminalError):
    """The provider refused to create the job. Never retried."""

    def __init__(self, body: str, status_code: int | None = None, **kwargs):
        super().__init__(
            code=ErrorCode.SUBMISSION_FAILED,
            message_safe=body,
            message_debug=f"status={status_code}",
            **kwargs,
        )
        self.status_code = status_code


class ProviderContractError(TerminalError):
    """The provider answered 2xx but the payload is missing required fields."""

    def __init__(self, message: str, **kwargs):
        super().__init__(code=ErrorCode.PROVIDER_CONTRACT, message_safe=message, **kwargs)


class PollError(TerminalError):
    """A status query failed at the transport or HTTP level."""

    def __init__(self, body: str, status_code: int | None = None, **kwargs):
        super().__init__(
            code=ErrorCode.POLL_FAILED,
            message_safe=body,
            message_debug=f"status={status_code}",
            **kwargs,
        )
        self.status_code = status_code


class GenerationFailedError(TerminalError):
    """The provider reported the job as failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(code=ErrorCode.GENERATION_FAILED, message_safe=message, **kwargs)


class GenerationTimeoutError(RetryableError):
    """The poll budget ran out before the job reached a terminal status."""

    def __init__(self, message: str, last_status: str | None = None, **kwargs):
        super().__init__(code=ErrorCode.GENERATION_TIMEOUT, message_safe=message, **kwargs)
        self.last_status = last_status


class ArtifactNotReadyError(RetryableError):
    """The job completed but its artifact never became retrievable in budget."""

    def __init__(self, message: str, attempts: int = 0, **kwargs):
        super().__init__(code=ErrorCode.ARTIFACT_NOT_READY, message_safe=message, **kwargs)
        self.attempts = attempts


class ArtifactDownloadError(TerminalError):
    """Artifact retrieval failed in a way that waiting will not fix."""

    def __init__(self, body: str, status_code: int | None = None, **kwargs):
        super().__init__(
            code=ErrorCode.DOWNLOAD_FAILED,
            message_safe=body,
            message_debug=f"status={status_code}",
            **kwargs,
        )
        self.status_code = status_code


class StorageError(TerminalError):
    """Upload or public URL resolution failed."""

    def __init__(self, message: str, code: str = ErrorCode.STORAGE_WRITE_ERROR, **kwargs):
        super().__init__(code=code, message_safe=message, **kwargs)


class LedgerError(TerminalError):
    """The status ledger rejected or could not apply a write."""

    def __init__(self, message: str, **kwargs):
        super().__init__(code=ErrorCode.LEDGER_ERROR, message_safe=message, **kwargs)


class InvalidTransitionError(TerminalError):
    """A status change that would regress or leave a terminal state."""

    def __init__(self, current: str, target: str, **kwargs):
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message_safe=f"Cannot move job from '{current}' to '{target}'",
            **kwargs,
        )
        self.current = current
        self.target = target


class JobNotFoundError(TerminalError):
    """No ledger row exists for the given id."""

    def __init__(self, job_id: str, **kwargs):
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message_safe=f"Generation '{job_id}' not found",
            **kwargs,
        )
        self.job_id = job_id


class PromptError(TerminalError):
    """The prompt director could not produce a directive."""

    def __init__(self, message: str, **kwargs):
        super().__init__(code=ErrorCode.PROMPT_FAILED, message_safe=message, **kwargs)


class ConfigurationError(TerminalError):
    """A required setting (API key, bucket) is missing."""

    def __init__(self, message: str, **kwargs):
        super().__init__(code=ErrorCode.CONFIGURATION_ERROR, message_safe=message, **kwargs)
