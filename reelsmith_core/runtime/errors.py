"""
Standardized error model with retry semantics.

Every failure the generation pipeline can report is a ServiceError. The
``retryable`` flag tells the caller whether submitting the same request
again later is sensible (timeouts, artifact not yet available) or not
(rejected prompt, storage outage that needs an operator).
"""

from __future__ import annotations

import uuid
from typing import Any


class ServiceError(Exception):
    """Standardized service error with retry classification.

    Attributes:
        code: Error code for programmatic handling.
        message_safe: Message written to the ledger and returned to callers.
        message_debug: Optional detailed message for debugging.
        retryable: Whether retry-by-caller is sensible.
        cause: Optional underlying exception.
        debug_id: Unique identifier for support tickets.
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        retryable: bool = False,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.retryable = retryable
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message_safe={self.message_safe!r}, "
            f"retryable={self.retryable}, "
            f"debug_id={self.debug_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses (excludes debug info)."""
        return {
            "code": self.code,
            "message": self.message_safe,
            "retryable": self.retryable,
            "debug_id": self.debug_id,
        }


class RetryableError(ServiceError):
    """The job gave up, but the same request may succeed if tried again later.

    Use this for budget exhaustion: poll timeouts and artifacts that the
    provider has not made available yet.
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=True,
            cause=cause,
            debug_id=debug_id,
        )


class TerminalError(ServiceError):
    """Error that indicates the operation should not be retried.

    Use this for permanent failures like:
    - Rejected submissions (malformed prompt, quota)
    - Provider-reported generation failures
    - Contract violations and storage errors
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=False,
            cause=cause,
            debug_id=debug_id,
        )


class ErrorCode:
    """Standard error codes for the generation pipeline."""

    # Provider
    SUBMISSION_FAILED = "SUBMISSION_FAILED"
    PROVIDER_CONTRACT = "PROVIDER_CONTRACT"
    POLL_FAILED = "POLL_FAILED"
    GENERATION_FAILED = "GENERATION_FAILED"
    GENERATION_TIMEOUT = "GENERATION_TIMEOUT"
    ARTIFACT_NOT_READY = "ARTIFACT_NOT_READY"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"

    # Storage
    STORAGE_WRITE_ERROR = "STORAGE_WRITE_ERROR"
    STORAGE_URL_ERROR = "STORAGE_URL_ERROR"

    # Ledger
    LEDGER_ERROR = "LEDGER_ERROR"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    NOT_FOUND = "NOT_FOUND"

    # Prompt director
    PROMPT_FAILED = "PROMPT_FAILED"

    # Internal
    CANCELLED = "CANCELLED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
