"""
Service runtime layer for reelsmith.

This package provides shared infrastructure for the generation pipeline:
- RunContext: Request-scoped context with correlation ID and deadline
- ServiceError: Standardized errors with retry semantics
- ProviderHttpClient: Pooled async HTTP client for the video provider
- StageBudget: Fixed-interval wall-clock budgets for repeating stages
"""

from .budget import Countdown, StageBudget
from .context import RunContext
from .errors import ErrorCode, RetryableError, ServiceError, TerminalError
from .http_client import ProviderHttpClient, ProviderResponseError

__all__ = [
    "Countdown",
    "ErrorCode",
    "ProviderHttpClient",
    "ProviderResponseError",
    "RetryableError",
    "RunContext",
    "ServiceError",
    "StageBudget",
    "TerminalError",
]
