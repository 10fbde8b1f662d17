"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    field: str
    http_status: int
    retry_after: float
    provider: str
    model: str
    request_id: str
    errors: list[dict[str, str]]
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class LLMAppError(AppError):
    """Raised when LLM provider/client operations fail."""


class SearchAppError(AppError):
    """Raised when the news search provider is missing or fails."""


class QuotaStoreConfigError(AppError):
    """Raised when the quota store is constructed without URL or token."""

    def __init__(self, message: str, details: ErrorDetails | None = None) -> None:
        super().__init__(code="quota_store_not_configured", message=message, details=details)


class RateLimitError(AppError):
    """Raised when the rate limiter cannot reach a decision.

    Covers a missing store configuration, an unreachable store and a malformed
    store response. Never raised for an exceeded quota.
    """

    def __init__(self, message: str, details: ErrorDetails | None = None) -> None:
        super().__init__(code="rate_limit_unavailable", message=message, details=details)


class QuotaExceededAppError(AppError):
    """Raised by the HTTP layer when a client has used its daily quota."""

    def __init__(self, *, limit: int, remaining: int, reset_time: datetime, retry_after: int) -> None:
        super().__init__(
            code="rate_limit_exceeded",
            message=(
                f"Daily rate limit exceeded ({limit} request/day). "
                "Please try again tomorrow."
            ),
        )
        self.limit = limit
        self.remaining = remaining
        self.reset_time = reset_time
        self.retry_after = retry_after
