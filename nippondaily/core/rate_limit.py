"""Rate limiting dependency for FastAPI routes.

Wires the daily quota limiter into the HTTP layer:
- identifier: client IP (see core.client_ip)
- quota exceeded -> QuotaExceededAppError (429 with retry metadata)
- limiter unavailable -> RateLimitError propagates (500)
- anything else propagates unchanged to the generic handler
"""

from __future__ import annotations

import logging

from fastapi import Request

from nippondaily.adapters.rate_limit.base import RateLimitResult
from nippondaily.core.client_ip import client_identifier_from_request
from nippondaily.core.errors import QuotaExceededAppError
from nippondaily.core.logging import hash_identifier
from nippondaily.services.rate_limiter import (
    WINDOW_SECONDS,
    build_rate_limit_config,
    get_rate_limiter,
)

logger = logging.getLogger(__name__)


async def enforce_rate_limit(request: Request) -> RateLimitResult:
    """FastAPI dependency consuming one unit of the caller's daily quota.

    Args:
        request: FastAPI request.

    Returns:
        RateLimitResult for the allowed request (also stored on
        ``request.state.rate_limit``).

    Raises:
        QuotaExceededAppError: The caller has no quota left today.
        RateLimitError: The quota store is not configured or unavailable.
    """

    identifier = client_identifier_from_request(request)
    key_hash = hash_identifier(identifier)

    result = await get_rate_limiter().check_rate_limit(identifier, build_rate_limit_config())
    request.state.rate_limit = result

    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": WINDOW_SECONDS,
            },
        )
        return result

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": WINDOW_SECONDS,
            "reset_time": result.reset_time.isoformat(),
        },
    )
    raise QuotaExceededAppError(
        limit=result.limit,
        remaining=result.remaining,
        reset_time=result.reset_time,
        retry_after=WINDOW_SECONDS,
    )
