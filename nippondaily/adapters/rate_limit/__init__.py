"""Quota store adapters for the daily rate limiter.

The limiter talks to AbstractQuotaStore; Redis is the only production
backend because counts must be shared across every app instance.
"""

from nippondaily.adapters.rate_limit.base import (
    AbstractQuotaStore,
    RateLimitConfig,
    RateLimitResult,
)
from nippondaily.adapters.rate_limit.redis_store import RedisQuotaStore

__all__ = [
    "AbstractQuotaStore",
    "RateLimitConfig",
    "RateLimitResult",
    "RedisQuotaStore",
]
