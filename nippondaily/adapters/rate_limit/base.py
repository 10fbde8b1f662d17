"""Quota store interfaces and rate limit value types.

The limiter depends on AbstractQuotaStore only, so the Redis adapter can be
replaced by an in-memory double in tests or another shared store later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-call limiter configuration.

    Attributes:
        store_url: Quota store connection URL.
        store_token: Quota store password / access token.
        max_requests: Requests allowed per window; falsy means the default (3).
    """

    store_url: str | None
    store_token: str | None
    max_requests: int | None = None


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single quota check.

    Attributes:
        allowed: Whether the request may proceed.
        remaining: ``max(0, limit - count)`` where count excludes this request.
        reset_time: Now plus the window duration (UTC).
        limit: Effective maximum requests per window.
    """

    allowed: bool
    remaining: int
    reset_time: datetime
    limit: int


class AbstractQuotaStore(ABC):
    """Atomic sliding-window accounting against a shared store."""

    @abstractmethod
    async def record_and_count(
        self,
        key: str,
        *,
        window_start_ms: int,
        now_ms: int,
        member: str,
        ttl_seconds: int,
    ) -> list[Any] | None:
        """Prune, count, insert and refresh expiry in one atomic round trip.

        Args:
            key: Store key for the identifier.
            window_start_ms: Entries scored at or below this are removed.
            now_ms: Score of the inserted entry.
            member: Unique member for the inserted entry.
            ttl_seconds: Expiry applied to the key.

        Returns:
            Raw per-command results ``[removed, count, added, expire_ok]``.
            Index 1 is the count before insertion.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections held by the store client."""
