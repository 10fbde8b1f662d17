"""Daily sliding-window rate limiter.

Policy layer over a quota store: computes the 24h window, decides
allow/deny from the count observed *before* the current request, and maps
every store failure to RateLimitError. The limiter keeps no in-process state;
all counting happens in the shared store so multiple app instances agree.

Every call records the request, including denied ones. Denied entries age out
with the window like any other.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from nippondaily.adapters.rate_limit.base import (
    AbstractQuotaStore,
    RateLimitConfig,
    RateLimitResult,
)
from nippondaily.adapters.rate_limit.redis_store import RedisQuotaStore
from nippondaily.core.config import settings
from nippondaily.core.errors import QuotaStoreConfigError, RateLimitError
from nippondaily.core.logging import hash_identifier

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 86400
DEFAULT_MAX_REQUESTS = 3
KEY_PREFIX = "ratelimit:"

NOT_CONFIGURED_MESSAGE = (
    "Redis not configured: REDIS_URL and REDIS_TOKEN environment variables "
    "are required for rate limiting"
)
PIPELINE_FAILED_MESSAGE = "Failed to execute rate limit pipeline"

StoreFactory = Callable[[str | None, str | None], AbstractQuotaStore]


def _default_store_factory(url: str | None, token: str | None) -> AbstractQuotaStore:
    return RedisQuotaStore(
        url,
        token,
        timeout_seconds=settings.rate_limit.redis_timeout_seconds,
    )


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


def _default_member(now_ms: int) -> str:
    return f"{now_ms}-{secrets.token_hex(8)}"


def build_rate_limit_config() -> RateLimitConfig:
    """Snapshot the current settings into a per-call limiter config."""

    return RateLimitConfig(
        store_url=settings.rate_limit.redis_url,
        store_token=settings.rate_limit.redis_token,
        max_requests=settings.rate_limit.rate_limit_max_requests,
    )


def _validate_results(results: Any) -> int:
    if not results or len(results) < 4 or results[1] is None:
        raise RateLimitError(PIPELINE_FAILED_MESSAGE)
    return int(results[1])


class RateLimiter:
    """Decide whether an identifier may make another request today.

    Attributes:
        store_factory: Builds a quota store from (url, token) for each call.
        clock: Returns the current UTC time.
        member_factory: Builds the unique sorted-set member for a timestamp.
    """

    def __init__(
        self,
        store_factory: StoreFactory | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        member_factory: Callable[[int], str] | None = None,
    ) -> None:
        self.store_factory = store_factory or _default_store_factory
        self.clock = clock or _default_clock
        self.member_factory = member_factory or _default_member

    def _open_store(self, config: RateLimitConfig) -> AbstractQuotaStore:
        try:
            return self.store_factory(config.store_url, config.store_token)
        except QuotaStoreConfigError as exc:
            logger.error(
                "rate_limit.store_not_configured",
                extra={
                    "has_url": bool(config.store_url),
                    "has_token": bool(config.store_token),
                },
            )
            raise RateLimitError(NOT_CONFIGURED_MESSAGE) from exc
        except Exception as exc:
            logger.error(
                "rate_limit.store_init_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            raise RateLimitError(f"Redis initialization failed: {exc}") from exc

    async def check_rate_limit(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Record one request for ``identifier`` and decide whether it is allowed.

        Args:
            identifier: Non-empty partition key, normally the client IP.
            config: Store credentials and max requests for this call.

        Returns:
            RateLimitResult. ``allowed`` is False once the identifier has
            used ``limit`` requests within the last 24 hours.

        Raises:
            RateLimitError: Store not configured, unreachable, or returned a
                malformed response. Never returned as an implicit allow.
        """

        limit = config.max_requests or DEFAULT_MAX_REQUESTS
        store = self._open_store(config)

        now = self.clock()
        now_ms = int(now.timestamp() * 1000)
        window_start_ms = now_ms - WINDOW_SECONDS * 1000

        try:
            results = await store.record_and_count(
                f"{KEY_PREFIX}{identifier}",
                window_start_ms=window_start_ms,
                now_ms=now_ms,
                member=self.member_factory(now_ms),
                ttl_seconds=WINDOW_SECONDS,
            )
            current_count = _validate_results(results)
        except RateLimitError as exc:
            logger.error(
                "rate_limit.pipeline_invalid",
                extra={"key_hash": hash_identifier(identifier), "error_msg": exc.message},
            )
            raise
        except Exception as exc:
            logger.error(
                "rate_limit.store_unavailable",
                extra={
                    "key_hash": hash_identifier(identifier),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise RateLimitError(f"Redis not available or not working: {exc}") from exc
        finally:
            await self._close_store(store)

        return RateLimitResult(
            allowed=current_count < limit,
            remaining=max(0, limit - current_count),
            reset_time=now + timedelta(seconds=WINDOW_SECONDS),
            limit=limit,
        )

    @staticmethod
    async def _close_store(store: AbstractQuotaStore) -> None:
        try:
            await store.aclose()
        except Exception as exc:
            # The decision is already made; a failed disconnect must not change it.
            logger.warning(
                "rate_limit.store_close_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )


_default_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    return _default_limiter


async def check_rate_limit(identifier: str, config: RateLimitConfig | None = None) -> RateLimitResult:
    """Module-level entry point using the default Redis-backed limiter."""

    return await get_rate_limiter().check_rate_limit(identifier, config or build_rate_limit_config())
