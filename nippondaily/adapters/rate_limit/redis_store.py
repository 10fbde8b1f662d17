"""Redis sorted-set quota store.

Each identifier owns a sorted set ``ratelimit:<identifier>`` whose members are
unique request tokens scored by their timestamp in milliseconds. One
MULTI/EXEC transaction prunes expired entries, counts the rest, records the
current request and refreshes the key TTL, so concurrent callers observe a
total order of counts.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import redis.asyncio as aioredis

from nippondaily.adapters.rate_limit.base import AbstractQuotaStore
from nippondaily.core.errors import QuotaStoreConfigError

logger = logging.getLogger(__name__)


def _embedded_password(url: str) -> bool:
    try:
        return bool(urlparse(url).password)
    except ValueError:
        return False


class RedisQuotaStore(AbstractQuotaStore):
    """Quota store backed by a Redis server (self-hosted or managed).

    The client is created eagerly but connects lazily on the first command;
    callers are expected to ``aclose()`` the store when done.
    """

    def __init__(
        self,
        url: str | None,
        token: str | None,
        *,
        timeout_seconds: float = 5.0,
        client: aioredis.Redis | None = None,
    ) -> None:
        """Validate credentials and build the Redis client.

        Args:
            url: Redis connection URL (``redis://`` or ``rediss://``).
            token: Password / access token for the connection.
            timeout_seconds: Socket and connect timeout.
            client: Pre-built client, used instead of ``from_url``.

        Raises:
            QuotaStoreConfigError: If URL or token is missing. No network
                call is made in that case.
        """
        missing = [name for name, value in (("url", url), ("token", token)) if not value]
        if missing:
            raise QuotaStoreConfigError(
                "Quota store requires both a URL and a token",
                details={"context": {"missing": missing}},
            )

        if client is None and _embedded_password(url):
            # redis-py prefers URL credentials over the password kwarg
            logger.warning(
                "quota_store.url_password_overrides_token",
                extra={"store_host": urlparse(url).hostname},
            )

        self._client = client or aioredis.from_url(
            url,
            password=token,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
            decode_responses=True,
        )

    async def record_and_count(
        self,
        key: str,
        *,
        window_start_ms: int,
        now_ms: int,
        member: str,
        ttl_seconds: int,
    ) -> list[Any] | None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(key, 0, window_start_ms)
            pipe.zcard(key)
            pipe.zadd(key, {member: now_ms})
            pipe.expire(key, ttl_seconds)
            results = await pipe.execute()

        logger.debug(
            "quota_store.pipeline_executed",
            extra={"pruned": results[0] if results else None, "commands": 4},
        )
        return results

    async def aclose(self) -> None:
        await self._client.aclose()
