"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any nippondaily import so the global
settings object never reads a developer's .env file or real credentials.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("TAVILY_API_KEY", "tvly-test-key")
os.environ.setdefault("RATE_LIMIT_MAX_REQUESTS", "3")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from nippondaily.adapters.rate_limit.base import AbstractQuotaStore  # noqa: E402
from nippondaily.core.errors import QuotaStoreConfigError  # noqa: E402

# Distinguishes "no injected result" from an injected None.
UNSET: Any = object()


class InMemoryQuotaStore(AbstractQuotaStore):
    """Sorted-set quota store double sharing state through a QuotaBackend.

    record_and_count never awaits, so on a single event loop each call is
    atomic, matching a MULTI/EXEC transaction.
    """

    def __init__(self, backend: "QuotaBackend") -> None:
        self.backend = backend
        self.closed = False

    async def record_and_count(
        self,
        key: str,
        *,
        window_start_ms: int,
        now_ms: int,
        member: str,
        ttl_seconds: int,
    ) -> list[Any] | None:
        if self.backend.fail_with is not None:
            raise self.backend.fail_with
        if self.backend.raw_results is not UNSET:
            return self.backend.raw_results

        entries = self.backend.sets.setdefault(key, {})
        expired = [m for m, score in entries.items() if score <= window_start_ms]
        for m in expired:
            del entries[m]
        count = len(entries)
        added = 0 if member in entries else 1
        entries[member] = now_ms
        self.backend.ttls[key] = ttl_seconds
        return [len(expired), count, added, True]

    async def aclose(self) -> None:
        self.closed = True
        self.backend.closed_count += 1


class QuotaBackend:
    """Shared state behind every InMemoryQuotaStore built by ``factory``."""

    def __init__(self) -> None:
        self.sets: dict[str, dict[str, int]] = {}
        self.ttls: dict[str, int] = {}
        self.fail_with: Exception | None = None
        self.raw_results: Any = UNSET
        self.opened_count = 0
        self.closed_count = 0

    def factory(self, url: str | None, token: str | None) -> InMemoryQuotaStore:
        if not url or not token:
            raise QuotaStoreConfigError("Quota store requires both a URL and a token")
        self.opened_count += 1
        return InMemoryQuotaStore(self)


class FakeClock:
    """Deterministic UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def quota_backend() -> QuotaBackend:
    return QuotaBackend()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
