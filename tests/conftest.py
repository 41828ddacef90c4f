"""In-memory stand-ins for the Redis and Celery backed collaborators."""

import time
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

import pytest

from src.app.services.code_store import ICodeStore
from src.app.services.notification_dispatcher import (
    DispatchError,
    INotificationDispatcher,
    NotificationKind,
)
from src.app.services.rate_limiter import IRateLimiter, LimitResult


class InMemoryCodeStore(ICodeStore):
    def __init__(self):
        self.values: Dict[str, Tuple[str, float]] = {}

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        self.values[key] = (value, time.monotonic() + ttl.total_seconds())

    async def get(self, key: str) -> Optional[str]:
        entry = self.values.get(key)
        if entry is None:
            return None
        value, expires = entry
        if time.monotonic() >= expires:
            del self.values[key]
            return None
        return value

    async def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        if await self.get(key) is not None:
            return False
        await self.set(key, value, ttl)
        return True

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)

    def expire(self, key: str) -> None:
        """Simulate the TTL running out"""
        self.values.pop(key, None)


class InMemoryRateLimiter(IRateLimiter):
    def __init__(self, limit: int = 100, period: timedelta = timedelta(minutes=1)):
        self.limit = limit
        self.period = period
        self.counts: Dict[str, int] = {}

    def _result(self, count: int, exceeded: bool) -> LimitResult:
        return LimitResult(
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset=int(time.time() + self.period.total_seconds()),
            is_exceeded=exceeded,
        )

    async def take(self, key: str) -> LimitResult:
        self.counts[key] = self.counts.get(key, 0) + 1
        count = self.counts[key]
        return self._result(count, count > self.limit)


class RecordingDispatcher(INotificationDispatcher):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[NotificationKind, Dict[str, Any]]] = []

    async def enqueue(self, kind: NotificationKind, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise DispatchError("broker unavailable")
        self.sent.append((kind, payload))

    def last_code(self) -> str:
        return self.sent[-1][1]["code"]


@pytest.fixture
def code_store():
    return InMemoryCodeStore()


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(limit=5)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()
