import logging
import time
from datetime import timedelta

from redis.asyncio import Redis

from src.app.services.rate_limiter import IRateLimiter, LimitResult

logger = logging.getLogger(__name__)


class RedisRateLimiter(IRateLimiter):
    """
    Fixed-window counter per key.

    INCR is atomic in Redis, so concurrent takes never lose a count; the
    window starts on the first hit, when the key gets its expiry.
    """

    def __init__(
        self,
        client: Redis,
        limit: int,
        period: timedelta,
        prefix: str = "ratelimit",
    ):
        self.client = client
        self.limit = limit
        self.period = period
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def _period_seconds(self) -> int:
        return max(1, int(self.period.total_seconds()))

    def _result(self, count: int, ttl: int) -> LimitResult:
        if ttl < 0:
            ttl = self._period_seconds()
        return LimitResult(
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset=int(time.time()) + ttl,
            is_exceeded=count > self.limit,
        )

    async def take(self, key: str) -> LimitResult:
        redis_key = self._key(key)
        count = await self.client.incr(redis_key)
        ttl = await self.client.ttl(redis_key)
        if ttl < 0:
            # First hit of the window (or a key that lost its expiry)
            await self.client.expire(redis_key, self._period_seconds())
            ttl = self._period_seconds()

        result = self._result(int(count), ttl)
        if result.is_exceeded:
            logger.info("Rate limit reached for %s", key)
        return result
