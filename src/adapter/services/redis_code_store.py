from datetime import timedelta
from typing import Optional

from redis.asyncio import Redis

from src.app.services.code_store import ICodeStore


class RedisCodeStore(ICodeStore):
    """One-time codes in Redis; expiry is Redis's own key TTL"""

    def __init__(self, client: Redis, namespace: str = "code"):
        self.client = client
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        await self.client.set(self._key(key), value, ex=ttl)

    async def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        # SET NX is atomic, so exactly one concurrent caller wins the key
        stored = await self.client.set(self._key(key), value, ex=ttl, nx=True)
        return bool(stored)

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(self._key(key))
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))
