from abc import ABC, abstractmethod

from pydantic import BaseModel


class LimitResult(BaseModel):
    """Rate limit status for one key after a take"""

    limit: int
    remaining: int
    reset: int  # unix timestamp when the window resets
    is_exceeded: bool


class IRateLimiter(ABC):
    """Counts requests per key over a window"""

    @abstractmethod
    async def take(self, key: str) -> LimitResult:
        """Consume one request for key and report the resulting status"""
        pass
