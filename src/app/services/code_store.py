from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional


class ICodeStore(ABC):
    """Ephemeral key-value store with per-key expiry (one-time codes)"""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        """Store value under key, replacing any previous value"""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the live value, or None when absent or expired"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        """Store value only when key holds no live value; True if stored"""
        pass
