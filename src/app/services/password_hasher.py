from abc import ABC, abstractmethod


class IPasswordHasher(ABC):
    """One-way password hashing with constant-time verification"""

    @abstractmethod
    async def hash(self, plain: str) -> str:
        pass

    @abstractmethod
    async def verify(self, plain: str, hashed: str) -> bool:
        pass

    @abstractmethod
    async def burn(self) -> None:
        """Spend one verification's worth of time without a real hash"""
        pass
