from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class EmailAlreadyExistsError(Exception):
    """Raised when an insert collides with the unique email constraint"""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user; raises EmailAlreadyExistsError on duplicate email"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def delete(self, user_id: UUID) -> None:
        """Delete user by ID; no-op when absent"""
        pass
