from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class TokenType(str, Enum):
    access = "access"
    refresh = "refresh"
    two_factor = "two_factor"  # login challenge, only good for the 2FA step


class IssuedToken(BaseModel):
    value: str
    expires_at: datetime


class TokenPayload(BaseModel):
    subject_id: UUID
    token_type: TokenType
    expires_at: datetime


class InvalidTokenError(Exception):
    """Token signature, structure, type or expiry check failed"""


class ITokenIssuer(ABC):
    """Mints and verifies signed, time-bounded bearer tokens"""

    @abstractmethod
    def issue(
        self, subject_id: UUID, ttl: timedelta, token_type: TokenType = TokenType.access
    ) -> IssuedToken:
        pass

    @abstractmethod
    def verify(
        self, token: str, expected_type: Optional[TokenType] = None
    ) -> TokenPayload:
        """Return the payload or raise InvalidTokenError"""
        pass
