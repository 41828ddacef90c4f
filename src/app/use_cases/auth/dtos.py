"""
Account Lifecycle DTOs (Data Transfer Objects)

Commands carry raw caller input (validated inside the use case, after the
rate-limit gate). Responses are the structured results handed back to the
API layer.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import User, UserStatus


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    email: str
    first_name: str
    last_name: Optional[str] = None
    password: str


class LoginCommand(BaseModel):
    email: str
    password: str
    remember: bool = False


class VerifyOTPCommand(BaseModel):
    email: str
    code: str


class EmailCommand(BaseModel):
    """Input for ResendOTP and ForgotPassword"""

    email: str


class RefreshTokenCommand(BaseModel):
    refresh_token: str


class ResetPasswordCommand(BaseModel):
    email: str
    code: str
    new_password: str


# ============================================================================
# Response DTOs
# ============================================================================


class UserProfile(BaseModel):
    """Public view of a user; never carries credential or secret fields"""

    id: UUID
    email: str
    first_name: str
    last_name: Optional[str] = None
    full_name: str
    status: UserStatus
    email_verified: bool
    email_verified_at: Optional[datetime] = None
    two_factor_enabled: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            status=user.status,
            email_verified=user.is_email_verified(),
            email_verified_at=user.email_verified_at,
            two_factor_enabled=user.is_two_factor_enabled(),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class TokenPair(BaseModel):
    """Access + refresh tokens for one subject, each with its own expiry"""

    access_token: str
    refresh_token: str
    access_token_expires_at: datetime
    refresh_token_expires_at: datetime


class RegisterResponse(BaseModel):
    user: UserProfile


class LoginResponse(BaseModel):
    """
    Tokens, or two_factor_required=True with no tokens.

    In the second case two_factor_token is a short-lived bearer token that
    only the 2FA verify step accepts.
    """

    user: UserProfile
    two_factor_required: bool = False
    tokens: Optional[TokenPair] = None
    two_factor_token: Optional[str] = None
    two_factor_token_expires_at: Optional[datetime] = None


class VerifyOTPResponse(BaseModel):
    user: UserProfile


class RefreshTokenResponse(BaseModel):
    tokens: TokenPair


class MessageResponse(BaseModel):
    """Status/message acknowledgement"""

    status: str
    message: str
