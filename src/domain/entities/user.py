"""
User Entity

Represents an account holder that signs in with email and password.
"""

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import UserStatus


def utcnow() -> datetime:
    return datetime.now(UTC)


class User(SQLModel, table=True):
    """
    User entity - identity record driven by the account lifecycle flows.

    Business Rules:
    - Email must be unique across all users
    - Created as pending; becomes active once, on email code verification
    - Authentication requires status=active AND a verification timestamp
    - Password stored as bcrypt hash, never plaintext
    - Second factor counts as enabled only with the flag set AND a secret stored
    - suspended/inactive are set by operators, never by the auth flows
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    first_name: str = Field(max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: UserStatus = Field(default=UserStatus.pending)

    email_verified_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    two_factor_secret: Optional[str] = Field(default=None, max_length=64)
    two_factor_enabled: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (Index("idx_user_status", "status"),)

    @property
    def full_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    def is_active(self) -> bool:
        return self.status == UserStatus.active

    def is_email_verified(self) -> bool:
        return self.email_verified_at is not None

    def is_two_factor_enabled(self) -> bool:
        return self.two_factor_enabled and self.two_factor_secret is not None

    def has_two_factor_secret(self) -> bool:
        return self.two_factor_secret is not None

    def verify_email(self, verified_at: datetime) -> None:
        """Stamp verification; only a pending account becomes active"""
        self.email_verified_at = verified_at
        if self.status == UserStatus.pending:
            self.status = UserStatus.active
        self.touch()

    def change_password(self, password_hash: str) -> None:
        self.password_hash = password_hash
        self.touch()

    def attach_two_factor_secret(self, secret: str) -> None:
        self.two_factor_secret = secret
        self.touch()

    def enable_two_factor(self) -> None:
        if self.two_factor_secret is None:
            raise ValueError("Cannot enable two-factor without a secret")
        self.two_factor_enabled = True
        self.touch()

    def disable_two_factor(self) -> None:
        self.two_factor_enabled = False
        self.two_factor_secret = None
        self.touch()

    def touch(self) -> None:
        self.updated_at = utcnow()
