"""
Account Use Case base

Shared collaborators and steps for every account lifecycle operation:
rate-limit gate, input validation, one-time code issue/lookup, user state
gating, token-pair minting and post-commit email dispatch.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from src.app.services.code_store import ICodeStore
from src.app.services.notification_dispatcher import (
    DispatchError,
    INotificationDispatcher,
    NotificationKind,
)
from src.app.services.password_hasher import IPasswordHasher
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.token_issuer import ITokenIssuer, TokenType
from src.app.services.two_factor_provider import ITwoFactorProvider
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .dtos import TokenPair
from .otp import CodePurpose, code_key, generate_numeric_otp
from .policy import AuthPolicy

C = TypeVar("C")
R = TypeVar("R")

module_logger = logging.getLogger(__name__)


@dataclass
class AccountDependencies:
    """Collaborators injected into every account use case"""

    uow: UnitOfWork
    code_store: ICodeStore
    token_issuer: ITokenIssuer
    rate_limiter: IRateLimiter
    dispatcher: INotificationDispatcher
    password_hasher: IPasswordHasher
    two_factor: ITwoFactorProvider
    policy: AuthPolicy = field(default_factory=AuthPolicy)
    logger: logging.Logger = module_logger


class AccountUseCase(ABC, Generic[C, R]):
    """
    Base for account lifecycle use cases.

    ``execute`` never raises for collaborator failures: anything a store,
    queue or primitive raises is logged and returned as INTERNAL, so no
    driver detail crosses the boundary. Cancellation is not intercepted and
    unwinds through the unit of work, which rolls back.
    """

    def __init__(self, deps: AccountDependencies):
        self.deps = deps
        self.uow = deps.uow
        self.policy = deps.policy
        self.logger = deps.logger

    async def execute(self, command: C) -> Result[R]:
        try:
            return await self.handle(command)
        except Exception:
            self.logger.exception("%s failed unexpectedly", type(self).__name__)
            return Return.err(Error(ErrorCode.INTERNAL, "Internal server error"))

    @abstractmethod
    async def handle(self, command: C) -> Result[R]:
        pass

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    def rate_limit_key(self, operation: str, identifier: str) -> str:
        return f"{self.policy.rate_limit_prefix}:{operation}:{identifier.strip().lower()}"

    async def check_rate_limit(self, operation: str, identifier: str) -> Result[None]:
        status = await self.deps.rate_limiter.take(
            self.rate_limit_key(operation, identifier)
        )
        if status.is_exceeded:
            self.logger.warning("Rate limit exceeded for %s", operation)
            return Return.err(Error(ErrorCode.TOO_MANY_REQUESTS, "Too many requests"))
        return Return.ok(None)

    # ------------------------------------------------------------------
    # One-time codes
    # ------------------------------------------------------------------

    async def issue_code(self, purpose: CodePurpose, identifier: str) -> str:
        """Generate a fresh code and store it, replacing any live one"""
        code = generate_numeric_otp(self.policy.otp_code_length)
        await self.deps.code_store.set(
            code_key(purpose, identifier), code, self.policy.otp_ttl
        )
        return code

    async def stored_code(self, purpose: CodePurpose, identifier: str) -> Optional[str]:
        return await self.deps.code_store.get(code_key(purpose, identifier))

    async def discard_code(self, purpose: CodePurpose, identifier: str) -> None:
        """Best-effort delete; a leftover code expires on its own"""
        key = code_key(purpose, identifier)
        try:
            await self.deps.code_store.delete(key)
        except Exception:
            self.logger.warning("Failed to delete one-time code %s", key, exc_info=True)

    # ------------------------------------------------------------------
    # User state
    # ------------------------------------------------------------------

    @staticmethod
    def check_user_state(user: User) -> Result[None]:
        """Authentication requires a verified email and an active account"""
        if not user.is_email_verified():
            return Return.err(
                Error(ErrorCode.EMAIL_NOT_VERIFIED, "Email address is not verified")
            )
        if not user.is_active():
            return Return.err(Error(ErrorCode.ACCOUNT_INACTIVE, "User is inactive"))
        return Return.ok(None)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token_pair(self, user_id: UUID, remember: bool = False) -> TokenPair:
        if remember:
            access_ttl = self.policy.access_token_ttl_extended
            refresh_ttl = self.policy.refresh_token_ttl_extended
        else:
            access_ttl = self.policy.access_token_ttl
            refresh_ttl = self.policy.refresh_token_ttl

        issuer = self.deps.token_issuer
        access = issuer.issue(user_id, access_ttl, TokenType.access)
        refresh = issuer.issue(user_id, refresh_ttl, TokenType.refresh)
        return TokenPair(
            access_token=access.value,
            refresh_token=refresh.value,
            access_token_expires_at=access.expires_at,
            refresh_token_expires_at=refresh.expires_at,
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def dispatch_code_email(
        self, kind: NotificationKind, user: User, code: str
    ) -> Result[None]:
        """Queue the email carrying code; call only after commit"""
        payload: dict[str, Any] = {
            "user_id": str(user.id),
            "name": user.full_name,
            "email": user.email,
            "code": code,
            "code_expiration_minutes": self.policy.otp_ttl_minutes,
        }
        try:
            await self.deps.dispatcher.enqueue(kind, payload)
        except DispatchError:
            self.logger.error(
                "Failed to queue %s for user %s", kind.value, user.id, exc_info=True
            )
            return Return.err(Error(ErrorCode.INTERNAL, "Failed to queue email"))
        return Return.ok(None)
