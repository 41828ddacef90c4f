from functools import lru_cache
from datetime import timedelta
from typing import Optional, Sequence
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.celery_app import create_celery_app
from src.adapter.services.celery_dispatcher import CeleryNotificationDispatcher
from src.adapter.services.jwt_token_issuer import JwtTokenIssuer
from src.adapter.services.pyotp_two_factor_provider import PyOTPTwoFactorProvider
from src.adapter.services.redis_code_store import RedisCodeStore
from src.adapter.services.redis_rate_limiter import RedisRateLimiter
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.token_issuer import ITokenIssuer, InvalidTokenError, TokenType
from src.app.use_cases.auth import AccountDependencies, AuthPolicy
from src.domain.errors import ErrorCode
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Connections are opened lazily on first command
redis_client = Redis.from_url(ApplicationConfig.REDIS_URL, decode_responses=True)

security = HTTPBearer(auto_error=False)


@lru_cache
def get_auth_policy() -> AuthPolicy:
    return AuthPolicy(
        otp_code_length=ApplicationConfig.OTP_CODE_LENGTH,
        otp_ttl=timedelta(minutes=ApplicationConfig.OTP_EXPIRY_MINUTES),
        access_token_ttl=timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_EXPIRY_MINUTES),
        access_token_ttl_extended=timedelta(
            minutes=ApplicationConfig.ACCESS_TOKEN_EXPIRY_EXTENDED_MINUTES
        ),
        refresh_token_ttl=timedelta(hours=ApplicationConfig.REFRESH_TOKEN_EXPIRY_HOURS),
        refresh_token_ttl_extended=timedelta(
            hours=ApplicationConfig.REFRESH_TOKEN_EXPIRY_EXTENDED_HOURS
        ),
        two_factor_challenge_ttl=timedelta(
            minutes=ApplicationConfig.TWO_FACTOR_CHALLENGE_EXPIRY_MINUTES
        ),
        rate_limit_prefix=ApplicationConfig.RATE_LIMIT_PREFIX,
    )


@lru_cache
def get_token_issuer() -> ITokenIssuer:
    return JwtTokenIssuer(
        secret=ApplicationConfig.JWT_SECRET,
        issuer=ApplicationConfig.APP_NAME,
        algorithm=ApplicationConfig.JWT_ALGORITHM,
        previous_secrets=ApplicationConfig.JWT_PREVIOUS_SECRETS,
    )


@lru_cache
def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=ApplicationConfig.BCRYPT_ROUNDS)


@lru_cache
def get_dispatcher() -> CeleryNotificationDispatcher:
    celery_app = create_celery_app(
        ApplicationConfig.CELERY_BROKER_URL, queue=ApplicationConfig.NOTIFICATION_QUEUE
    )
    return CeleryNotificationDispatcher(
        celery_app,
        queue=ApplicationConfig.NOTIFICATION_QUEUE,
        max_retries=ApplicationConfig.NOTIFICATION_MAX_RETRIES,
    )


async def get_account_dependencies():
    async with AsyncSessionLocal() as session:
        yield AccountDependencies(
            uow=SqlAlchemyUnitOfWork(session),
            code_store=RedisCodeStore(redis_client),
            token_issuer=get_token_issuer(),
            rate_limiter=RedisRateLimiter(
                redis_client,
                limit=ApplicationConfig.RATE_LIMIT_REQUESTS,
                period=timedelta(seconds=ApplicationConfig.RATE_LIMIT_PERIOD_SECONDS),
            ),
            dispatcher=get_dispatcher(),
            password_hasher=get_password_hasher(),
            two_factor=PyOTPTwoFactorProvider(issuer=ApplicationConfig.APP_NAME),
            policy=get_auth_policy(),
        )


def authenticate_bearer(
    credentials: Optional[HTTPAuthorizationCredentials],
    token_issuer: ITokenIssuer,
    accepted_types: Sequence[TokenType],
) -> UUID:
    """Verify the bearer token and return its subject, or raise a 401 ClientError"""
    if credentials is None:
        raise ClientError(
            Error(ErrorCode.INVALID_TOKEN, "Missing bearer token"), status_code=401
        )

    try:
        payload = token_issuer.verify(credentials.credentials)
    except InvalidTokenError:
        raise ClientError(
            Error(ErrorCode.INVALID_TOKEN, "Invalid or expired token"), status_code=401
        )

    if payload.token_type not in accepted_types:
        raise ClientError(
            Error(ErrorCode.INVALID_TOKEN, "Invalid or expired token"), status_code=401
        )

    return payload.subject_id


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    token_issuer: ITokenIssuer = Depends(get_token_issuer),
) -> UUID:
    """
    Dependency to authenticate the bearer access token.

    Returns:
        The token subject (user id)

    Raises:
        ClientError: 401 if the token is missing, invalid, expired or not
            an access token
    """
    return authenticate_bearer(credentials, token_issuer, (TokenType.access,))


async def get_two_factor_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    token_issuer: ITokenIssuer = Depends(get_token_issuer),
) -> UUID:
    """
    Dependency for the 2FA verify step.

    Accepts the two_factor challenge token handed out by a login that
    requires a second factor, or an access token while enrolling.
    """
    return authenticate_bearer(
        credentials, token_issuer, (TokenType.two_factor, TokenType.access)
    )
