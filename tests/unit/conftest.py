from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.jwt_token_issuer import JwtTokenIssuer
from src.adapter.services.pyotp_two_factor_provider import PyOTPTwoFactorProvider
from src.app.use_cases.auth import AccountDependencies, AuthPolicy
from src.domain.entities import User, UserStatus

TEST_SECRET = "unit-test-secret-key-0123456789abcdef"
PASSWORD = "Abcd12!@"

# bcrypt at minimum cost keeps the suite fast
_hasher = BcryptPasswordHasher(rounds=4)
PASSWORD_HASH = _hasher.hash_sync(PASSWORD)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.delete = AsyncMock()
    return uow


@pytest.fixture
def password_hasher():
    return _hasher


@pytest.fixture
def token_issuer():
    return JwtTokenIssuer(secret=TEST_SECRET, issuer="account-service")


@pytest.fixture
def two_factor():
    return PyOTPTwoFactorProvider(issuer="account-service")


@pytest.fixture
def deps(mock_uow, code_store, rate_limiter, dispatcher, password_hasher, token_issuer, two_factor):
    return AccountDependencies(
        uow=mock_uow,
        code_store=code_store,
        token_issuer=token_issuer,
        rate_limiter=rate_limiter,
        dispatcher=dispatcher,
        password_hasher=password_hasher,
        two_factor=two_factor,
        policy=AuthPolicy(),
    )


@pytest.fixture
def make_user():
    """Factory for users; active and verified unless told otherwise"""

    def _make(
        email="ann@example.com",
        status=UserStatus.active,
        verified=True,
        two_factor_secret=None,
        two_factor_enabled=False,
    ):
        return User(
            email=email,
            first_name="Ann",
            last_name="Lee",
            password_hash=PASSWORD_HASH,
            status=status,
            email_verified_at=datetime.now(UTC) if verified else None,
            two_factor_secret=two_factor_secret,
            two_factor_enabled=two_factor_enabled,
        )

    return _make
