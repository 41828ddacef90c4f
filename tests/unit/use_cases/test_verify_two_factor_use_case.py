from datetime import timedelta

import pyotp
import pytest

from src.app.services.token_issuer import TokenType
from src.app.use_cases.two_factor import VerifyTwoFactorCommand, VerifyTwoFactorUseCase
from src.domain.entities import UserStatus

SECRET = pyotp.random_base32(length=32)


def _wrong_code(code: str) -> str:
    return f"{(int(code) + 500000) % 1000000:06d}"


@pytest.fixture
def enrolling_user(make_user, mock_uow):
    user = make_user(two_factor_secret=SECRET)
    mock_uow.users.get_by_id.return_value = user
    return user


@pytest.mark.asyncio
async def test_first_verify_enables_two_factor(deps, mock_uow, enrolling_user, token_issuer):
    code = pyotp.TOTP(SECRET).now()

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=enrolling_user.id, code=code)
    )

    assert result.is_ok()
    assert result.value.verified is True
    assert enrolling_user.is_two_factor_enabled() is True
    mock_uow.commit.assert_called_once()
    payload = token_issuer.verify(result.value.tokens.access_token, TokenType.access)
    assert payload.subject_id == enrolling_user.id


@pytest.mark.asyncio
async def test_verify_when_enabled_does_not_write(deps, mock_uow, make_user):
    user = make_user(two_factor_secret=SECRET, two_factor_enabled=True)
    mock_uow.users.get_by_id.return_value = user

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=user.id, code=pyotp.TOTP(SECRET).now())
    )

    assert result.is_ok()
    mock_uow.users.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_verify_wrong_code_does_not_enable(deps, mock_uow, enrolling_user):
    code = _wrong_code(pyotp.TOTP(SECRET).now())

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=enrolling_user.id, code=code)
    )

    assert result.is_err()
    assert result.error.code == "INVALID_INPUT"
    assert result.error.message == "Invalid 2FA code"
    assert enrolling_user.two_factor_enabled is False
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_verify_code_only_accepted_once(deps, enrolling_user):
    use_case = VerifyTwoFactorUseCase(deps)
    command = VerifyTwoFactorCommand(user_id=enrolling_user.id, code=pyotp.TOTP(SECRET).now())

    assert (await use_case.execute(command)).is_ok()
    result = await use_case.execute(command)

    assert result.is_err()
    assert result.error.code == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_verify_without_secret(deps, mock_uow, make_user):
    user = make_user()
    mock_uow.users.get_by_id.return_value = user

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=user.id, code="123456")
    )

    assert result.is_err()
    assert result.error.code == "BAD_REQUEST"
    assert result.error.message == "2FA not set up"


@pytest.mark.asyncio
async def test_verify_inactive_user(deps, mock_uow, make_user):
    user = make_user(status=UserStatus.suspended, two_factor_secret=SECRET)
    mock_uow.users.get_by_id.return_value = user

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=user.id, code="123456")
    )

    assert result.is_err()
    assert result.error.code == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_verify_malformed_code(deps, mock_uow, enrolling_user):
    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=enrolling_user.id, code="12345")
    )

    assert result.is_err()
    assert result.error.code == "VALIDATION_FAILED"
    mock_uow.users.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_verify_rate_limited_per_user(deps, rate_limiter, enrolling_user):
    use_case = VerifyTwoFactorUseCase(deps)
    for _ in range(rate_limiter.limit):
        await use_case.execute(VerifyTwoFactorCommand(user_id=enrolling_user.id, code="x"))

    result = await use_case.execute(
        VerifyTwoFactorCommand(user_id=enrolling_user.id, code=pyotp.TOTP(SECRET).now())
    )

    assert result.is_err()
    assert result.error.code == "TOO_MANY_REQUESTS"
    assert f"auth:verify_2fa:{enrolling_user.id}" in rate_limiter.counts


@pytest.mark.asyncio
async def test_verify_code_claimed_before_tokens(deps, mock_uow, enrolling_user, code_store):
    """A code already claimed by a concurrent request yields no tokens"""
    code = pyotp.TOTP(SECRET).now()
    claimed = await code_store.set_if_absent(
        f"two_factor_used:{enrolling_user.id}:{code}", "1", timedelta(seconds=90)
    )
    assert claimed is True

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=enrolling_user.id, code=code)
    )

    assert result.is_err()
    assert result.error.code == "INVALID_INPUT"
    assert enrolling_user.two_factor_enabled is False
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_verify_uses_atomic_claim(deps, enrolling_user, code_store, monkeypatch):
    calls = []
    original = code_store.set_if_absent

    async def recording_set_if_absent(key, value, ttl):
        calls.append((key, ttl))
        return await original(key, value, ttl)

    monkeypatch.setattr(code_store, "set_if_absent", recording_set_if_absent)
    code = pyotp.TOTP(SECRET).now()

    result = await VerifyTwoFactorUseCase(deps).execute(
        VerifyTwoFactorCommand(user_id=enrolling_user.id, code=code)
    )

    assert result.is_ok()
    assert calls == [(f"two_factor_used:{enrolling_user.id}:{code}", timedelta(seconds=90))]
