from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.use_cases.auth import AccountDependencies, MessageResponse
from src.app.use_cases.two_factor import (
    DisableTwoFactorUseCase,
    SetupTwoFactorResponse,
    SetupTwoFactorUseCase,
    TwoFactorCommand,
    VerifyTwoFactorCommand,
    VerifyTwoFactorResponse,
    VerifyTwoFactorUseCase,
)
from src.depends import (
    get_account_dependencies,
    get_current_user_id,
    get_two_factor_user_id,
)

router = APIRouter(prefix="/auth/2fa", tags=["Two-Factor"])


@router.post(
    "/setup", status_code=status.HTTP_200_OK, response_model=SetupTwoFactorResponse
)
async def setup_two_factor(
    user_id: UUID = Depends(get_current_user_id),
    deps: AccountDependencies = Depends(get_account_dependencies),
):
    """
    Start TOTP enrolment for the authenticated user

    Returns the secret, its otpauth:// URI and a PNG QR code data URI.
    2FA is only enforced at login after the first successful verify.
    """
    result = await SetupTwoFactorUseCase(deps).execute(TwoFactorCommand(user_id=user_id))
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class VerifyTwoFactorRequest(BaseModel):
    code: str = Field("", description="6-digit TOTP code")


@router.post(
    "/verify", status_code=status.HTTP_200_OK, response_model=VerifyTwoFactorResponse
)
async def verify_two_factor(
    request: VerifyTwoFactorRequest,
    user_id: UUID = Depends(get_two_factor_user_id),
    deps: AccountDependencies = Depends(get_account_dependencies),
):
    """
    Verify a TOTP code and issue tokens

    Completes enrolment on first success (bearer access token), and is the
    second step of a login that answered ``two_factor_required`` (bearer
    ``two_factor_token`` from that response). The user is always the token
    subject. Rate limited per user.

    Raises:
        - 400 Bad Request: Invalid code or 2FA not set up
        - 401 Unauthorized: Missing or invalid token, unverified email or
          inactive account
        - 404 Not Found: Unknown user
        - 429 Too Many Requests: Rate limited
    """
    command = VerifyTwoFactorCommand(user_id=user_id, code=request.code)

    result = await VerifyTwoFactorUseCase(deps).execute(command)
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post("/disable", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def disable_two_factor(
    user_id: UUID = Depends(get_current_user_id),
    deps: AccountDependencies = Depends(get_account_dependencies),
):
    """
    Turn 2FA off for the authenticated user

    Raises:
        - 400 Bad Request: 2FA not enabled
    """
    result = await DisableTwoFactorUseCase(deps).execute(
        TwoFactorCommand(user_id=user_id)
    )
    if result.is_err():
        raise to_http_error(result.error)

    return result.value
