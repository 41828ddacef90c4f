from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.use_cases.auth import (
    AccountDependencies,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    LoginCommand,
    LoginResponse,
    LoginUseCase,
    VerifyOTPCommand,
    VerifyOTPResponse,
    VerifyOTPUseCase,
    EmailCommand,
    ResendOTPUseCase,
    ForgotPasswordUseCase,
    RefreshTokenCommand,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    ResetPasswordCommand,
    ResetPasswordUseCase,
    MessageResponse,
)
from src.depends import get_account_dependencies

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Request bodies only describe shape; field rules are enforced by the use
# cases after the rate-limit gate and reported as VALIDATION_FAILED.


class RegisterRequest(BaseModel):
    email: str = Field("", description="User email address")
    first_name: str = Field("", description="First name (2-100 chars)")
    last_name: Optional[str] = Field(None, description="Optional last name")
    password: str = Field(
        "", description="8-72 chars with lower, upper, digit and symbol"
    )


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse
)
async def register(
    request: RegisterRequest, deps: AccountDependencies = Depends(get_account_dependencies)
):
    """
    Register a new account

    Creates a pending user and emails a verification code.

    Raises:
        - 400 Bad Request: Validation failed
        - 409 Conflict: Email already registered
        - 429 Too Many Requests: Rate limited
        - 500 Internal Server Error: Server error
    """
    command = RegisterCommand(
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        password=request.password,
    )

    result = await RegisterUseCase(deps).execute(command)
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class LoginRequest(BaseModel):
    email: str = Field("", description="User email address")
    password: str = Field("", description="User password")
    remember: bool = Field(False, description="Issue extended-lifetime tokens")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest, deps: AccountDependencies = Depends(get_account_dependencies)
):
    """
    User Login

    Returns a token pair, or ``two_factor_required`` with no tokens when the
    account has 2FA enabled. In that case finish with POST /auth/2fa/verify,
    sending the returned ``two_factor_token`` as the bearer token.

    Raises:
        - 400 Bad Request: Validation failed
        - 401 Unauthorized: Bad credentials, unverified email or inactive account
        - 429 Too Many Requests: Rate limited
    """
    command = LoginCommand(
        email=request.email, password=request.password, remember=request.remember
    )

    result = await LoginUseCase(deps).execute(command)
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class VerifyOTPRequest(BaseModel):
    email: str = Field("", description="User email address")
    code: str = Field("", description="Emailed verification code")


@router.post(
    "/verify-otp", status_code=status.HTTP_200_OK, response_model=VerifyOTPResponse
)
async def verify_otp(
    request: VerifyOTPRequest,
    deps: AccountDependencies = Depends(get_account_dependencies),
):
    """
    Verify email address with the emailed code

    Raises:
        - 400 Bad Request: Invalid code or email already verified
        - 410 Gone: Code expired
        - 429 Too Many Requests: Rate limited
    """
    command = VerifyOTPCommand(email=request.email, code=request.code)

    result = await VerifyOTPUseCase(deps).execute(command)
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class EmailRequest(BaseModel):
    email: str = Field("", description="User email address")


@router.post(
    "/resend-otp", status_code=status.HTTP_200_OK, response_model=MessageResponse
)
async def resend_otp(
    request: EmailRequest, deps: AccountDependencies = Depends(get_account_dependencies)
):
    """
    Resend the verification code

    Answers the same way whether or not the email is registered.
    """
    result = await ResendOTPUseCase(deps).execute(EmailCommand(email=request.email))
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class RefreshRequest(BaseModel):
    refresh_token: str = Field("", description="Refresh token")


@router.post(
    "/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse
)
async def refresh(
    request: RefreshRequest, deps: AccountDependencies = Depends(get_account_dependencies)
):
    """
    Exchange a refresh token for a new token pair

    Raises:
        - 401 Unauthorized: Invalid or expired token, unverified or inactive user
        - 404 Not Found: User no longer exists
    """
    command = RefreshTokenCommand(refresh_token=request.refresh_token)

    result = await RefreshTokenUseCase(deps).execute(command)
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/forgot-password", status_code=status.HTTP_200_OK, response_model=MessageResponse
)
async def forgot_password(
    request: EmailRequest, deps: AccountDependencies = Depends(get_account_dependencies)
):
    """
    Email a password reset code

    Answers the same way whether or not the email is registered.
    """
    result = await ForgotPasswordUseCase(deps).execute(EmailCommand(email=request.email))
    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    email: str = Field("", description="User email address")
    code: str = Field("", description="Emailed reset code")
    new_password: str = Field("", description="New password")


@router.post(
    "/reset-password", status_code=status.HTTP_200_OK, response_model=MessageResponse
)
async def reset_password(
    request: ResetPasswordRequest,
    deps: AccountDependencies = Depends(get_account_dependencies),
):
    """
    Set a new password using the emailed reset code

    Raises:
        - 400 Bad Request: Validation failed, invalid code or unchanged password
        - 410 Gone: Code expired
        - 429 Too Many Requests: Rate limited
    """
    command = ResetPasswordCommand(
        email=request.email, code=request.code, new_password=request.new_password
    )

    result = await ResetPasswordUseCase(deps).execute(command)
    if result.is_err():
        raise to_http_error(result.error)

    return result.value
