"""
Authentication Use Cases

Account lifecycle: registration, email verification, login, token refresh
and password reset.
"""

from .base import AccountDependencies, AccountUseCase
from .policy import AuthPolicy
from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .verify_otp_use_case import VerifyOTPUseCase
from .resend_otp_use_case import ResendOTPUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .forgot_password_use_case import ForgotPasswordUseCase
from .reset_password_use_case import ResetPasswordUseCase
from .dtos import (
    RegisterCommand,
    LoginCommand,
    VerifyOTPCommand,
    EmailCommand,
    RefreshTokenCommand,
    ResetPasswordCommand,
    UserProfile,
    TokenPair,
    RegisterResponse,
    LoginResponse,
    VerifyOTPResponse,
    RefreshTokenResponse,
    MessageResponse,
)

__all__ = [
    # Wiring
    "AccountDependencies",
    "AccountUseCase",
    "AuthPolicy",
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "VerifyOTPUseCase",
    "ResendOTPUseCase",
    "RefreshTokenUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",
    # DTOs - Commands
    "RegisterCommand",
    "LoginCommand",
    "VerifyOTPCommand",
    "EmailCommand",
    "RefreshTokenCommand",
    "ResetPasswordCommand",
    # DTOs - Responses
    "UserProfile",
    "TokenPair",
    "RegisterResponse",
    "LoginResponse",
    "VerifyOTPResponse",
    "RefreshTokenResponse",
    "MessageResponse",
]
