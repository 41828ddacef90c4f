"""
Use Cases

Organized by domain folder:
- auth/: Account lifecycle (register, verify, login, refresh, password reset)
- two_factor/: TOTP enrolment, verification and removal
"""

from .auth import (
    AccountDependencies,
    RegisterUseCase,
    LoginUseCase,
    VerifyOTPUseCase,
    ResendOTPUseCase,
    RefreshTokenUseCase,
    ForgotPasswordUseCase,
    ResetPasswordUseCase,
)
from .two_factor import (
    SetupTwoFactorUseCase,
    VerifyTwoFactorUseCase,
    DisableTwoFactorUseCase,
)

__all__ = [
    "AccountDependencies",
    # Auth
    "RegisterUseCase",
    "LoginUseCase",
    "VerifyOTPUseCase",
    "ResendOTPUseCase",
    "RefreshTokenUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",
    # Two-factor
    "SetupTwoFactorUseCase",
    "VerifyTwoFactorUseCase",
    "DisableTwoFactorUseCase",
]
