"""
Two-Factor Use Cases

TOTP enrolment, verification and removal.
"""

from .setup_two_factor_use_case import SetupTwoFactorUseCase
from .verify_two_factor_use_case import VerifyTwoFactorUseCase
from .disable_two_factor_use_case import DisableTwoFactorUseCase
from .dtos import (
    TwoFactorCommand,
    VerifyTwoFactorCommand,
    SetupTwoFactorResponse,
    VerifyTwoFactorResponse,
)

__all__ = [
    # Use Cases
    "SetupTwoFactorUseCase",
    "VerifyTwoFactorUseCase",
    "DisableTwoFactorUseCase",
    # DTOs - Commands
    "TwoFactorCommand",
    "VerifyTwoFactorCommand",
    # DTOs - Responses
    "SetupTwoFactorResponse",
    "VerifyTwoFactorResponse",
]
