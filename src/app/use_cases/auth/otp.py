"""
One-time code helpers.

Codes live in the ephemeral code store under ``<purpose>:<identifier>``.
Writing a new code for the same key replaces (invalidates) the old one.
"""

import hmac
import secrets
from enum import Enum

MIN_OTP_LENGTH = 4
MAX_OTP_LENGTH = 12
DIGITS = "0123456789"


class CodePurpose(str, Enum):
    email_verification = "email_verification"
    password_reset = "password_reset"


def code_key(purpose: CodePurpose, identifier: str) -> str:
    return f"{purpose.value}:{identifier}"


def generate_numeric_otp(length: int) -> str:
    """Cryptographically random digit-only code"""
    if length < MIN_OTP_LENGTH or length > MAX_OTP_LENGTH:
        raise ValueError(
            f"OTP length must be between {MIN_OTP_LENGTH} and {MAX_OTP_LENGTH} digits"
        )
    return "".join(secrets.choice(DIGITS) for _ in range(length))


def codes_match(stored: str, submitted: str) -> bool:
    return hmac.compare_digest(stored.encode(), submitted.encode())
