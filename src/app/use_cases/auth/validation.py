"""
Request field validation.

Validation runs inside the use cases, after the rate-limit gate, so a
throttled caller gets TOO_MANY_REQUESTS whatever the payload looks like.
"""

import string
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, EmailStr, Field, ValidationError

from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 72  # bcrypt input limit

M = TypeVar("M", bound=BaseModel)


def check_password_complexity(password: str) -> str:
    if len(password.encode("utf-8")) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_LENGTH} bytes")
    has_lower = any(c.islower() for c in password)
    has_upper = any(c.isupper() for c in password)
    has_digit = any(c.isdigit() for c in password)
    has_symbol = any(
        c in string.punctuation or not (c.isalnum() or c.isspace()) for c in password
    )
    if not (has_lower and has_upper and has_digit and has_symbol):
        raise ValueError(
            "Password must contain a lowercase letter, an uppercase letter, "
            "a digit and a symbol"
        )
    return password


Password = Annotated[
    str,
    Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH),
    AfterValidator(check_password_complexity),
]
OTPCode = Annotated[str, Field(pattern=r"^[0-9]{4,12}$")]
TwoFactorCode = Annotated[str, Field(pattern=r"^[0-9]{6}$")]
Email = Annotated[EmailStr, Field(max_length=255)]


class RegisterInput(BaseModel):
    email: Email
    first_name: str = Field(min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    password: Password


class LoginInput(BaseModel):
    email: Email
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


class EmailInput(BaseModel):
    email: Email


class VerifyOTPInput(BaseModel):
    email: Email
    code: OTPCode


class ResetPasswordInput(BaseModel):
    email: Email
    code: OTPCode
    new_password: Password


class RefreshTokenInput(BaseModel):
    refresh_token: str = Field(min_length=1)


class TwoFactorCodeInput(BaseModel):
    code: TwoFactorCode


def _field_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]


def validate_input(schema: Type[M], **fields: Any) -> Result[M]:
    """Build schema from fields, or VALIDATION_FAILED with per-field details"""
    try:
        return Return.ok(schema(**fields))
    except ValidationError as exc:
        return Return.err(
            Error(
                ErrorCode.VALIDATION_FAILED,
                "Failed to validate request",
                _field_errors(exc),
            )
        )
