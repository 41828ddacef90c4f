"""
Failure codes returned by the account lifecycle use cases.

NOT_FOUND is internal only: email lookups never surface it, they map to
INCORRECT_CREDENTIALS or INVALID_CODE so callers cannot tell which accounts exist.
"""

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    INCORRECT_CREDENTIALS = "INCORRECT_CREDENTIALS"
    INVALID_CODE = "INVALID_CODE"
    CODE_EXPIRED = "CODE_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_INPUT = "INVALID_INPUT"
    INTERNAL = "INTERNAL"
