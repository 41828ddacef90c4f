from fastapi import status
from src.domain.errors import ErrorCode
from src.libs.result import Error

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CODE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INCORRECT_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ACCOUNT_INACTIVE: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.EMAIL_NOT_VERIFIED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.CODE_EXPIRED: status.HTTP_410_GONE,
    ErrorCode.TOO_MANY_REQUESTS: status.HTTP_429_TOO_MANY_REQUESTS,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def to_http_error(error: Error) -> Exception:
    """ClientError with the mapped status, or ServerError for anything unmapped"""
    status_code = STATUS_BY_CODE.get(error.code)
    if status_code is None:
        return ServerError(error)
    return ClientError(error, status_code=status_code)
