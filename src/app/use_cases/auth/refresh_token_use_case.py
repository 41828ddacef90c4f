"""
Refresh Token Use Case

Trades a valid refresh token for a new token pair.
"""

from src.app.services.token_issuer import InvalidTokenError, TokenType
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .base import AccountUseCase
from .dtos import RefreshTokenCommand, RefreshTokenResponse
from .validation import RefreshTokenInput, validate_input


class RefreshTokenUseCase(AccountUseCase[RefreshTokenCommand, RefreshTokenResponse]):
    """
    Use case for refreshing tokens.

    Business Rules:
    - Token must be a refresh token with a valid signature and expiry
    - Subject must still exist, be verified and active
    - New pair always uses the default (non-remember) lifetimes
    """

    async def handle(
        self, command: RefreshTokenCommand
    ) -> Result[RefreshTokenResponse]:
        self.logger.info("Refreshing token")

        validated = validate_input(
            RefreshTokenInput, refresh_token=command.refresh_token
        )
        if validated.is_err():
            return Return.err(validated.error)

        try:
            payload = self.deps.token_issuer.verify(
                validated.value.refresh_token, expected_type=TokenType.refresh
            )
        except InvalidTokenError:
            return Return.err(Error(ErrorCode.INVALID_TOKEN, "Invalid or expired token"))

        async with self.uow:
            user = await self.uow.users.get_by_id(payload.subject_id)

        if user is None:
            return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

        state = self.check_user_state(user)
        if state.is_err():
            return Return.err(state.error)

        tokens = self.issue_token_pair(user.id)

        self.logger.info("Token refreshed for user %s", user.id)
        return Return.ok(RefreshTokenResponse(tokens=tokens))
