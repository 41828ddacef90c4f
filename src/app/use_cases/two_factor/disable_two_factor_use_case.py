"""
Disable Two-Factor Use Case
"""

from src.app.use_cases.auth.base import AccountUseCase
from src.app.use_cases.auth.dtos import MessageResponse
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .dtos import TwoFactorCommand


class DisableTwoFactorUseCase(AccountUseCase[TwoFactorCommand, MessageResponse]):
    """
    Clears the secret and the enabled flag.

    Not idempotent: a second call reports BAD_REQUEST "2FA not enabled".
    """

    async def handle(self, command: TwoFactorCommand) -> Result[MessageResponse]:
        self.logger.info("Disabling 2FA for user %s", command.user_id)

        async with self.uow:
            user = await self.uow.users.get_by_id(command.user_id)
            if user is None:
                return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

            state = self.check_user_state(user)
            if state.is_err():
                return Return.err(state.error)

            if not user.is_two_factor_enabled():
                return Return.err(Error(ErrorCode.BAD_REQUEST, "2FA not enabled"))

            user.disable_two_factor()
            await self.uow.users.update(user)

            await self.uow.commit()

        self.logger.info("2FA disabled for user %s", command.user_id)
        return Return.ok(MessageResponse(status="disabled", message="2FA disabled"))
