"""
Setup Two-Factor Use Case

Generates a TOTP secret for the user and returns the provisioning material.
"""

from src.app.use_cases.auth.base import AccountUseCase
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .dtos import SetupTwoFactorResponse, TwoFactorCommand


class SetupTwoFactorUseCase(AccountUseCase[TwoFactorCommand, SetupTwoFactorResponse]):
    """
    Use case for starting two-factor enrolment.

    Business Rules:
    - User must be verified and active, and not already two-factor enabled
    - Secret: 20 bytes, SHA-1, 6 digits, 30 second period
    - The secret is stored but the enabled flag is left off; the first
      successful Verify2FA turns it on, so Setup alone never gates login
    - Calling Setup again before that replaces the pending secret
    """

    async def handle(self, command: TwoFactorCommand) -> Result[SetupTwoFactorResponse]:
        self.logger.info("Setting up 2FA for user %s", command.user_id)

        two_factor = self.deps.two_factor

        async with self.uow:
            user = await self.uow.users.get_by_id(command.user_id)
            if user is None:
                return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

            state = self.check_user_state(user)
            if state.is_err():
                return Return.err(state.error)

            if user.is_two_factor_enabled():
                return Return.err(Error(ErrorCode.BAD_REQUEST, "2FA already enabled"))

            key = two_factor.generate(user.email)
            user.attach_two_factor_secret(key.secret)
            await self.uow.users.update(user)

            await self.uow.commit()

        qr_code = two_factor.qr_code(key.provisioning_uri)

        self.logger.info("2FA secret issued for user %s", user.id)
        return Return.ok(
            SetupTwoFactorResponse(
                secret=key.secret,
                provisioning_uri=key.provisioning_uri,
                qr_code=qr_code,
            )
        )
