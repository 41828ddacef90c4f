"""
Verify Two-Factor Use Case

Checks a TOTP code, finishes enrolment on first success and issues tokens.
Also the second step of a login that returned two_factor_required.
"""

from datetime import timedelta

from src.app.use_cases.auth.base import AccountUseCase
from src.app.use_cases.auth.validation import TwoFactorCodeInput, validate_input
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .dtos import VerifyTwoFactorCommand, VerifyTwoFactorResponse

INVALID_2FA_CODE = Error(ErrorCode.INVALID_INPUT, "Invalid 2FA code")


def used_code_key(user_id, code: str) -> str:
    return f"two_factor_used:{user_id}:{code}"


class VerifyTwoFactorUseCase(
    AccountUseCase[VerifyTwoFactorCommand, VerifyTwoFactorResponse]
):
    """
    Use case for verifying a TOTP code.

    Business Rules:
    - Rate limited per user (operation=verify_2fa)
    - User must exist, be verified, active and hold a secret
    - Code checked against the current step with the primitive's skew window
    - An accepted code is claimed atomically and cannot be replayed while it
      could still validate, so concurrent submissions succeed at most once
    - First success sets the enabled flag
    - Success mints a default-lifetime token pair
    """

    async def handle(
        self, command: VerifyTwoFactorCommand
    ) -> Result[VerifyTwoFactorResponse]:
        self.logger.info("Verifying 2FA code for user %s", command.user_id)

        rate = await self.check_rate_limit("verify_2fa", str(command.user_id))
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(TwoFactorCodeInput, code=command.code)
        if validated.is_err():
            return Return.err(validated.error)
        code = validated.value.code

        two_factor = self.deps.two_factor

        async with self.uow:
            user = await self.uow.users.get_by_id(command.user_id)
            if user is None:
                return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

            state = self.check_user_state(user)
            if state.is_err():
                return Return.err(state.error)

            if not user.has_two_factor_secret():
                return Return.err(Error(ErrorCode.BAD_REQUEST, "2FA not set up"))

            if not two_factor.validate(code, user.two_factor_secret):
                self.logger.warning("Invalid 2FA code for user %s", user.id)
                return Return.err(INVALID_2FA_CODE)

            # Claim the code before anything is issued; the window covers the
            # previous, current and next step accepted by the skew tolerance
            claimed = await self.deps.code_store.set_if_absent(
                used_code_key(user.id, code),
                "1",
                timedelta(seconds=two_factor.period_seconds * 3),
            )
            if not claimed:
                self.logger.warning("Replayed 2FA code for user %s", user.id)
                return Return.err(INVALID_2FA_CODE)

            if not user.is_two_factor_enabled():
                user.enable_two_factor()
                await self.uow.users.update(user)
                await self.uow.commit()

        tokens = self.issue_token_pair(user.id)

        self.logger.info("2FA verified for user %s", user.id)
        return Return.ok(VerifyTwoFactorResponse(verified=True, tokens=tokens))
