"""
Reset Password Use Case

Replaces the password credential after checking the emailed reset code.
"""

from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .base import AccountUseCase
from .dtos import MessageResponse, ResetPasswordCommand
from .otp import CodePurpose, codes_match
from .validation import ResetPasswordInput, validate_input

INVALID_CODE = Error(ErrorCode.INVALID_CODE, "Invalid reset code")


class ResetPasswordUseCase(AccountUseCase[ResetPasswordCommand, MessageResponse]):
    """
    Use case for resetting a password with a code.

    Business Rules:
    - Unknown email reports INVALID_CODE
    - Missing/expired code -> CODE_EXPIRED, mismatch -> INVALID_CODE
    - New password must differ from the current one (checked against the hash)
    - Code is dropped after the new credential commits
    """

    async def handle(self, command: ResetPasswordCommand) -> Result[MessageResponse]:
        self.logger.info("Reset password for %s", command.email)

        rate = await self.check_rate_limit("reset_password", command.email)
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(
            ResetPasswordInput,
            email=command.email,
            code=command.code,
            new_password=command.new_password,
        )
        if validated.is_err():
            return Return.err(validated.error)
        data = validated.value

        hasher = self.deps.password_hasher

        async with self.uow:
            user = await self.uow.users.get_by_email(data.email)
            if user is None:
                return Return.err(INVALID_CODE)

            stored = await self.stored_code(CodePurpose.password_reset, user.email)
            if stored is None:
                return Return.err(
                    Error(ErrorCode.CODE_EXPIRED, "Reset code has expired")
                )

            if not codes_match(stored, data.code):
                return Return.err(INVALID_CODE)

            if await hasher.verify(data.new_password, user.password_hash):
                return Return.err(
                    Error(
                        ErrorCode.INVALID_INPUT,
                        "New password must be different from the old password",
                    )
                )

            user.change_password(await hasher.hash(data.new_password))
            await self.uow.users.update(user)

            await self.uow.commit()

        await self.discard_code(CodePurpose.password_reset, user.email)

        self.logger.info("Password reset for user %s", user.id)
        return Return.ok(
            MessageResponse(
                status="success", message="Password has been reset successfully"
            )
        )
