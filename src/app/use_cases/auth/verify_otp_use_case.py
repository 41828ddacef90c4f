"""
Verify OTP Use Case

Confirms email ownership with the emailed code and activates the account.
"""

from datetime import UTC, datetime

from src.domain.entities import UserStatus
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .base import AccountUseCase
from .dtos import UserProfile, VerifyOTPCommand, VerifyOTPResponse
from .otp import CodePurpose, codes_match
from .validation import VerifyOTPInput, validate_input

INVALID_CODE = Error(ErrorCode.INVALID_CODE, "Invalid verification code")


class VerifyOTPUseCase(AccountUseCase[VerifyOTPCommand, VerifyOTPResponse]):
    """
    Use case for email verification.

    Business Rules:
    - Unknown email reports INVALID_CODE (no account probing)
    - Already verified -> BAD_REQUEST
    - Suspended or inactive -> ACCOUNT_INACTIVE, status left untouched
    - Missing/expired code -> CODE_EXPIRED
    - Mismatch -> INVALID_CODE, stored code kept for retry within its TTL
    - Match -> stamp verification time, pending -> active, then drop the code
    """

    async def handle(self, command: VerifyOTPCommand) -> Result[VerifyOTPResponse]:
        self.logger.info("Verifying OTP for %s", command.email)

        rate = await self.check_rate_limit("verify_otp", command.email)
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(
            VerifyOTPInput, email=command.email, code=command.code
        )
        if validated.is_err():
            return Return.err(validated.error)
        data = validated.value

        async with self.uow:
            user = await self.uow.users.get_by_email(data.email)
            if user is None:
                return Return.err(INVALID_CODE)

            if user.is_email_verified():
                return Return.err(
                    Error(ErrorCode.BAD_REQUEST, "Email already verified")
                )

            if user.status in (UserStatus.suspended, UserStatus.inactive):
                return Return.err(Error(ErrorCode.ACCOUNT_INACTIVE, "User is inactive"))

            stored = await self.stored_code(CodePurpose.email_verification, user.email)
            if stored is None:
                return Return.err(
                    Error(ErrorCode.CODE_EXPIRED, "Verification code has expired")
                )

            if not codes_match(stored, data.code):
                return Return.err(INVALID_CODE)

            user.verify_email(datetime.now(UTC))
            user = await self.uow.users.update(user)

            await self.uow.commit()

        await self.discard_code(CodePurpose.email_verification, user.email)

        self.logger.info("Email verified for user %s", user.id)
        return Return.ok(VerifyOTPResponse(user=UserProfile.from_user(user)))
