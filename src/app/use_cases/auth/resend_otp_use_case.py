"""
Resend OTP Use Case

Regenerates the email-verification code and queues it again.
"""

from src.app.services.notification_dispatcher import NotificationKind
from src.libs.result import Result, Return

from .base import AccountUseCase
from .dtos import EmailCommand, MessageResponse
from .otp import CodePurpose
from .validation import EmailInput, validate_input

SENT = MessageResponse(
    status="sent",
    message="If the email needs verification, a new code has been sent",
)


class ResendOTPUseCase(AccountUseCase[EmailCommand, MessageResponse]):
    """
    Use case for resending the email-verification code.

    Business Rules:
    - Unknown or already verified email: same success, nothing sent
    - New code replaces the previous one (old code stops working)
    """

    async def handle(self, command: EmailCommand) -> Result[MessageResponse]:
        self.logger.info("Resending OTP for %s", command.email)

        rate = await self.check_rate_limit("resend_otp", command.email)
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(EmailInput, email=command.email)
        if validated.is_err():
            return Return.err(validated.error)

        async with self.uow:
            user = await self.uow.users.get_by_email(validated.value.email)

        if user is None or user.is_email_verified():
            return Return.ok(SENT)

        code = await self.issue_code(CodePurpose.email_verification, user.email)

        dispatched = await self.dispatch_code_email(
            NotificationKind.send_verify_email, user, code
        )
        if dispatched.is_err():
            return Return.err(dispatched.error)

        return Return.ok(SENT)
