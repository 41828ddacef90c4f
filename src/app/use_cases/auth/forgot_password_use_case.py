"""
Forgot Password Use Case

Issues a password-reset code and queues the reset email.
"""

from src.app.services.notification_dispatcher import NotificationKind
from src.libs.result import Result, Return

from .base import AccountUseCase
from .dtos import EmailCommand, MessageResponse
from .otp import CodePurpose
from .validation import EmailInput, validate_input

SENT = MessageResponse(
    status="sent",
    message="If the email exists, a password reset code has been sent",
)


class ForgotPasswordUseCase(AccountUseCase[EmailCommand, MessageResponse]):
    """
    Use case for requesting a password reset code.

    Business Rules:
    - Unknown email: same success, nothing sent (no enumeration)
    - password_reset code is independent of any email_verification code
    """

    async def handle(self, command: EmailCommand) -> Result[MessageResponse]:
        self.logger.info("Forgot password request for %s", command.email)

        rate = await self.check_rate_limit("forgot_password", command.email)
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(EmailInput, email=command.email)
        if validated.is_err():
            return Return.err(validated.error)

        async with self.uow:
            user = await self.uow.users.get_by_email(validated.value.email)

        if user is None:
            return Return.ok(SENT)

        code = await self.issue_code(CodePurpose.password_reset, user.email)

        dispatched = await self.dispatch_code_email(
            NotificationKind.send_forgot_password_email, user, code
        )
        if dispatched.is_err():
            return Return.err(dispatched.error)

        return Return.ok(SENT)
