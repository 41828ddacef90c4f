"""
Register Use Case

Creates a pending account and emails an email-verification code.
"""

from src.app.repositories.user_repository import EmailAlreadyExistsError
from src.app.services.notification_dispatcher import NotificationKind
from src.domain.entities import User, UserStatus
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .base import AccountUseCase
from .dtos import RegisterCommand, RegisterResponse, UserProfile
from .otp import CodePurpose
from .validation import RegisterInput, validate_input


class RegisterUseCase(AccountUseCase[RegisterCommand, RegisterResponse]):
    """
    Register Use Case

    Business Logic:
    1. Rate limit per email (operation=register)
    2. Validate email, name length, password complexity
    3. In one unit of work: reject taken email, hash password, create the
       pending user, store a fresh email_verification code
    4. Commit, then queue the verification email
    5. A queueing failure deletes the new user and its code again and fails
       the call, so a retry starts from a clean slate
    """

    async def handle(self, command: RegisterCommand) -> Result[RegisterResponse]:
        self.logger.info("Creating new user %s", command.email)

        rate = await self.check_rate_limit("register", command.email)
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(
            RegisterInput,
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
            password=command.password,
        )
        if validated.is_err():
            return Return.err(validated.error)
        data = validated.value

        async with self.uow:
            existing_user = await self.uow.users.get_by_email(data.email)
            if existing_user is not None:
                return Return.err(Error(ErrorCode.CONFLICT, "User already exists"))

            user = User(
                email=data.email,
                first_name=data.first_name,
                last_name=data.last_name,
                password_hash=await self.deps.password_hasher.hash(data.password),
                status=UserStatus.pending,
            )
            try:
                user = await self.uow.users.create(user)
            except EmailAlreadyExistsError:
                # Lost a race with a concurrent registration for the same email
                return Return.err(Error(ErrorCode.CONFLICT, "User already exists"))

            code = await self.issue_code(CodePurpose.email_verification, user.email)

            await self.uow.commit()

        dispatched = await self.dispatch_code_email(
            NotificationKind.send_verify_email, user, code
        )
        if dispatched.is_err():
            await self.undo_registration(user)
            return Return.err(dispatched.error)

        self.logger.info("User %s created", user.id)
        return Return.ok(RegisterResponse(user=UserProfile.from_user(user)))

    async def undo_registration(self, user: User) -> None:
        """Remove a committed registration whose email never got queued"""
        async with self.uow:
            await self.uow.users.delete(user.id)
            await self.uow.commit()

        await self.discard_code(CodePurpose.email_verification, user.email)
        self.logger.info("Rolled back registration of user %s", user.id)
