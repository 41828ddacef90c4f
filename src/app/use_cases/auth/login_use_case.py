"""
Login Use Case

Checks credentials and either issues a token pair or signals that a
second factor is required.
"""

from src.app.services.token_issuer import TokenType
from src.domain.errors import ErrorCode
from src.libs.result import Error, Result, Return

from .base import AccountUseCase
from .dtos import LoginCommand, LoginResponse, UserProfile
from .validation import LoginInput, validate_input

INCORRECT_CREDENTIALS = Error(
    ErrorCode.INCORRECT_CREDENTIALS, "Invalid email or password"
)


class LoginUseCase(AccountUseCase[LoginCommand, LoginResponse]):
    """
    Use case for user login and token issuance.

    Business Rules:
    - Unknown email and wrong password produce the identical failure
    - Unknown email still spends a hash verification (timing)
    - Email must be verified, then status must be active
    - Two-factor users get two_factor_required=True, no token pair, and a
      short-lived two_factor challenge token for the verify step
    - remember=True selects the extended token lifetimes
    """

    async def handle(self, command: LoginCommand) -> Result[LoginResponse]:
        self.logger.info("User login attempt %s", command.email)

        rate = await self.check_rate_limit("login", command.email)
        if rate.is_err():
            return Return.err(rate.error)

        validated = validate_input(
            LoginInput, email=command.email, password=command.password
        )
        if validated.is_err():
            return Return.err(validated.error)
        data = validated.value

        async with self.uow:
            user = await self.uow.users.get_by_email(data.email)

        hasher = self.deps.password_hasher
        if user is None:
            await hasher.burn()
            return Return.err(INCORRECT_CREDENTIALS)

        if not await hasher.verify(data.password, user.password_hash):
            return Return.err(INCORRECT_CREDENTIALS)

        state = self.check_user_state(user)
        if state.is_err():
            return Return.err(state.error)

        profile = UserProfile.from_user(user)

        if user.is_two_factor_enabled():
            self.logger.info("Login for user %s requires 2FA", user.id)
            challenge = self.deps.token_issuer.issue(
                user.id, self.policy.two_factor_challenge_ttl, TokenType.two_factor
            )
            return Return.ok(
                LoginResponse(
                    user=profile,
                    two_factor_required=True,
                    two_factor_token=challenge.value,
                    two_factor_token_expires_at=challenge.expires_at,
                )
            )

        tokens = self.issue_token_pair(user.id, remember=command.remember)

        self.logger.info("User %s logged in", user.id)
        return Return.ok(LoginResponse(user=profile, tokens=tokens))
