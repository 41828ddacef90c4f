"""
Auth Policy

Tunables the account lifecycle use cases run with. Built from
ApplicationConfig by the dependency layer so use cases never read global
configuration.
"""

from datetime import timedelta

from pydantic import BaseModel, Field


class AuthPolicy(BaseModel):
    """Lifetimes, code shape and rate-limit namespace"""

    otp_code_length: int = Field(default=6, ge=4, le=12)
    otp_ttl: timedelta = timedelta(minutes=15)

    access_token_ttl: timedelta = timedelta(minutes=15)
    access_token_ttl_extended: timedelta = timedelta(hours=1)
    refresh_token_ttl: timedelta = timedelta(hours=24)
    refresh_token_ttl_extended: timedelta = timedelta(days=30)
    two_factor_challenge_ttl: timedelta = timedelta(minutes=5)

    rate_limit_prefix: str = "auth"

    @property
    def otp_ttl_minutes(self) -> int:
        return int(self.otp_ttl.total_seconds() // 60)
