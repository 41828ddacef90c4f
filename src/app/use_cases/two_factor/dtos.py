"""
Two-Factor Use Case DTOs
"""

from uuid import UUID

from pydantic import BaseModel

from src.app.use_cases.auth.dtos import TokenPair


class TwoFactorCommand(BaseModel):
    """Input for Setup2FA and Disable2FA"""

    user_id: UUID


class VerifyTwoFactorCommand(BaseModel):
    user_id: UUID
    code: str


class SetupTwoFactorResponse(BaseModel):
    secret: str
    provisioning_uri: str
    qr_code: str  # data:image/png;base64,...


class VerifyTwoFactorResponse(BaseModel):
    verified: bool
    tokens: TokenPair
