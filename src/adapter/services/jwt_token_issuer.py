from datetime import UTC, datetime, timedelta
from typing import Optional, Sequence
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt

from src.app.services.token_issuer import (
    ITokenIssuer,
    InvalidTokenError,
    IssuedToken,
    TokenPayload,
    TokenType,
)

MIN_SECRET_LENGTH = 32


class JwtTokenIssuer(ITokenIssuer):
    """
    HMAC-signed JWT issuer (python-jose).

    Tokens are always signed with ``secret``; ``previous_secrets`` are still
    accepted on verification so a secret can be rotated without logging
    everyone out.
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        algorithm: str = "HS256",
        previous_secrets: Sequence[str] = (),
    ):
        if len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"JWT secret must be at least {MIN_SECRET_LENGTH} characters"
            )
        self.secret = secret
        self.issuer = issuer
        self.algorithm = algorithm
        self.verification_secrets = [secret, *previous_secrets]

    def issue(
        self, subject_id: UUID, ttl: timedelta, token_type: TokenType = TokenType.access
    ) -> IssuedToken:
        """
        Generate a signed token

        Args:
            subject_id: User UUID (``sub`` claim)
            ttl: Lifetime from now
            token_type: access or refresh (``typ`` claim)

        Returns:
            IssuedToken with the encoded token and its expiry
        """
        now = datetime.now(UTC)
        expires_at = now + ttl
        payload = {
            "sub": str(subject_id),
            "typ": token_type.value,
            "iss": self.issuer,
            "iat": now,
            "nbf": now,
            "exp": expires_at,
            "jti": str(uuid4()),
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return IssuedToken(value=token, expires_at=expires_at)

    def verify(
        self, token: str, expected_type: Optional[TokenType] = None
    ) -> TokenPayload:
        """
        Verify and decode a token

        Raises:
            InvalidTokenError: bad signature, expired, wrong issuer/type or
                malformed claims
        """
        claims = None
        for secret in self.verification_secrets:
            try:
                claims = jwt.decode(
                    token, secret, algorithms=[self.algorithm], issuer=self.issuer
                )
                break
            except ExpiredSignatureError as exc:
                raise InvalidTokenError("Token has expired") from exc
            except JWTError:
                continue

        if claims is None:
            raise InvalidTokenError("Invalid token")

        try:
            subject_id = UUID(claims["sub"])
            token_type = TokenType(claims["typ"])
            expires_at = datetime.fromtimestamp(claims["exp"], UTC)
        except (KeyError, ValueError, TypeError) as exc:
            raise InvalidTokenError("Malformed token claims") from exc

        if expected_type is not None and token_type != expected_type:
            raise InvalidTokenError("Unexpected token type")

        return TokenPayload(
            subject_id=subject_id, token_type=token_type, expires_at=expires_at
        )
