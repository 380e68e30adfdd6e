"""
JWT verification for sessions issued by the identity provider.

The provider and this service share a signing secret. `create_access_token`
exists for local development and tests; production tokens come from the
provider.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from bidproxy.auth.schemas import TokenPayload
from bidproxy.config import Settings, get_settings
from bidproxy.shared.exceptions import InvalidTokenError, TokenExpiredError
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)


class JWTService:
    """Service for JWT token operations."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_access_token(
        self,
        user_id: str,
        email: str | None = None,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            user_id: Identity provider subject, used as the user id.
            email: Optional email claim.
            additional_claims: Extra profile claims (first_name, ...).
            expires_delta: Override of the configured lifetime.

        Returns:
            Encoded JWT.
        """
        now = datetime.now(timezone.utc)
        expires = now + (
            expires_delta
            if expires_delta is not None
            else timedelta(minutes=self._settings.jwt_access_token_expire_minutes)
        )

        payload: dict[str, Any] = {
            "sub": user_id,
            "type": "access",
            "iat": now,
            "exp": expires,
        }
        if email is not None:
            payload["email"] = email
        if additional_claims:
            payload.update(additional_claims)

        return jwt.encode(
            payload,
            self._settings.jwt_secret_key,
            algorithm=self._settings.jwt_algorithm,
        )

    def verify_token(self, token: str) -> TokenPayload:
        """Decode and validate a token.

        Raises:
            TokenExpiredError: If the token is past its expiry.
            InvalidTokenError: For any other decoding failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.jwt_secret_key,
                algorithms=[self._settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid token", extra={"error": str(e)})
            raise InvalidTokenError(details={"error": str(e)}) from e

        try:
            return TokenPayload(**payload)
        except ValueError as e:
            raise InvalidTokenError(
                message="Malformed token payload",
                details={"payload_keys": sorted(payload.keys())},
            ) from e

    def verify_access_token(self, token: str) -> TokenPayload:
        payload = self.verify_token(token)
        if payload.type != "access":
            raise InvalidTokenError(
                message="Invalid token type",
                details={"expected": "access", "got": payload.type},
            )
        return payload

    def get_token_expiry_seconds(self) -> int:
        """Get access token expiry in seconds."""
        return self._settings.jwt_access_token_expire_minutes * 60
