# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

Bearer tokens are issued by the platform's auth service and signed with a
shared HS256 secret. This module validates them and reads the identity
claims (``userId``, ``email``, ``role``, ``isVerified``). Token creation is
kept for tooling and tests that need to mint tokens with the same secret.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="user-123", email="a@b.io", role="student")
    >>> claims = jwt_manager.decode_token(token)
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from src.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Identity claims carried by a bearer token.

    Attributes:
        user_id: Subject user ID (``userId`` claim).
        email: User email.
        role: Role code (admin, instructor, mentor, student, tutor, support).
        is_verified: Whether the account is verified.
        name: Display name, when the issuer includes one.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
    """

    user_id: str
    email: str = ""
    role: str = "student"
    is_verified: bool = False
    name: str | None = None
    exp: int | None = None
    iat: int | None = None


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    def create_access_token(
        self,
        user_id: str,
        email: str,
        role: str,
        is_verified: bool = False,
        name: str | None = None,
        expires_minutes: int | None = None,
    ) -> str:
        """Create an access token in the issuer's claim format.

        Args:
            user_id: User identifier.
            email: User email.
            role: Role code.
            is_verified: Verification flag.
            name: Optional display name.
            expires_minutes: Lifetime override, defaults to the configured one.

        Returns:
            JWT access token string.
        """
        now = datetime.now(timezone.utc)
        lifetime = (
            expires_minutes
            if expires_minutes is not None
            else self._settings.access_token_expire_minutes
        )
        exp = now + timedelta(minutes=lifetime)

        payload = {
            "userId": user_id,
            "email": email,
            "role": role,
            "isVerified": is_verified,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
        }
        if name:
            payload["name"] = name

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or has no userId.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}") from e

        user_id = payload.get("userId")
        if not user_id:
            raise InvalidTokenError("Token has no userId claim")

        is_verified = payload.get("isVerified", False)
        if isinstance(is_verified, str):
            is_verified = is_verified.lower() == "true"

        return TokenPayload(
            user_id=str(user_id),
            email=payload.get("email") or "",
            role=(payload.get("role") or "student").lower(),
            is_verified=bool(is_verified),
            name=payload.get("name"),
            exp=payload.get("exp"),
            iat=payload.get("iat"),
        )

    def verify_token(self, token: str) -> bool:
        """Verify if a token is valid.

        Returns:
            True if token is valid, False otherwise.
        """
        try:
            self.decode_token(token)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False
