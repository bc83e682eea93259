"""
JWT Service - primary session token
External adapter for JWT operations
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from adminportal.identity.domain.entities.user import User
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class JWTSessionTokenService:
    """
    Signs and verifies the session token carried in the HTTP-only cookie.

    Claims: ``userId`` (mirrored in ``sub``), ``role``, ``email``,
    ``type=session``, ``iat``, ``exp``. Tenant linkage is deliberately not embedded: it is looked up on
    every request because it can change after the token is issued.
    """

    TOKEN_TYPE = "session"

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiry_days: int = 7) -> None:
        """
        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
            expiry_days: Token lifetime
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expiry = timedelta(days=expiry_days)

    def issue(self, user: User) -> str:
        """
        Generate a session token for a user.

        Args:
            user: Authenticated user

        Returns:
            Encoded JWT token string
        """
        now = datetime.now(timezone.utc)
        expires_at = now + self._expiry
        payload = {
            "userId": user.id,
            "sub": user.id,
            "role": user.role.value,
            "email": user.email,
            "type": self.TOKEN_TYPE,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        logger.debug("session_token_issued", user_id=user.id, expires_at=expires_at.isoformat())
        return token

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a session token.

        Args:
            token: JWT token string

        Returns:
            Decoded token payload

        Raises:
            ExpiredSignatureError: If token has expired
            InvalidTokenError: If token is invalid or not a session token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except ExpiredSignatureError:
            logger.debug("session_token_expired")
            raise
        except InvalidTokenError as e:
            logger.debug("session_token_invalid", error=str(e))
            raise

        if payload.get("type") != self.TOKEN_TYPE:
            raise InvalidTokenError("Invalid token type")
        return payload
