"""
JWT issuing and validation.

Access tokens are HS256 tokens signed with ``JWT_KEY`` and bound to the
configured issuer and audience. The same key signs the short-lived ``state``
parameter of the Google OAuth round trip.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from shopfloor.core.config import Settings, settings
from shopfloor.core.observability import get_logger
from shopfloor.models import User

logger = get_logger(__name__)

ALGORITHM = "HS256"
OAUTH_STATE_PURPOSE = "oauth_state"


class JwtService:
    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings

    def generate_token(self, user: User) -> str:
        """Create a signed access token for ``user``.

        Args:
            user: The authenticated user

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": user.id,
            "name": user.username,
            "email": user.email,
            "jti": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + timedelta(minutes=self.config.JWT_EXPIRATION_MINUTES),
            "iss": self.config.JWT_ISSUER,
            "aud": self.config.JWT_AUDIENCE,
        }
        return jwt.encode(to_encode, self.config.JWT_KEY, algorithm=ALGORITHM)

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """Decode and verify an access token.

        Returns:
            The token claims, or None if the token is invalid
        """
        if not token:
            return None
        try:
            return jwt.decode(
                token,
                self.config.JWT_KEY,
                algorithms=[ALGORITHM],
                issuer=self.config.JWT_ISSUER,
                audience=self.config.JWT_AUDIENCE,
                leeway=0,
                options={"require": ["exp", "sub", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token validation failed: token expired")
        except jwt.InvalidSignatureError:
            logger.warning("Token validation failed: invalid signature")
        except jwt.InvalidTokenError as e:
            logger.warning("Token validation failed", error=str(e))
        return None

    def create_oauth_state(self, return_url: str | None = None) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "purpose": OAUTH_STATE_PURPOSE,
            "nonce": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + timedelta(minutes=self.config.OAUTH_STATE_EXPIRE_MINUTES),
        }
        if return_url:
            to_encode["returnUrl"] = return_url
        return jwt.encode(to_encode, self.config.JWT_KEY, algorithm=ALGORITHM)

    def verify_oauth_state(self, state: str) -> dict[str, Any] | None:
        """Return the state payload, or None if it is forged, stale or not a state."""
        try:
            payload = jwt.decode(state, self.config.JWT_KEY, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError as e:
            logger.warning("OAuth state rejected", error=str(e))
            return None
        if payload.get("purpose") != OAUTH_STATE_PURPOSE:
            logger.warning("OAuth state rejected", error="wrong purpose")
            return None
        return payload
