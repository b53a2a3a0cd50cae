"""
Authentication service.

Coordinates the user service and the token issuer for password login,
registration, Google sign-in and logout.
"""

import string
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from sqlmodel import Session

from shopfloor.core.exceptions import RegistrationError
from shopfloor.core.observability import AUTH_EVENTS, get_logger
from shopfloor.core.security import generate_secure_password
from shopfloor.models import User

from .jwt_service import JwtService
from .user_service import UserService

logger = get_logger(__name__)

MAX_GENERATED_USERNAME_LENGTH = 20
_USERNAME_CHARACTERS = frozenset(string.ascii_letters + string.digits)

# Process-local; a multi-process deployment needs a shared store (e.g. Redis)
_revoked_tokens: set[str] = set()


@dataclass
class AuthenticationResult:
    success: bool
    token: str | None = None
    user: User | None = None
    error_message: str | None = None
    errors: list[str] = field(default_factory=list)

    @classmethod
    def failed(cls, message: str, errors: list[str] | None = None) -> "AuthenticationResult":
        return cls(success=False, error_message=message, errors=list(errors or []))


class OAuthUserInfo(BaseModel):
    """Identity returned by an external provider."""

    email: str
    name: str | None = None
    provider: str = "google"


def sanitize_username(value: str | None) -> str:
    """Letters and digits only, at most 20 characters, ``user`` when nothing is left."""
    if not value or not value.strip():
        return "user"
    sanitized = "".join(ch for ch in value if ch in _USERNAME_CHARACTERS)
    return sanitized[:MAX_GENERATED_USERNAME_LENGTH] or "user"


def is_token_revoked(token: str) -> bool:
    return token in _revoked_tokens


class AuthenticationService:
    def __init__(self, session: Session, jwt_service: JwtService | None = None) -> None:
        self.users = UserService(session)
        self.jwt = jwt_service or JwtService()

    def authenticate(self, username: str, password: str) -> AuthenticationResult:
        user = self.users.validate_user(username, password)
        if user is None:
            AUTH_EVENTS.labels(event="login", outcome="failure").inc()
            logger.info("Login failed", username=username)
            return AuthenticationResult.failed("Invalid username or password")

        AUTH_EVENTS.labels(event="login", outcome="success").inc()
        logger.info("Login succeeded", user_id=user.id)
        return AuthenticationResult(
            success=True, token=self.jwt.generate_token(user), user=user
        )

    def register(self, username: str, email: str, password: str) -> AuthenticationResult:
        if (username and self.users.get_user_by_username(username)) or (
            email and self.users.get_user_by_email(email)
        ):
            AUTH_EVENTS.labels(event="register", outcome="failure").inc()
            return AuthenticationResult.failed("Username or email already exists")

        try:
            user = self.users.register_user(username, email, password)
        except RegistrationError as e:
            AUTH_EVENTS.labels(event="register", outcome="failure").inc()
            return AuthenticationResult.failed(e.message, e.errors)

        AUTH_EVENTS.labels(event="register", outcome="success").inc()
        return AuthenticationResult(
            success=True, token=self.jwt.generate_token(user), user=user
        )

    def generate_unique_username(self, display_name: str | None, email: str) -> str:
        base = sanitize_username(display_name or email.split("@")[0])
        username = base
        counter = 1
        while self.users.get_user_by_username(username) is not None:
            username = f"{base}{counter}"
            counter += 1
        return username

    def handle_oauth_user(self, info: OAuthUserInfo) -> AuthenticationResult:
        """Sign in an externally authenticated user, creating the account on first use."""
        if not info.email:
            return AuthenticationResult.failed("No email returned from Google")

        user = self.users.get_user_by_email(info.email)
        if user is None:
            username = self.generate_unique_username(info.name, info.email)
            try:
                user = self.users.register_user(
                    username, info.email, generate_secure_password()
                )
            except RegistrationError as e:
                AUTH_EVENTS.labels(event="oauth", outcome="failure").inc()
                return AuthenticationResult.failed(
                    f"Failed to create user: {', '.join(e.errors)}", e.errors
                )
            logger.info(
                "Created user from OAuth login",
                user_id=user.id,
                provider=info.provider,
            )

        AUTH_EVENTS.labels(event="oauth", outcome="success").inc()
        return AuthenticationResult(
            success=True, token=self.jwt.generate_token(user), user=user
        )

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """Claims of a valid, unrevoked token, else None."""
        if is_token_revoked(token):
            return None
        return self.jwt.validate_token(token)

    def revoke_token(self, token: str) -> None:
        _revoked_tokens.add(token)
        AUTH_EVENTS.labels(event="logout", outcome="success").inc()
