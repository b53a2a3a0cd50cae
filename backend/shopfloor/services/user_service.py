"""
User account service.

Looks up users, registers new accounts and checks credentials. Registration
collects every violated rule before failing so the client can show them all.
"""

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session, func, select

from shopfloor.core.exceptions import RegistrationError
from shopfloor.core.observability import get_logger
from shopfloor.core.security import (
    get_password_hash,
    password_policy_violations,
    username_policy_violations,
    verify_password,
)
from shopfloor.models import User
from shopfloor.models.base import utcnow

logger = get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)

# Verified against when the username is unknown so both paths hash once
_DUMMY_PASSWORD_HASH = get_password_hash("timing-equaliser-password")


class UserService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user_by_id(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        """Case-insensitive, as are username lookups."""
        statement = select(User).where(func.lower(User.email) == func.lower(email))
        return self.session.exec(statement).first()

    def get_user_by_username(self, username: str) -> User | None:
        statement = select(User).where(
            func.lower(User.username) == func.lower(username)
        )
        return self.session.exec(statement).first()

    def registration_errors(self, username: str, email: str, password: str) -> list[str]:
        """Return every rule the registration request violates."""
        errors: list[str] = []

        if not username:
            errors.append("Username is required.")
        else:
            errors.extend(username_policy_violations(username))

        if not email:
            errors.append("Email is required.")
        else:
            try:
                _email_adapter.validate_python(email)
            except PydanticValidationError:
                errors.append(f"Email '{email}' is invalid.")

        if not password:
            errors.append("Password is required.")
        else:
            errors.extend(password_policy_violations(password))

        if username and self.get_user_by_username(username):
            errors.append(f"Username '{username}' is already taken.")
        if email and self.get_user_by_email(email):
            errors.append(f"Email '{email}' is already taken.")

        return errors

    def register_user(self, username: str, email: str, password: str) -> User:
        """Create a user account.

        Raises:
            RegistrationError: with the full list of violated rules
        """
        errors = self.registration_errors(username, email, password)
        if errors:
            logger.info("Registration rejected", username=username, errors=errors)
            raise RegistrationError("Registration failed", errors)

        user = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)

        logger.info("User registered", user_id=user.id, username=user.username)
        return user

    def validate_user(self, username: str, password: str) -> User | None:
        """Check credentials and record the login time on success."""
        user = self.get_user_by_username(username)
        if user is None:
            verify_password(password, _DUMMY_PASSWORD_HASH)
            return None

        if not verify_password(password, user.hashed_password):
            return None

        user.last_login_at = utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user
