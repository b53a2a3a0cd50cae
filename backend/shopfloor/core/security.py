"""
Password hashing and account policy.

Hashing uses Argon2 through passlib. The policy helpers return a list of
human-readable violations so the registration endpoint can report all of
them at once.
"""

import re
import secrets
import string

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__memory_cost=65536,
    argon2__time_cost=3,
    argon2__parallelism=4,
)

MIN_PASSWORD_LENGTH = 8
USERNAME_ALLOWED_CHARACTERS = frozenset(string.ascii_letters + string.digits + "-._@+")
SPECIAL_CHARACTERS = "!@#$%^&*"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def password_policy_violations(password: str) -> list[str]:
    """Check a password against the account policy.

    Args:
        password: Plain text password

    Returns:
        Violated rules, empty when the password is acceptable
    """
    issues = []

    if len(password) < MIN_PASSWORD_LENGTH:
        issues.append(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not re.search(r"\d", password):
        issues.append("Passwords must have at least one digit ('0'-'9').")
    if not re.search(r"[a-z]", password):
        issues.append("Passwords must have at least one lowercase ('a'-'z').")
    if not re.search(r"[A-Z]", password):
        issues.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(ch.isalnum() for ch in password):
        issues.append("Passwords must have at least one non alphanumeric character.")

    return issues


def username_policy_violations(username: str) -> list[str]:
    if any(ch not in USERNAME_ALLOWED_CHARACTERS for ch in username):
        return [
            f"Username '{username}' is invalid, can only contain letters or digits "
            "and the characters -._@+."
        ]
    return []


def generate_secure_password(length: int = 16) -> str:
    """Random password that satisfies ``password_policy_violations``."""
    pools = [
        string.ascii_lowercase,
        string.ascii_uppercase,
        string.digits,
        SPECIAL_CHARACTERS,
    ]
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(length - len(pools))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
