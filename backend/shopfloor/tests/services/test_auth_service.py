from sqlmodel import Session

from shopfloor.services.auth_service import (
    AuthenticationService,
    OAuthUserInfo,
    sanitize_username,
)
from shopfloor.services.user_service import UserService
from shopfloor.tests.utils import TEST_PASSWORD


def test_register_returns_token_for_new_user(db: Session) -> None:
    service = AuthenticationService(db)
    result = service.register("alice", "alice@example.com", TEST_PASSWORD)

    assert result.success
    assert result.user.username == "alice"
    claims = service.validate_token(result.token)
    assert claims["sub"] == result.user.id


def test_register_rejects_duplicate_username(db: Session) -> None:
    service = AuthenticationService(db)
    assert service.register("alice", "alice@example.com", TEST_PASSWORD).success

    result = service.register("alice", "other@example.com", TEST_PASSWORD)
    assert not result.success
    assert result.error_message == "Username or email already exists"


def test_register_rejects_duplicate_email(db: Session) -> None:
    service = AuthenticationService(db)
    assert service.register("alice", "alice@example.com", TEST_PASSWORD).success

    result = service.register("bob", "alice@example.com", TEST_PASSWORD)
    assert not result.success
    assert result.error_message == "Username or email already exists"


def test_register_reports_policy_violations(db: Session) -> None:
    result = AuthenticationService(db).register("bad name", "not-an-email", "short")

    assert not result.success
    assert result.error_message == "Registration failed"
    assert any("Username 'bad name' is invalid" in e for e in result.errors)
    assert any("Email 'not-an-email' is invalid" in e for e in result.errors)
    assert any("at least 8 characters" in e for e in result.errors)


def test_authenticate_rejects_wrong_password(db: Session) -> None:
    service = AuthenticationService(db)
    service.register("alice", "alice@example.com", TEST_PASSWORD)

    result = service.authenticate("alice", "Wr0ng!Pass")
    assert not result.success
    assert result.error_message == "Invalid username or password"
    assert result.token is None


def test_authenticate_rejects_unknown_user(db: Session) -> None:
    result = AuthenticationService(db).authenticate("nobody", TEST_PASSWORD)
    assert not result.success
    assert result.error_message == "Invalid username or password"


def test_authenticate_records_last_login(db: Session) -> None:
    service = AuthenticationService(db)
    service.register("alice", "alice@example.com", TEST_PASSWORD)

    result = service.authenticate("alice", TEST_PASSWORD)
    assert result.success
    assert result.user.last_login_at is not None
    assert service.validate_token(result.token)["name"] == "alice"


def test_oauth_creates_user_with_sanitized_name(db: Session) -> None:
    service = AuthenticationService(db)
    result = service.handle_oauth_user(OAuthUserInfo(email="jane@example.com", name="Jane Doe"))

    assert result.success
    assert result.user.username == "JaneDoe"
    assert UserService(db).get_user_by_email("jane@example.com") is not None


def test_oauth_username_gets_numeric_suffix_when_taken(db: Session) -> None:
    service = AuthenticationService(db)
    service.register("JaneDoe", "first@example.com", TEST_PASSWORD)
    service.handle_oauth_user(OAuthUserInfo(email="second@example.com", name="Jane Doe"))
    result = service.handle_oauth_user(OAuthUserInfo(email="third@example.com", name="Jane Doe"))

    assert result.user.username == "JaneDoe2"
    assert UserService(db).get_user_by_username("JaneDoe1").email == "second@example.com"


def test_oauth_falls_back_to_email_local_part(db: Session) -> None:
    result = AuthenticationService(db).handle_oauth_user(
        OAuthUserInfo(email="j.smith@example.com")
    )
    assert result.user.username == "jsmith"


def test_oauth_signs_in_existing_account(db: Session) -> None:
    service = AuthenticationService(db)
    existing = service.register("alice", "alice@example.com", TEST_PASSWORD).user

    result = service.handle_oauth_user(OAuthUserInfo(email="alice@example.com", name="Alice A"))
    assert result.success
    assert result.user.id == existing.id
    assert service.validate_token(result.token)["sub"] == existing.id


def test_sanitize_username() -> None:
    assert sanitize_username("Jane Doe") == "JaneDoe"
    assert sanitize_username("") == "user"
    assert sanitize_username("   ") == "user"
    assert sanitize_username("!!!") == "user"
    assert sanitize_username("a" * 30) == "a" * 20


def test_revoked_token_no_longer_validates(db: Session) -> None:
    service = AuthenticationService(db)
    token = service.register("alice", "alice@example.com", TEST_PASSWORD).token
    assert service.validate_token(token) is not None

    service.revoke_token(token)
    assert service.validate_token(token) is None
