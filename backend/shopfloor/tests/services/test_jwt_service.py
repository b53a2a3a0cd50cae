import jwt

from shopfloor.core.config import settings
from shopfloor.models import User
from shopfloor.services.jwt_service import ALGORITHM, JwtService


def make_user() -> User:
    return User(
        id="3f1c1b8e-0000-4000-8000-000000000001",
        username="alice",
        email="alice@example.com",
        hashed_password="unused",
    )


def test_token_round_trip_carries_user_claims() -> None:
    service = JwtService()
    claims = service.validate_token(service.generate_token(make_user()))

    assert claims is not None
    assert claims["sub"] == "3f1c1b8e-0000-4000-8000-000000000001"
    assert claims["name"] == "alice"
    assert claims["email"] == "alice@example.com"
    assert claims["iss"] == settings.JWT_ISSUER
    assert claims["aud"] == settings.JWT_AUDIENCE
    assert claims["jti"]


def test_each_token_has_a_unique_id() -> None:
    service = JwtService()
    first = service.validate_token(service.generate_token(make_user()))
    second = service.validate_token(service.generate_token(make_user()))
    assert first["jti"] != second["jti"]


def test_expired_token_is_rejected() -> None:
    expired = JwtService(settings.model_copy(update={"JWT_EXPIRATION_MINUTES": -1}))
    token = expired.generate_token(make_user())
    assert JwtService().validate_token(token) is None


def test_tampered_token_is_rejected() -> None:
    service = JwtService()
    header, payload, signature = service.generate_token(make_user()).split(".")
    forged_signature = ("A" if signature[0] != "A" else "B") + signature[1:]
    assert service.validate_token(f"{header}.{payload}.{forged_signature}") is None


def test_token_signed_with_other_key_is_rejected() -> None:
    other = JwtService(
        settings.model_copy(update={"JWT_KEY": "another-key-that-is-long-enough-1234567"})
    )
    assert JwtService().validate_token(other.generate_token(make_user())) is None


def test_wrong_audience_is_rejected() -> None:
    other = JwtService(settings.model_copy(update={"JWT_AUDIENCE": "someone-else"}))
    assert JwtService().validate_token(other.generate_token(make_user())) is None


def test_malformed_token_is_rejected() -> None:
    service = JwtService()
    assert service.validate_token("not-a-jwt") is None
    assert service.validate_token("") is None


def test_oauth_state_round_trip() -> None:
    service = JwtService()
    state = service.create_oauth_state("/dashboard")
    payload = service.verify_oauth_state(state)
    assert payload is not None
    assert payload["returnUrl"] == "/dashboard"


def test_access_token_is_not_a_valid_oauth_state() -> None:
    service = JwtService()
    assert service.verify_oauth_state(service.generate_token(make_user())) is None


def test_state_without_purpose_is_rejected() -> None:
    state = jwt.encode({"nonce": "x"}, settings.JWT_KEY, algorithm=ALGORITHM)
    assert JwtService().verify_oauth_state(state) is None
