from shopfloor.core.security import (
    generate_secure_password,
    get_password_hash,
    password_policy_violations,
    username_policy_violations,
    verify_password,
)


def test_password_hash_round_trip() -> None:
    hashed = get_password_hash("Str0ng!Pass")
    assert hashed != "Str0ng!Pass"
    assert hashed.startswith("$argon2")
    assert verify_password("Str0ng!Pass", hashed)
    assert not verify_password("wrong", hashed)


def test_strong_password_has_no_violations() -> None:
    assert password_policy_violations("Str0ng!Pass") == []


def test_weak_password_reports_every_rule() -> None:
    violations = password_policy_violations("abc")
    assert len(violations) == 4
    assert any("at least 8 characters" in v for v in violations)
    assert any("digit" in v for v in violations)
    assert any("uppercase" in v for v in violations)
    assert any("non alphanumeric" in v for v in violations)


def test_username_policy() -> None:
    assert username_policy_violations("jane.doe+shop@plant-1_a") == []
    assert len(username_policy_violations("jane doe!")) == 1


def test_generated_password_satisfies_policy() -> None:
    for _ in range(20):
        password = generate_secure_password()
        assert len(password) == 16
        assert password_policy_violations(password) == []
