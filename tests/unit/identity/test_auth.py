"""
Name: Authentication Tests

Responsibilities:
  - Validate JWT signing/verification (claims, expiry, issuer, tampering)
  - Validate the login flow over the lockout state machine
  - Validate password change through AuthService
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from tienda_api.crosscutting.exceptions import (
    AuthenticationError,
    AuthFailureReason,
    PolicyViolationError,
)
from tienda_api.identity.auth_users import (
    JWT_ALGORITHM,
    TokenService,
    extract_bearer_token,
)

pytestmark = pytest.mark.unit

SECRET = "test-secret-with-enough-length-for-hs256"


# ============================================================
# Tokens
# ============================================================


def test_sign_and_verify_round_trip(token_service, user_repo):
    user = user_repo.get_user(1)
    token, expires_in = token_service.sign(user)
    payload = token_service.verify(token)

    assert expires_in == 30 * 60
    assert payload.user_id == 1
    assert payload.username == "admin"
    assert payload.email == "admin@tienda.com"
    assert payload.role == "admin"
    assert payload.expires_at - payload.issued_at == expires_in


def test_token_carries_expected_claims(token_service, user_repo):
    token, _ = token_service.sign(user_repo.get_user(2))
    claims = jwt.decode(token, SECRET, algorithms=[JWT_ALGORITHM], issuer="tienda-test")
    assert claims["sub"] == "2"
    assert claims["id"] == 2
    assert claims["role"] == "seller"
    assert claims["iss"] == "tienda-test"


def _raw_token(secret=SECRET, **overrides):
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "1",
        "id": 1,
        "username": "admin",
        "email": "admin@tienda.com",
        "role": "admin",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
        "iss": "tienda-test",
    }
    claims.update(overrides)
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


def test_expired_token_is_rejected(token_service):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = _raw_token(
        iat=int((past - timedelta(minutes=5)).timestamp()), exp=int(past.timestamp())
    )
    with pytest.raises(AuthenticationError) as exc_info:
        token_service.verify(token)
    assert exc_info.value.reason is AuthFailureReason.TOKEN_EXPIRED


@pytest.mark.parametrize(
    "token",
    [
        "no-es-un-jwt",
        _raw_token(secret="otro-secreto-distinto-de-la-firma-valida"),
        _raw_token(iss="otro-emisor"),
        _raw_token(sub="2"),
        _raw_token(id="1"),
    ],
)
def test_invalid_tokens_are_rejected(token_service, token):
    with pytest.raises(AuthenticationError) as exc_info:
        token_service.verify(token)
    assert exc_info.value.reason is AuthFailureReason.TOKEN_INVALID


def test_token_service_from_settings():
    from tienda_api.crosscutting.config import Settings

    settings = Settings(jwt_secret=SECRET, jwt_access_ttl_minutes=10, jwt_issuer="x")
    service = TokenService.from_settings(settings)
    _, expires_in = service.sign(
        type("U", (), {"id": 1, "username": "a", "email": "a@b.co", "role": "user"})()
    )
    assert expires_in == 600


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc", "abc"),
        ("bearer   abc ", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
        (None, None),
        ("", None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


# ============================================================
# Login (máquina de estados)
# ============================================================


def test_login_by_username_and_email(auth_service):
    result = auth_service.authenticate("admin", "admin123")
    assert result.user.id == 1
    assert result.token_type == "bearer"
    assert auth_service.resolve_token(result.access_token).id == 1

    assert auth_service.authenticate("ADMIN@tienda.com", "admin123").user.id == 1


def test_unknown_user_is_invalid_credentials(auth_service):
    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.authenticate("fantasma", "x")
    assert exc_info.value.reason is AuthFailureReason.INVALID_CREDENTIALS


def test_wrong_password_increments_attempts(auth_service, user_repo):
    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.authenticate("cliente1", "mal")
    assert exc_info.value.reason is AuthFailureReason.INVALID_CREDENTIALS
    assert user_repo.get_user(3).login_attempts == 1


def test_fifth_failure_locks_and_locked_rejects_valid_password(
    auth_service, user_repo
):
    for _ in range(5):
        with pytest.raises(AuthenticationError):
            auth_service.authenticate("cliente1", "mal")
    assert user_repo.get_user(3).is_locked is True

    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.authenticate("cliente1", "cli123")
    assert exc_info.value.reason is AuthFailureReason.ACCOUNT_LOCKED
    # R: un rechazo por bloqueo no suma intentos
    assert user_repo.get_user(3).login_attempts == 5


@pytest.mark.parametrize(
    "interleaved,reason",
    [
        ("lock", AuthFailureReason.ACCOUNT_LOCKED),
        ("deactivate", AuthFailureReason.ACCOUNT_INACTIVE),
    ],
)
def test_state_change_during_password_check_blocks_login(
    auth_service, user_repo, monkeypatch, interleaved, reason
):
    real_verify = user_repo.verify_password
    last_login_before = user_repo.get_user(3).last_login

    def verify_while_other_requests_land(user_id, password):
        ok = real_verify(user_id, password)
        if interleaved == "lock":
            for _ in range(5):
                user_repo.increment_login_attempts(user_id)
        else:
            user_repo.deactivate_user(user_id)
        return ok

    monkeypatch.setattr(user_repo, "verify_password", verify_while_other_requests_land)

    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.authenticate("cliente1", "cli123")
    assert exc_info.value.reason is reason

    user = user_repo.get_user(3)
    if interleaved == "lock":
        assert user.is_locked is True
        assert user.login_attempts == 5
    assert user.last_login == last_login_before


def test_record_successful_login_does_not_reset_locked_account(user_repo):
    before = user_repo.get_user(7)
    assert before.is_locked is True
    after = user_repo.record_successful_login(7)
    assert after.is_locked is True
    assert after == before


def test_unlock_restores_login(auth_service, user_repo):
    user_repo.unlock_user(7)
    assert auth_service.authenticate("spammer", "blocked").user.id == 7


def test_inactive_account_is_rejected_even_with_valid_password(auth_service):
    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.authenticate("cliente3", "clave123")
    assert exc_info.value.reason is AuthFailureReason.ACCOUNT_INACTIVE


def test_success_resets_attempts_and_stamps_last_login(auth_service, user_repo, clock):
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("cliente2", "mal")
    clock.advance(minutes=1)

    result = auth_service.authenticate("cliente2", "cliente456")
    assert result.user.login_attempts == 0
    assert result.user.last_login == clock.now


def test_resolve_token_rejects_deactivated_user(auth_service, user_repo):
    result = auth_service.authenticate("cliente1", "cli123")
    user_repo.deactivate_user(3)
    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.resolve_token(result.access_token)
    assert exc_info.value.reason is AuthFailureReason.TOKEN_INVALID


# ============================================================
# Cambio de contraseña
# ============================================================


def test_change_password_requires_current_password(auth_service):
    with pytest.raises(AuthenticationError):
        auth_service.change_password(3, "incorrecta", "nueva123")


def test_change_password_enforces_policy(auth_service):
    with pytest.raises(PolicyViolationError):
        auth_service.change_password(3, "cli123", "123")


def test_change_password_then_login_with_new(auth_service):
    auth_service.change_password(3, "cli123", "nueva123")
    assert auth_service.authenticate("cliente1", "nueva123").user.id == 3
