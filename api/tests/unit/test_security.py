"""
Tests de contraseñas y tokens de sesión.
"""
from datetime import timedelta

import pytest
from jose import jwt

from fitdash.core.security import SESSION_TOKEN_TYPE, SecurityService
from fitdash.shared.exceptions.auth import InvalidCredentialsException, TokenExpiredException


@pytest.fixture
def service():
    return SecurityService(secret_key="test-secret", algorithm="HS256", ttl_minutes=30)


def test_session_token_round_trip_drops_empty_claims(service):
    token = service.create_access_token({"sub": "u-1", "role": "PT", "email": None})

    claims = service.decode_access_token(token)

    assert claims["sub"] == "u-1"
    assert claims["typ"] == SESSION_TOKEN_TYPE
    assert "email" not in claims
    assert claims["exp"] - claims["iat"] == 30 * 60


def test_token_without_session_type_is_rejected(service):
    foreign = jwt.encode({"sub": "u-1", "role": "ADMIN"}, "test-secret", algorithm="HS256")

    with pytest.raises(InvalidCredentialsException):
        service.decode_access_token(foreign)


def test_token_signed_with_other_secret_is_rejected(service):
    token = SecurityService(secret_key="otra", algorithm="HS256").create_access_token({"sub": "u-1"})

    with pytest.raises(InvalidCredentialsException):
        service.decode_access_token(token)


def test_expired_token(service):
    token = service.create_access_token({"sub": "u-1"}, expires_delta=timedelta(minutes=-1))

    with pytest.raises(TokenExpiredException):
        service.decode_access_token(token)


def test_accounts_without_hash_never_validate():
    assert SecurityService.verify_password("x", None) is False
    assert SecurityService.verify_password("x", "") is False
    assert SecurityService.verify_password("x", "not-a-bcrypt-hash") is False
    assert SecurityService.verify_password("segura123", SecurityService.hash_password("segura123"))
