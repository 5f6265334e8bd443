"""
Tests de resolucion de la sesion (token, cookie de sesion y cookies heredadas).
"""
from datetime import timedelta

import pytest

from fitdash.core.security import security_service
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.security.session_resolver import (
    SessionResolver,
    extract_bearer_token,
)
from fitdash.shared.constants.roles import Role


def _token(**claims) -> str:
    return security_service.create_access_token(claims)


@pytest.fixture
def resolver():
    return SessionResolver(cookie_name="fp_session", legacy_enabled=False)


@pytest.fixture
def legacy_resolver():
    return SessionResolver(cookie_name="fp_session", legacy_enabled=True)


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc", "abc"),
    ("bearer   abc  ", "abc"),
    ("Basic abc", None),
    ("Bearer", None),
    ("", None),
    (None, None),
])
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_resolves_user_from_bearer_header(resolver):
    user = SessionUser(id="u-1", role=Role.PT, email="pt@fit.pt", name="Rita")
    token = security_service.create_access_token(user.to_claims())

    resolved = resolver.resolve_from({"authorization": f"Bearer {token}"}, {})

    assert resolved == user


def test_resolves_user_from_session_cookie(resolver):
    token = _token(sub="u-2", role="cliente")

    resolved = resolver.resolve_from({}, {"fp_session": token})

    assert resolved.id == "u-2"
    assert resolved.role is Role.CLIENT


def test_invalid_token_means_no_session(resolver):
    assert resolver.resolve_from({"authorization": "Bearer not-a-jwt"}, {}) is None


def test_expired_token_means_no_session(resolver):
    token = security_service.create_access_token(
        {"sub": "u-3", "role": "ADMIN"}, expires_delta=timedelta(minutes=-5)
    )
    assert resolver.resolve_from({}, {"fp_session": token}) is None


def test_token_with_unknown_role_or_without_sub_is_rejected(resolver):
    assert resolver.resolve_from({}, {"fp_session": _token(sub="u-4", role="owner")}) is None
    assert resolver.resolve_from({}, {"fp_session": _token(role="ADMIN")}) is None


def test_legacy_cookies_ignored_when_disabled(resolver):
    assert resolver.resolve_from({}, {"role": "ADMIN", "uid": "a-1"}) is None


def test_legacy_cookies_when_enabled(legacy_resolver):
    resolved = legacy_resolver.resolve_from({}, {"role": "trainer", "uid": " pt-7 ", "email": "pt@fit.pt"})

    assert resolved.id == "pt-7"
    assert resolved.role is Role.PT
    assert resolved.email == "pt@fit.pt"


def test_legacy_cookie_without_uid_uses_demo_id(legacy_resolver):
    resolved = legacy_resolver.resolve_from({}, {"role": "cliente"})
    assert resolved.id == "demo-client"
    assert resolved.email is None


def test_legacy_cookie_with_unknown_role(legacy_resolver):
    assert legacy_resolver.resolve_from({}, {"role": "guest"}) is None


def test_token_takes_precedence_over_legacy_cookies(legacy_resolver):
    token = _token(sub="u-5", role="ADMIN")
    resolved = legacy_resolver.resolve_from(
        {"authorization": f"Bearer {token}"}, {"role": "CLIENT", "uid": "c-1"}
    )
    assert resolved.id == "u-5"
    assert resolved.is_admin


def test_broken_token_falls_back_to_legacy_cookies(legacy_resolver):
    resolved = legacy_resolver.resolve_from({}, {"fp_session": "garbage", "role": "admin"})
    assert resolved.role is Role.ADMIN
