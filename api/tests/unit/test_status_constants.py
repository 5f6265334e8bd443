"""
Tests de coercion de estados (cuentas, sesiones, pedidos y salud).
"""
import pytest

from fitdash.shared.constants.status_constants import (
    ApprovalStatus,
    HealthStatus,
    SessionState,
    UserStatus,
    classify_session,
    to_approval_status,
    to_health_status,
    to_status,
)


@pytest.mark.parametrize("raw, expected", [
    ("PENDING", UserStatus.PENDING),
    ("active", UserStatus.ACTIVE),
    (" Suspended ", UserStatus.SUSPENDED),
    ("APPROVED", UserStatus.ACTIVE),
    ("rejected", UserStatus.SUSPENDED),
    ("blocked", UserStatus.SUSPENDED),
    ("disabled", UserStatus.SUSPENDED),
])
def test_to_status_accepts_legacy_values(raw, expected):
    assert to_status(raw) is expected


@pytest.mark.parametrize("raw", [None, "", "whatever", 3])
def test_to_status_unknown_values_use_fallback(raw):
    assert to_status(raw) is UserStatus.PENDING
    assert to_status(raw, fallback=None) is None
    assert to_status(raw, fallback=UserStatus.SUSPENDED) is UserStatus.SUSPENDED


def test_to_status_keeps_enum_values():
    assert to_status(UserStatus.ACTIVE, fallback=None) is UserStatus.ACTIVE


@pytest.mark.parametrize("status, attendance, expected", [
    ("completed", None, SessionState.COMPLETED),
    ("DONE", None, SessionState.COMPLETED),
    ("canceled", None, SessionState.CANCELLED),
    ("no_show", None, SessionState.CANCELLED),
    ("scheduled", None, SessionState.SCHEDULED),
    ("requested", None, SessionState.PENDING),
    (None, "attended", SessionState.COMPLETED),
    ("weird", "missed", SessionState.CANCELLED),
    (None, None, SessionState.UNKNOWN),
])
def test_classify_session(status, attendance, expected):
    assert classify_session(status, attendance) is expected


def test_classify_session_status_wins_over_attendance():
    assert classify_session("cancelled", "completed") is SessionState.CANCELLED


@pytest.mark.parametrize("raw, expected", [
    (None, ApprovalStatus.PENDING),
    ("", ApprovalStatus.PENDING),
    ("Approved", ApprovalStatus.APPROVED),
    ("accepted", ApprovalStatus.APPROVED),
    ("denied", ApprovalStatus.REJECTED),
    ("declined", ApprovalStatus.REJECTED),
    ("pending_review", ApprovalStatus.PENDING),
    ("archived", ApprovalStatus.OTHER),
])
def test_to_approval_status(raw, expected):
    assert to_approval_status(raw) is expected


@pytest.mark.parametrize("raw, expected", [
    ("critical", HealthStatus.DOWN),
    ("Offline", HealthStatus.DOWN),
    ("degraded", HealthStatus.WARN),
    ("warning", HealthStatus.WARN),
    ("ok", HealthStatus.OK),
    ("unknown-state", HealthStatus.OK),
    (None, HealthStatus.OK),
])
def test_to_health_status(raw, expected):
    assert to_health_status(raw) is expected
