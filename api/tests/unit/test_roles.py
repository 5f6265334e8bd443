"""
Tests de normalizacion de roles y acceso a facturacion.
"""
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from fitdash.shared.constants.roles import (
    Role,
    has_billing_access,
    is_admin,
    is_client,
    is_pt,
    normalize_role,
    to_db_role,
)


@pytest.mark.parametrize("raw, expected", [
    ("ADMIN", Role.ADMIN),
    ("  administrador ", Role.ADMIN),
    ("superuser", Role.ADMIN),
    ("PT", Role.PT),
    ("Trainer", Role.PT),
    ("coach", Role.PT),
    ("treinador", Role.PT),
    ("Personal Trainer", Role.PT),
    ("personal-trainer", Role.PT),
    ("client", Role.CLIENT),
    ("Cliente", Role.CLIENT),
    ("aluno", Role.CLIENT),
    ("USER", Role.CLIENT),
])
def test_normalize_role_synonyms(raw, expected):
    assert normalize_role(raw) is expected


@pytest.mark.parametrize("raw", [None, "", "   ", "owner", 42, ["ADMIN"], {"role": "PT"}])
def test_normalize_role_unknown_values_return_none(raw):
    assert normalize_role(raw) is None


@pytest.mark.parametrize("role", list(Role))
def test_normalize_role_is_idempotent(role):
    assert normalize_role(role) is role
    assert normalize_role(normalize_role(role.value)) is role


def test_to_db_role_uses_storage_names():
    assert to_db_role("coach") == "TRAINER"
    assert to_db_role(Role.ADMIN) == "ADMIN"
    assert to_db_role("cliente") == "CLIENT"
    assert to_db_role("nobody") is None


def test_role_predicates():
    assert is_admin("admin")
    assert is_pt("TRAINER")
    assert is_client("customer")
    assert not is_admin("pt")
    assert not is_client(None)


def test_billing_access_admin_always():
    assert has_billing_access(SimpleNamespace(id="a1", email="a@fit.pt", role="ADMIN"))


def test_billing_access_client_never():
    with patch("fitdash.core.config.settings.BILLING_PT_IDS", "c1"):
        assert not has_billing_access(SimpleNamespace(id="c1", email="c@fit.pt", role="CLIENT"))


def test_billing_access_pt_requires_allow_list():
    trainer = SimpleNamespace(id="pt-1", email="Coach@Fit.pt", role="PT")

    with patch("fitdash.core.config.settings.BILLING_PT_IDS", ""), \
            patch("fitdash.core.config.settings.BILLING_PT_EMAILS", ""):
        assert not has_billing_access(trainer)

    with patch("fitdash.core.config.settings.BILLING_PT_IDS", "pt-9, pt-1"):
        assert has_billing_access(trainer)

    with patch("fitdash.core.config.settings.BILLING_PT_IDS", ""), \
            patch("fitdash.core.config.settings.BILLING_PT_EMAILS", "coach@fit.pt"):
        assert has_billing_access(trainer)


def test_billing_access_without_user():
    assert not has_billing_access(None)
