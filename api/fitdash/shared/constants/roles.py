"""
Roles de la aplicacion y su normalizacion.

Los roles llegan de fuentes historicas distintas (enum de la BD, cookies del
login demo, claims del token, formularios antiguos en portugues). Todas pasan
por `normalize_role`, que es total y pura: cualquier entrada devuelve
exactamente un Role o None.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    """Roles canonicos de la aplicacion."""
    ADMIN = "ADMIN"
    PT = "PT"
    CLIENT = "CLIENT"


# Valor persistido en la columna users.role
DB_ROLE: Dict[Role, str] = {
    Role.ADMIN: "ADMIN",
    Role.PT: "TRAINER",
    Role.CLIENT: "CLIENT",
}

_SYNONYMS: Dict[str, Role] = {
    # administracion
    "admin": Role.ADMIN,
    "administrator": Role.ADMIN,
    "administrador": Role.ADMIN,
    "superuser": Role.ADMIN,
    # equipo tecnico
    "pt": Role.PT,
    "trainer": Role.PT,
    "coach": Role.PT,
    "treinador": Role.PT,
    "entrenador": Role.PT,
    "personal_trainer": Role.PT,
    # clientes
    "client": Role.CLIENT,
    "cliente": Role.CLIENT,
    "user": Role.CLIENT,
    "customer": Role.CLIENT,
    "aluno": Role.CLIENT,
    "member": Role.CLIENT,
}


def normalize_role(value: Any) -> Optional[Role]:
    """
    Normaliza cualquier valor con forma de rol al enum canonico.

    Comparacion case-insensitive sobre el texto recortado; guiones y
    espacios cuentan como guion bajo ("Personal Trainer" -> PT).
    Entradas no reconocidas (None, no-strings, vacios) devuelven None.

    Args:
        value: Valor arbitrario (str, Role, None...)

    Returns:
        Optional[Role]: Rol canonico o None
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    if not key:
        return None
    return _SYNONYMS.get(key)


def to_db_role(value: Any) -> Optional[str]:
    """Convierte a la representacion usada en la base de datos."""
    role = normalize_role(value)
    return DB_ROLE[role] if role else None


def is_admin(value: Any) -> bool:
    return normalize_role(value) is Role.ADMIN


def is_pt(value: Any) -> bool:
    return normalize_role(value) is Role.PT


def is_client(value: Any) -> bool:
    return normalize_role(value) is Role.CLIENT


def has_billing_access(user: Any) -> bool:
    """
    Acceso a la facturacion: admins siempre; PTs solo si estan en las
    listas BILLING_PT_IDS / BILLING_PT_EMAILS; clientes nunca.
    """
    # Import tardio para evitar ciclo config -> constants
    from fitdash.core.config import parse_csv_setting, settings

    if user is None:
        return False
    role = normalize_role(getattr(user, "role", None))
    if role is Role.ADMIN:
        return True
    if role is not Role.PT:
        return False

    allowed_ids = set(parse_csv_setting(settings.BILLING_PT_IDS))
    allowed_emails = {email.lower() for email in parse_csv_setting(settings.BILLING_PT_EMAILS)}
    user_id = str(getattr(user, "id", "") or "")
    email = (getattr(user, "email", None) or "").lower()
    return (bool(user_id) and user_id in allowed_ids) or (bool(email) and email in allowed_emails)
