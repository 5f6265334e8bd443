"""
Constantes de estado de las entidades del dominio.
Define estados de usuario, planes, sesiones y salud del sistema.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, Optional


class UserStatus(str, Enum):
    """Ciclo de vida de una cuenta. Solo lo modifican acciones de admin."""
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


_USER_STATUS_ALIASES = {
    "PENDING": UserStatus.PENDING,
    "ACTIVE": UserStatus.ACTIVE,
    "SUSPENDED": UserStatus.SUSPENDED,
    # valores heredados
    "APPROVED": UserStatus.ACTIVE,
    "REJECTED": UserStatus.SUSPENDED,
    "BLOCKED": UserStatus.SUSPENDED,
    "DISABLED": UserStatus.SUSPENDED,
}


def to_status(value: Any, fallback: Optional[UserStatus] = UserStatus.PENDING) -> Optional[UserStatus]:
    """
    Coacciona un valor de estado (incluidos los heredados) a UserStatus.

    >>> to_status("approved")
    <UserStatus.ACTIVE: 'ACTIVE'>
    >>> to_status("bogus")
    <UserStatus.PENDING: 'PENDING'>
    >>> to_status("bogus", fallback=None) is None
    True
    """
    if isinstance(value, UserStatus):
        return value
    if not isinstance(value, str):
        return fallback
    return _USER_STATUS_ALIASES.get(value.strip().upper(), fallback)


def status_aliases(value: Any) -> FrozenSet[str]:
    """
    Valores almacenados (en mayusculas) que se leen como el estado dado.

    >>> sorted(status_aliases("active"))
    ['ACTIVE', 'APPROVED']
    """
    target = to_status(value, fallback=None)
    if target is None:
        return frozenset()
    return frozenset(key for key, status in _USER_STATUS_ALIASES.items() if status is target)


class PlanStatus(str, Enum):
    """Estados de un plan de entrenamiento."""
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


# Estados que cuentan como "plan en vigor" en los dashboards
ACTIVE_PLAN_STATUSES = frozenset({"ACTIVE", "APPROVED", "LIVE", "IN_PROGRESS"})


class SessionState(str, Enum):
    """Clasificacion de una sesion de entreno para agregados."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    PENDING = "pending"
    SCHEDULED = "scheduled"
    UNKNOWN = "unknown"


SESSION_COMPLETED = frozenset({"completed", "done", "finished", "attended", "present"})
SESSION_CANCELLED = frozenset({"cancelled", "canceled", "no_show", "missed", "refused", "declined"})
SESSION_PENDING = frozenset({"pending", "awaiting", "waiting", "requested", "rescheduled"})
SESSION_CONFIRMED = frozenset({"confirmed", "scheduled", "active", "booked"})


def classify_session(status: Any, attendance: Any = None) -> SessionState:
    """
    Clasifica una sesion a partir de su estado y del estado de asistencia.
    Se evalua primero el estado y despues la asistencia.
    """
    for candidate in (status, attendance):
        if not isinstance(candidate, str):
            continue
        value = candidate.strip().lower()
        if value in SESSION_COMPLETED:
            return SessionState.COMPLETED
        if value in SESSION_CANCELLED:
            return SessionState.CANCELLED
        if value in SESSION_CONFIRMED:
            return SessionState.SCHEDULED
        if value in SESSION_PENDING:
            return SessionState.PENDING
    return SessionState.UNKNOWN


class ApprovalStatus(str, Enum):
    """Estado de un pedido (sesion, reagendamiento, registro)."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    OTHER = "other"


def to_approval_status(value: Any) -> ApprovalStatus:
    """Normaliza estados de pedidos ("Approved", "denied", "pend"...)."""
    if not value:
        return ApprovalStatus.PENDING
    raw = str(value).strip().lower()
    if "reject" in raw or "denied" in raw or "declin" in raw or "suspend" in raw:
        return ApprovalStatus.REJECTED
    if "approve" in raw or raw in ("ok", "accepted"):
        return ApprovalStatus.APPROVED
    if "pend" in raw:
        return ApprovalStatus.PENDING
    return ApprovalStatus.OTHER


class HealthStatus(str, Enum):
    """Estado de un servicio o monitor del sistema."""
    OK = "ok"
    WARN = "warn"
    DOWN = "down"


_HEALTH_DOWN = frozenset({"down", "critical", "alert", "error", "offline"})
_HEALTH_WARN = frozenset({"warn", "warning", "caution", "degraded"})


def to_health_status(value: Any) -> HealthStatus:
    """Cualquier valor no reconocido se considera operativo (ok)."""
    normalized = value.strip().lower() if isinstance(value, str) else ""
    if normalized in _HEALTH_DOWN:
        return HealthStatus.DOWN
    if normalized in _HEALTH_WARN:
        return HealthStatus.WARN
    return HealthStatus.OK
