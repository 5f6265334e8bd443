"""
Datos crudos que alimentan a los dashboards.

Cada loader traduce filas ORM a estos registros planos y los agrupa en un
`*DashboardSource`. Los builders trabajan solo con estas estructuras, asi
que se pueden probar sin base de datos. `empty()` devuelve la fuente vacia
usada por los dashboards de respaldo.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, List, Optional


# Dashboard del cliente

@dataclass
class PlanRecord:
    id: str
    title: Optional[str] = None
    status: Optional[str] = None
    client_id: Optional[str] = None
    trainer_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    updated_at: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass
class SessionRecord:
    id: str
    trainer_id: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration_min: Optional[int] = None
    location: Optional[str] = None
    status: Optional[str] = None
    attendance_status: Optional[str] = None


@dataclass
class NotificationRecord:
    id: str
    title: Optional[str] = None
    type: Optional[str] = None
    read: Optional[bool] = None
    created_at: Optional[datetime] = None


@dataclass
class MeasurementRecord:
    measured_at: Optional[datetime] = None
    weight_kg: Optional[float] = None
    body_fat_pct: Optional[float] = None
    bmi: Optional[float] = None


@dataclass
class WalletRecord:
    balance: Optional[float] = None
    currency: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass
class WalletEntryRecord:
    id: str
    amount: float = 0.0
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class ClientDashboardSource:
    """Fuente del dashboard del cliente."""
    
    now: datetime
    range_days: int = 30
    tz: tzinfo = timezone.utc
    plans: List[PlanRecord] = field(default_factory=list)
    sessions: List[SessionRecord] = field(default_factory=list)
    notifications: List[NotificationRecord] = field(default_factory=list)
    measurements: List[MeasurementRecord] = field(default_factory=list)
    wallet: Optional[WalletRecord] = None
    wallet_entries: List[WalletEntryRecord] = field(default_factory=list)
    trainer_names: Dict[str, str] = field(default_factory=dict)
    
    @classmethod
    def empty(cls, now: datetime, range_days: int = 30, tz: tzinfo = timezone.utc) -> "ClientDashboardSource":
        return cls(now=now, range_days=range_days, tz=tz)


# Dashboard del PT

@dataclass
class TrainerClientRecord:
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    linked_at: Optional[datetime] = None
    last_session_at: Optional[datetime] = None
    next_session_at: Optional[datetime] = None


@dataclass
class TrainerApprovalRecord:
    id: str
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    requested_at: Optional[datetime] = None
    status: Optional[str] = None
    type: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class TrainerDashboardSource:
    """Fuente del dashboard del PT."""
    
    now: datetime
    trainer_id: Optional[str] = None
    trainer_name: Optional[str] = None
    tz: tzinfo = timezone.utc
    clients: List[TrainerClientRecord] = field(default_factory=list)
    sessions: List[SessionRecord] = field(default_factory=list)
    plans: List[PlanRecord] = field(default_factory=list)
    approvals: List[TrainerApprovalRecord] = field(default_factory=list)
    
    @classmethod
    def empty(
        cls,
        now: datetime,
        trainer_id: Optional[str] = None,
        trainer_name: Optional[str] = None,
        tz: tzinfo = timezone.utc
    ) -> "TrainerDashboardSource":
        return cls(now=now, trainer_id=trainer_id, trainer_name=trainer_name, tz=tz)


# Dashboard de admin (aprobaciones de cuentas)

@dataclass
class AccountApprovalRecord:
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    requested_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None
    reviewer_id: Optional[str] = None
    reviewer_name: Optional[str] = None


@dataclass
class AdminDashboardSource:
    """Fuente del dashboard de aprobaciones."""
    
    now: datetime
    tz: tzinfo = timezone.utc
    approvals: List[AccountApprovalRecord] = field(default_factory=list)
    # {role: {status: n}} en formato canonico (ADMIN/PT/CLIENT, PENDING/ACTIVE/SUSPENDED)
    user_counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    
    @classmethod
    def empty(cls, now: datetime, tz: tzinfo = timezone.utc) -> "AdminDashboardSource":
        return cls(now=now, tz=tz)


# Dashboard de mensajes

@dataclass
class MessageRecord:
    id: str
    from_id: Optional[str] = None
    to_id: Optional[str] = None
    from_name: Optional[str] = None
    to_name: Optional[str] = None
    body: Optional[str] = None
    channel: Optional[str] = None
    sent_at: Optional[datetime] = None
    reply_to_id: Optional[str] = None


@dataclass
class MessagesDashboardSource:
    """Fuente del dashboard de mensajes de un usuario."""
    
    now: datetime
    viewer_id: str
    range_days: int = 14
    tz: tzinfo = timezone.utc
    messages: List[MessageRecord] = field(default_factory=list)
    
    @classmethod
    def empty(cls, now: datetime, viewer_id: str, range_days: int = 14, tz: tzinfo = timezone.utc) -> "MessagesDashboardSource":
        return cls(now=now, viewer_id=viewer_id, range_days=range_days, tz=tz)


# Salud del sistema

@dataclass
class ServiceRecord:
    id: str
    name: str = "Servicio"
    summary: Optional[str] = None
    state: Any = None
    latency_ms: Optional[float] = None
    uptime_percent: Optional[float] = None
    incidents_30d: Optional[int] = None
    trend_label: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass
class MonitorRecord:
    id: str
    title: str = "Monitor"
    detail: Optional[str] = None
    status: Any = None
    updated_at: Optional[datetime] = None


@dataclass
class SystemHealthSource:
    """Fuente del dashboard de salud del sistema."""
    
    now: datetime
    services: List[ServiceRecord] = field(default_factory=list)
    monitors: List[MonitorRecord] = field(default_factory=list)
    resilience: List[MonitorRecord] = field(default_factory=list)
    
    @classmethod
    def empty(cls, now: datetime) -> "SystemHealthSource":
        return cls(now=now)
