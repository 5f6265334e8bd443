"""
Constructor del dashboard del PT.

Agrega clientes, sesiones, planes y pedidos de un entrenador en metricas,
agenda semanal y fichas por cliente. Funcion pura sobre
TrainerDashboardSource.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, tzinfo
from typing import Dict, List, Optional

from fitdash.application.dto.common_dto import HighlightDTO
from fitdash.application.dto.trainer_dashboard_dto import (
    TrainerAgendaDayDTO,
    TrainerAgendaSessionDTO,
    TrainerApprovalItemDTO,
    TrainerApprovalSummaryDTO,
    TrainerClientSnapshotDTO,
    TrainerDashboardDTO,
    TrainerHeroMetricDTO,
    TrainerTimelinePointDTO,
    TrainerUpcomingSessionDTO,
)
from fitdash.domain.entities.dashboard_sources import TrainerDashboardSource
from fitdash.shared.constants.status_constants import (
    ACTIVE_PLAN_STATUSES,
    ApprovalStatus,
    SessionState,
    classify_session,
    to_approval_status,
)
from fitdash.shared.utils.datetime_utils import DateTimeUtils
from fitdash.shared.utils.formatting import format_number


TIMELINE_DAYS = 14
AGENDA_DAYS = 7
AGENDA_PER_DAY = 6
UPCOMING_LIMIT = 12
RECENT_APPROVALS_LIMIT = 6

_STATUS_LABEL = {
    SessionState.COMPLETED: "Completada",
    SessionState.CANCELLED: "Cancelada",
    SessionState.PENDING: "Pendiente",
    SessionState.SCHEDULED: "Confirmada",
    SessionState.UNKNOWN: "Por definir",
}

_STATUS_TONE = {
    SessionState.COMPLETED: "positive",
    SessionState.CANCELLED: "critical",
    SessionState.PENDING: "warning",
    SessionState.SCHEDULED: "positive",
    SessionState.UNKNOWN: "warning",
}

_APPROVAL_LABEL = {
    ApprovalStatus.APPROVED: ("Aprobado", "positive"),
    ApprovalStatus.REJECTED: ("Rechazado", "critical"),
    ApprovalStatus.PENDING: ("Pendiente", "warning"),
    ApprovalStatus.OTHER: ("Indefinido", "neutral"),
}


@dataclass
class _SessionPoint:
    id: str
    client_id: Optional[str]
    client_name: str
    date: Optional[datetime]
    state: SessionState
    location: Optional[str]


def _session_state(status: Optional[str], attendance: Optional[str]) -> SessionState:
    state = classify_session(status, attendance)
    if state is SessionState.UNKNOWN and status and status.upper() in ACTIVE_PLAN_STATUSES:
        return SessionState.SCHEDULED
    return state


def _same_day(value: Optional[datetime], day: datetime, tz: tzinfo) -> bool:
    return value is not None and value.astimezone(tz).date() == day.date()


def _build_dataset(source: TrainerDashboardSource) -> List[_SessionPoint]:
    lookup = {client.id: client.name or client.email or "Cliente" for client in source.clients}
    dataset = []
    for session in source.sessions:
        client_name = session.client_name or (lookup.get(session.client_id) if session.client_id else None)
        dataset.append(_SessionPoint(
            id=session.id,
            client_id=session.client_id,
            client_name=client_name or "Cliente",
            date=DateTimeUtils.parse(session.scheduled_at),
            state=_session_state(session.status, session.attendance_status),
            location=session.location,
        ))
    return dataset


def _build_hero(source: TrainerDashboardSource, sessions: List[_SessionPoint]) -> List[TrainerHeroMetricDTO]:
    total_clients = len(source.clients)
    active_plans = sum(1 for plan in source.plans if (plan.status or "").upper() in ACTIVE_PLAN_STATUSES)

    week_start = DateTimeUtils.start_of_week(source.now, source.tz)
    week_end = week_start + timedelta(days=7)
    last_week_start = week_start - timedelta(days=7)
    this_week = sum(1 for s in sessions if s.date and week_start <= s.date < week_end)
    last_week = sum(1 for s in sessions if s.date and last_week_start <= s.date < week_start)
    diff = this_week - last_week
    diff_label = "Sin variación" if diff == 0 else f"{'+' if diff > 0 else ''}{diff}"

    pending = sum(1 for approval in source.approvals if to_approval_status(approval.status) is ApprovalStatus.PENDING)

    return [
        TrainerHeroMetricDTO(
            key="clients",
            label="Clientes activos",
            value=format_number(total_clients),
            hint=f"{format_number(active_plans)} plan(es) en seguimiento" if active_plans else "Sin planes activos",
            tone="positive" if total_clients > 0 else "warning",
            href="/dashboard/pt/clients",
        ),
        TrainerHeroMetricDTO(
            key="sessions-week",
            label="Sesiones (7 días)",
            value=format_number(this_week),
            hint="Incluye confirmadas y completadas",
            trend=diff_label,
            tone="positive" if this_week >= 6 else "neutral" if this_week >= 3 else "warning",
            href="/dashboard/pt/sessions",
        ),
        TrainerHeroMetricDTO(
            key="active-plans",
            label="Planes activos",
            value=format_number(active_plans),
            hint="Clientes con plan en vigor" if active_plans else "Revisa los planes de tus clientes",
            tone="positive" if active_plans > 0 else "warning",
            href="/dashboard/pt/plans",
        ),
        TrainerHeroMetricDTO(
            key="approvals",
            label="Pedidos pendientes",
            value=format_number(pending),
            hint="Necesita revisión" if pending else "Todo al día",
            tone="warning" if pending > 0 else "positive",
            href="/dashboard/pt/reschedules",
        ),
    ]


def _build_timeline(sessions: List[_SessionPoint], now: datetime, tz: tzinfo) -> List[TrainerTimelinePointDTO]:
    first_day = DateTimeUtils.start_of_day(now, tz) - timedelta(days=TIMELINE_DAYS - 1)
    points = []
    for index in range(TIMELINE_DAYS):
        day = first_day + timedelta(days=index)
        same_day = [s for s in sessions if _same_day(s.date, day, tz)]
        points.append(TrainerTimelinePointDTO(
            date=day.isoformat(),
            label=DateTimeUtils.day_label(day),
            scheduled=sum(1 for s in same_day if s.state is not SessionState.CANCELLED),
            completed=sum(1 for s in same_day if s.state is SessionState.COMPLETED),
            cancelled=sum(1 for s in same_day if s.state is SessionState.CANCELLED),
        ))
    return points


def _build_agenda(sessions: List[_SessionPoint], now: datetime, tz: tzinfo) -> List[TrainerAgendaDayDTO]:
    today = DateTimeUtils.start_of_day(now, tz)
    agenda = []
    for index in range(AGENDA_DAYS):
        day = today + timedelta(days=index)
        items = sorted((s for s in sessions if _same_day(s.date, day, tz)), key=lambda s: s.date)
        agenda.append(TrainerAgendaDayDTO(
            date=day.isoformat(),
            label=DateTimeUtils.day_label(day),
            total=len(items),
            sessions=[
                TrainerAgendaSessionDTO(
                    id=s.id,
                    start_at=DateTimeUtils.to_iso_string(s.date),
                    time_label=DateTimeUtils.time_label(s.date, tz),
                    client_name=s.client_name,
                    location=s.location,
                    status=_STATUS_LABEL[s.state],
                    tone=_STATUS_TONE[s.state],
                )
                for s in items[:AGENDA_PER_DAY]
            ],
        ))
    return agenda


def _build_upcoming(sessions: List[_SessionPoint], tz: tzinfo) -> List[TrainerUpcomingSessionDTO]:
    ordered = sorted((s for s in sessions if s.date), key=lambda s: s.date)[:UPCOMING_LIMIT]
    return [
        TrainerUpcomingSessionDTO(
            id=s.id,
            start_at=DateTimeUtils.to_iso_string(s.date),
            date_label=DateTimeUtils.long_date_label(s.date, tz),
            time_label=DateTimeUtils.time_label(s.date, tz),
            client_name=s.client_name,
            location=s.location,
            status=_STATUS_LABEL[s.state],
            tone=_STATUS_TONE[s.state],
        )
        for s in ordered
    ]


def _build_client_snapshots(
    source: TrainerDashboardSource,
    sessions: List[_SessionPoint]
) -> List[TrainerClientSnapshotDTO]:
    now = source.now
    grouped: Dict[str, Dict[str, object]] = {}
    for s in sessions:
        if not s.client_id or s.date is None:
            continue
        entry = grouped.setdefault(s.client_id, {"upcoming": 0, "completed": 0, "last": None, "next": None})
        if s.date >= now:
            entry["upcoming"] += 1
            if entry["next"] is None or s.date < entry["next"]:
                entry["next"] = s.date
        else:
            if entry["last"] is None or s.date > entry["last"]:
                entry["last"] = s.date
            if s.state is SessionState.COMPLETED:
                entry["completed"] += 1

    snapshots = []
    for client in source.clients:
        stats = grouped.get(client.id, {"upcoming": 0, "completed": 0, "last": None, "next": None})
        last = stats["last"] or DateTimeUtils.parse(client.last_session_at)
        upcoming_at = stats["next"] or DateTimeUtils.parse(client.next_session_at)
        upcoming = int(stats["upcoming"])
        completed = int(stats["completed"])
        snapshots.append(TrainerClientSnapshotDTO(
            id=client.id,
            name=client.name or "Cliente",
            email=client.email,
            upcoming=upcoming,
            completed=completed,
            last_session_label=DateTimeUtils.relative_label(last, now, "Sin historial"),
            next_session_label=DateTimeUtils.relative_label(upcoming_at, now, "Sin agendar"),
            last_session_at=DateTimeUtils.to_iso_string(last),
            next_session_at=DateTimeUtils.to_iso_string(upcoming_at),
            tone="positive" if upcoming else "neutral" if completed else "warning",
        ))

    snapshots.sort(key=lambda item: (-item.upcoming, -item.completed))
    return snapshots


def _build_approvals(source: TrainerDashboardSource) -> TrainerApprovalSummaryDTO:
    pending = sum(1 for a in source.approvals if to_approval_status(a.status) is ApprovalStatus.PENDING)

    def newest_first(approval):
        requested = DateTimeUtils.parse(approval.requested_at)
        return (1, 0.0) if requested is None else (0, -requested.timestamp())

    recent = []
    for approval in sorted(source.approvals, key=newest_first)[:RECENT_APPROVALS_LIMIT]:
        label, tone = _APPROVAL_LABEL[to_approval_status(approval.status)]
        requested = DateTimeUtils.parse(approval.requested_at)
        recent.append(TrainerApprovalItemDTO(
            id=approval.id,
            client_name=approval.client_name or "Cliente",
            type=approval.type,
            requested_at=DateTimeUtils.to_iso_string(requested),
            requested_label=DateTimeUtils.relative_label(requested, source.now),
            status=label,
            tone=tone,
        ))
    return TrainerApprovalSummaryDTO(pending=pending, recent=recent)


def _build_highlights(
    approvals: TrainerApprovalSummaryDTO,
    clients: List[TrainerClientSnapshotDTO]
) -> List[HighlightDTO]:
    highlights = []
    if approvals.pending > 0:
        highlights.append(HighlightDTO(
            id="pending-approvals",
            title="Pedidos por revisar",
            description="Hay solicitudes de clientes esperando tu decisión.",
            tone="warning",
        ))

    without_upcoming = sum(1 for client in clients if client.upcoming == 0)
    if without_upcoming:
        highlights.append(HighlightDTO(
            id="no-upcoming",
            title="Agenda por completar",
            description=f"{without_upcoming} cliente(s) sin próxima sesión agendada.",
            tone="info",
        ))

    if clients:
        top = clients[0]
        highlights.append(HighlightDTO(
            id="top-client",
            title=f"{top.name} es el cliente más activo",
            description=f"{top.completed} sesión(es) completadas y {top.upcoming} agendada(s).",
            tone="positive",
        ))

    if not highlights:
        highlights.append(HighlightDTO(
            id="all-good",
            title="Todo bajo control",
            description="Planes, sesiones y pedidos están al día. ¡Sigue así!",
            tone="positive",
        ))
    return highlights


def build_trainer_dashboard(source: TrainerDashboardSource) -> TrainerDashboardDTO:
    """Construye el dashboard del PT a partir de su fuente de datos."""
    now = DateTimeUtils.ensure_aware(source.now)
    source = replace(source, now=now)
    tz = source.tz
    dataset = _build_dataset(source)
    today = DateTimeUtils.start_of_day(now, tz)
    from_today = [s for s in dataset if s.date is not None and s.date >= today]

    clients = _build_client_snapshots(source, dataset)
    approvals = _build_approvals(source)

    return TrainerDashboardDTO(
        generated_at=now.isoformat(),
        trainer_id=source.trainer_id,
        trainer_name=source.trainer_name,
        hero=_build_hero(source, dataset),
        timeline=_build_timeline(dataset, now, tz),
        highlights=_build_highlights(approvals, clients),
        agenda=_build_agenda(from_today, now, tz),
        upcoming=_build_upcoming(from_today, tz),
        clients=clients,
        approvals=approvals,
    )
