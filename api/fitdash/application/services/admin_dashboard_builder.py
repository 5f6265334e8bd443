"""
Constructor del dashboard de administracion.

Analiza el backlog de aprobaciones de cuentas: segmentos por estado,
SLA de decision, pendientes de mas de 48h, tasa de aprobacion y
revisores mas activos. Los estados de cuenta (PENDING/ACTIVE/SUSPENDED)
se leen como pendiente/aprobado/rechazado.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fitdash.application.dto.admin_dashboard_dto import (
    AdminDashboardDTO,
    ApprovalBacklogRowDTO,
    ApprovalReviewerStatDTO,
    ApprovalSlaOverviewDTO,
    ApprovalStatusSegmentDTO,
    ApprovalTimelinePointDTO,
)
from fitdash.application.dto.common_dto import HeroMetricDTO, HighlightDTO
from fitdash.domain.entities.dashboard_sources import AccountApprovalRecord, AdminDashboardSource
from fitdash.shared.constants.roles import Role
from fitdash.shared.constants.status_constants import (
    ApprovalStatus,
    UserStatus,
    to_approval_status,
)
from fitdash.shared.utils.datetime_utils import DateTimeUtils
from fitdash.shared.utils.formatting import format_duration_minutes, format_number


SLA_TARGET_HOURS = 24
SLA_WARNING_HOURS = 36
BACKLOG_ALERT_HOURS = 48
TIMELINE_DAYS = 14
RECENT_WINDOW_DAYS = 7
BACKLOG_LIMIT = 6
REVIEWERS_LIMIT = 5
HIGHLIGHTS_LIMIT = 4

_ACCOUNT_TO_APPROVAL = {
    UserStatus.PENDING.value: ApprovalStatus.PENDING,
    UserStatus.ACTIVE.value: ApprovalStatus.APPROVED,
    UserStatus.SUSPENDED.value: ApprovalStatus.REJECTED,
}

_SEGMENTS = {
    ApprovalStatus.PENDING: ("Pendientes", "warning"),
    ApprovalStatus.APPROVED: ("Aprobados", "positive"),
    ApprovalStatus.REJECTED: ("Rechazados", "danger"),
    ApprovalStatus.OTHER: ("Otros", "neutral"),
}


def approval_state(value) -> ApprovalStatus:
    """Estado de cuenta o de pedido -> estado de aprobacion."""
    if isinstance(value, str) and value.strip().upper() in _ACCOUNT_TO_APPROVAL:
        return _ACCOUNT_TO_APPROVAL[value.strip().upper()]
    return to_approval_status(value)


def _hours_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    if start is None or end is None:
        return None
    return (end - start).total_seconds() / 3600


def _decision_hours(row: AccountApprovalRecord, now: datetime) -> Optional[float]:
    requested = DateTimeUtils.parse(row.requested_at)
    decided = DateTimeUtils.parse(row.decided_at) or now
    return _hours_between(requested, decided)


def _build_segments(states: List[ApprovalStatus]) -> List[ApprovalStatusSegmentDTO]:
    counts: Dict[ApprovalStatus, int] = {}
    for state in states:
        counts[state] = counts.get(state, 0) + 1
    segments = [
        ApprovalStatusSegmentDTO(id=state.value, label=_SEGMENTS[state][0], count=count, tone=_SEGMENTS[state][1])
        for state, count in counts.items()
    ]
    segments.sort(key=lambda segment: -segment.count)
    return segments


def _build_timeline(
    rows: List[AccountApprovalRecord],
    states: List[ApprovalStatus],
    now: datetime,
    tz
) -> List[ApprovalTimelinePointDTO]:
    first_day = DateTimeUtils.start_of_day(now, tz) - timedelta(days=TIMELINE_DAYS - 1)
    points: Dict[str, ApprovalTimelinePointDTO] = {}
    for index in range(TIMELINE_DAYS):
        day = first_day + timedelta(days=index)
        key = DateTimeUtils.iso_day(day)
        points[key] = ApprovalTimelinePointDTO(date=key, label=DateTimeUtils.day_label(day))

    for row, state in zip(rows, states):
        requested = DateTimeUtils.parse(row.requested_at)
        if requested is not None:
            point = points.get(DateTimeUtils.iso_day(requested, tz))
            if point is not None:
                point.pending += 1
        if state is ApprovalStatus.PENDING:
            continue
        decided = DateTimeUtils.parse(row.decided_at)
        if decided is None:
            continue
        point = points.get(DateTimeUtils.iso_day(decided, tz))
        if point is None:
            continue
        if state is ApprovalStatus.APPROVED:
            point.approved += 1
        elif state is ApprovalStatus.REJECTED:
            point.rejected += 1
    return list(points.values())


def _build_backlog(pending: List[AccountApprovalRecord], now: datetime) -> List[ApprovalBacklogRowDTO]:
    rows = []
    for row in pending:
        waiting = _hours_between(DateTimeUtils.parse(row.requested_at), now) or 0.0
        rows.append(ApprovalBacklogRowDTO(
            id=row.id,
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            requested_at=DateTimeUtils.to_iso_string(DateTimeUtils.parse(row.requested_at)),
            waiting_hours=round(waiting, 1),
            waiting_label=format_duration_minutes(waiting * 60),
        ))
    rows.sort(key=lambda item: -item.waiting_hours)
    return rows[:BACKLOG_LIMIT]


def _build_reviewers(decisions: List[AccountApprovalRecord], states: Dict[str, ApprovalStatus], now: datetime) -> List[ApprovalReviewerStatDTO]:
    buckets: Dict[str, dict] = {}
    for row in decisions:
        reviewer_key = row.reviewer_id or row.reviewer_name or "desconocido"
        name = row.reviewer_name or (f"Revisor {row.reviewer_id}" if row.reviewer_id else "Desconocido")
        bucket = buckets.setdefault(reviewer_key, {"name": name, "approvals": 0, "durations": []})
        if states[row.id] is ApprovalStatus.APPROVED:
            bucket["approvals"] += 1
        duration = _decision_hours(row, now)
        if duration is not None:
            bucket["durations"].append(duration)

    stats = [
        ApprovalReviewerStatDTO(
            id=key,
            name=bucket["name"],
            approvals=bucket["approvals"],
            avg_sla_hours=(
                round(sum(bucket["durations"]) / len(bucket["durations"]), 1)
                if bucket["durations"] else None
            ),
        )
        for key, bucket in buckets.items()
    ]
    stats.sort(key=lambda stat: (
        -stat.approvals,
        stat.avg_sla_hours if stat.avg_sla_hours is not None else math.inf,
    ))
    return stats[:REVIEWERS_LIMIT]


def _build_sla(decisions: List[AccountApprovalRecord], now: datetime) -> ApprovalSlaOverviewDTO:
    durations = sorted(
        duration for duration in (_decision_hours(row, now) for row in decisions) if duration is not None
    )
    if not durations:
        return ApprovalSlaOverviewDTO()
    index = max(0, math.ceil(len(durations) * 0.9) - 1)
    return ApprovalSlaOverviewDTO(
        average_hours=round(sum(durations) / len(durations), 1),
        percentile90_hours=round(durations[index], 1),
        within_24h=sum(1 for value in durations if value <= SLA_TARGET_HOURS),
        breached=sum(1 for value in durations if value > SLA_TARGET_HOURS),
    )


def _sla_tone(hours: Optional[float]) -> str:
    if hours is None:
        return "danger"
    if hours <= SLA_TARGET_HOURS:
        return "positive"
    return "warning" if hours <= SLA_WARNING_HOURS else "danger"


def _normalize_counts(raw: Dict[str, Dict[str, int]]) -> Dict[str, Dict[str, int]]:
    """Asegura las tres claves de rol y de estado aunque esten a cero."""
    counts = {role.value: {status.value: 0 for status in UserStatus} for role in Role}
    for role, statuses in raw.items():
        if role not in counts:
            continue
        for status, total in statuses.items():
            if status in counts[role]:
                counts[role][status] += int(total)
    return counts


def build_admin_dashboard(source: AdminDashboardSource) -> AdminDashboardDTO:
    """
    Construye el dashboard de aprobaciones.

    Args:
        source: Filas de cuentas (pedido/decision) y conteos por rol/estado

    Returns:
        AdminDashboardDTO
    """
    now = DateTimeUtils.ensure_aware(source.now)
    rows = source.approvals
    states = [approval_state(row.status) for row in rows]
    state_by_id = {row.id: state for row, state in zip(rows, states)}

    pending = [row for row, state in zip(rows, states) if state is ApprovalStatus.PENDING]
    approved = [row for row, state in zip(rows, states) if state is ApprovalStatus.APPROVED]
    rejected = [row for row, state in zip(rows, states) if state is ApprovalStatus.REJECTED]
    decisions = approved + rejected

    pending_over_48h = sum(
        1 for row in pending
        if (_hours_between(DateTimeUtils.parse(row.requested_at), now) or 0) > BACKLOG_ALERT_HOURS
    )
    sla_values = [value for value in (_decision_hours(row, now) for row in decisions) if value is not None]
    avg_sla = sum(sla_values) / len(sla_values) if sla_values else None
    approval_rate = len(approved) / len(decisions) * 100 if decisions else None
    recent_limit = now - timedelta(days=RECENT_WINDOW_DAYS)
    approvals_last_7d = sum(
        1 for row in approved
        if DateTimeUtils.parse(row.decided_at) and DateTimeUtils.parse(row.decided_at) >= recent_limit
    )

    hero = [
        HeroMetricDTO(
            key="approvals-pending",
            label="Pedidos pendientes",
            value=format_number(len(pending)),
            hint=(
                f"{format_number(pending_over_48h)} con más de 48h"
                if pending_over_48h else "Todos dentro del SLA"
            ),
            tone="warning" if pending_over_48h else "info",
        ),
        HeroMetricDTO(
            key="approvals-rate",
            label="Tasa de aprobación",
            value=f"{format_number(approval_rate, 1)}%" if approval_rate is not None else "—",
            hint=f"{format_number(len(decisions))} decisiones" if decisions else "Sin decisiones recientes",
            tone="positive" if approval_rate is not None and approval_rate >= 75 else "warning" if decisions else "info",
        ),
        HeroMetricDTO(
            key="approvals-sla",
            label="SLA medio",
            value=f"{format_number(avg_sla, 1)}h" if avg_sla is not None else "—",
            hint=(
                f"{format_number(len(sla_values))} decisiones con SLA calculado"
                if sla_values else "Sin decisiones completadas"
            ),
            tone=_sla_tone(avg_sla),
        ),
        HeroMetricDTO(
            key="approvals-week",
            label="Aprobaciones (7 días)",
            value=format_number(approvals_last_7d),
            hint="Compara con las campañas activas" if approvals_last_7d else "Sin aprobaciones recientes",
            tone="positive" if approvals_last_7d else "info",
        ),
    ]

    reviewers = _build_reviewers(decisions, state_by_id, now)

    highlights: List[HighlightDTO] = []
    if pending_over_48h:
        highlights.append(HighlightDTO(
            id="backlog-alert",
            title=f"{format_number(pending_over_48h)} pedidos fuera del SLA",
            description="Prioriza estas revisiones para no bloquear el alta de clientes y PTs.",
            tone="warning",
        ))
    else:
        highlights.append(HighlightDTO(
            id="backlog-ok",
            title="Backlog dentro del SLA",
            description="Todos los pedidos pendientes están dentro de las 48 horas.",
            tone="positive",
        ))
    if avg_sla is not None:
        highlights.append(HighlightDTO(
            id="sla-status",
            title=f"SLA medio de {format_number(avg_sla, 1)} horas",
            description=(
                "Mantén este tiempo de respuesta para agilizar las altas."
                if avg_sla <= SLA_TARGET_HOURS
                else "Refuerza el equipo de revisión para volver a bajar de 24 horas."
            ),
            tone=_sla_tone(avg_sla),
        ))
    if approval_rate is not None:
        highlights.append(HighlightDTO(
            id="rate-status",
            title=f"{format_number(approval_rate, 1)}% de pedidos aprobados",
            description=(
                "Los formularios de alta están cualificando bien las solicitudes."
                if approval_rate >= 75 else "Revisa los formularios para reducir rechazos evitables."
            ),
            tone="positive" if approval_rate >= 75 else "info",
        ))
    if reviewers:
        top = reviewers[0]
        sla_label = f"{format_number(top.avg_sla_hours, 1)}h" if top.avg_sla_hours is not None else "desconocido"
        highlights.append(HighlightDTO(
            id="reviewer-top",
            title=f"{top.name} lidera las aprobaciones",
            description=f"{format_number(top.approvals)} decisiones recientes con SLA medio {sla_label}.",
            tone="info",
        ))
    if not approvals_last_7d:
        highlights.append(HighlightDTO(
            id="no-approvals",
            title="Sin aprobaciones en los últimos 7 días",
            description="Comprueba si hay nuevos pedidos válidos esperando revisión.",
            tone="warning",
        ))

    return AdminDashboardDTO(
        generated_at=now.isoformat(),
        sample_size=len(rows),
        hero=hero,
        highlights=highlights[:HIGHLIGHTS_LIMIT],
        statuses=_build_segments(states),
        timeline=_build_timeline(rows, states, now, source.tz),
        backlog=_build_backlog(pending, now),
        reviewers=reviewers,
        sla=_build_sla(decisions, now),
        user_counts=_normalize_counts(source.user_counts),
    )
