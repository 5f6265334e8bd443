"""
Constructor del dashboard del cliente.

Funcion pura: recibe un ClientDashboardSource (filas ya leidas de la BD) y
devuelve el DTO listo para pintar. No hace I/O ni lee el reloj; `now` viene
en la fuente. Con una fuente vacia devuelve la misma estructura con ceros,
que es lo que se sirve como dashboard de respaldo.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from fitdash.application.dto.client_dashboard_dto import (
    ClientDashboardDTO,
    ClientMeasurementPointDTO,
    ClientMeasurementSnapshotDTO,
    ClientMeasurementTrendDTO,
    ClientNotificationItemDTO,
    ClientNotificationsDTO,
    ClientPlanSummaryDTO,
    ClientRecommendationDTO,
    ClientSessionRowDTO,
    ClientTimelinePointDTO,
    ClientWalletEntryDTO,
    ClientWalletSnapshotDTO,
)
from fitdash.application.dto.common_dto import HeroMetricDTO, HighlightDTO, RangeDTO
from fitdash.domain.entities.dashboard_sources import ClientDashboardSource, SessionRecord
from fitdash.shared.constants.status_constants import SessionState, classify_session
from fitdash.shared.utils.datetime_utils import DateTimeUtils
from fitdash.shared.utils.formatting import format_currency, format_number, format_signed


SESSIONS_LIMIT = 6
WALLET_ENTRIES_LIMIT = 8
NOTIFICATIONS_LIMIT = 6
MEASUREMENT_TIMELINE_LIMIT = 12
HIGHLIGHTS_LIMIT = 4
RECOMMENDATIONS_LIMIT = 4
LOW_WALLET_BALANCE = 20.0

_PLAN_STATUS_LABEL = {
    "ACTIVE": "Activo",
    "DRAFT": "Borrador",
    "ARCHIVED": "Archivado",
    "DELETED": "Eliminado",
}


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = DateTimeUtils.parse(value)
    return parsed.date() if parsed else None


def _newest_first(value: Optional[datetime]) -> Tuple[int, float]:
    """Clave de orden descendente con los valores nulos al final."""
    if value is None:
        return (1, 0.0)
    return (0, -DateTimeUtils.ensure_aware(value).timestamp())


def _plan_status_label(status: Optional[str]) -> str:
    if not status:
        return "Sin estado"
    return _PLAN_STATUS_LABEL.get(status.upper(), status)


def _attendance_state(value: Optional[str]) -> SessionState:
    """La asistencia 'confirmed' del cliente cuenta como sesion realizada."""
    if isinstance(value, str) and value.strip().lower() == "confirmed":
        return SessionState.COMPLETED
    return classify_session(value)


def _compute_plan(source: ClientDashboardSource) -> Tuple[Optional[ClientPlanSummaryDTO], List[HighlightDTO]]:
    if not source.plans:
        return None, []

    now = source.now
    today = now.astimezone(source.tz).date()
    plans = sorted(
        source.plans,
        key=lambda plan: _newest_first(
            DateTimeUtils.parse(plan.updated_at or plan.start_date or plan.end_date)
        ),
    )

    def is_current(plan) -> bool:
        if (plan.status or "").upper() == "ACTIVE":
            return True
        end = _as_date(plan.end_date)
        return end is not None and end >= today

    active = next((plan for plan in plans if is_current(plan)), plans[0])
    start = _as_date(active.start_date)
    end = _as_date(active.end_date)

    progress_pct: Optional[int] = None
    days_remaining: Optional[int] = None
    if start and end:
        total = max(1, (end - start).days)
        elapsed = min(total, max(0, (today - start).days))
        progress_pct = round(elapsed / total * 100)
        days_remaining = max(0, (end - today).days)

    trainer_name = source.trainer_names.get(active.trainer_id) if active.trainer_id else None

    plan = ClientPlanSummaryDTO(
        id=active.id,
        title=active.title or "Plan de entrenamiento",
        status=_plan_status_label(active.status),
        start_date=start.isoformat() if start else None,
        end_date=end.isoformat() if end else None,
        trainer_name=trainer_name,
        progress_pct=progress_pct,
        days_remaining=days_remaining,
        summary=active.notes or None,
    )

    highlights: List[HighlightDTO] = []
    if progress_pct is not None:
        tone = "success" if progress_pct >= 75 else "info" if progress_pct >= 40 else "warning"
        meta = None
        if days_remaining is not None and end:
            meta = f"{days_remaining} día(s) hasta el {end.day:02d}/{end.month:02d}"
        highlights.append(HighlightDTO(
            id="plan-progress",
            title="Progreso del plan",
            description=f"Has completado el {progress_pct}% del ciclo actual.",
            tone=tone,
            icon="📈",
            meta=meta,
        ))

    if start or end:
        aligned = 0
        for session in source.sessions:
            when = DateTimeUtils.parse(session.scheduled_at)
            if when is None:
                continue
            session_day = when.astimezone(source.tz).date()
            if start and session_day < start:
                continue
            if end and session_day > end:
                continue
            aligned += 1
        if aligned:
            highlights.append(HighlightDTO(
                id="plan-sessions",
                title="Sesiones del plan",
                description=f"{aligned} sesión(es) alineadas con este plan.",
                tone="accent",
                icon="🗓️",
            ))

    if not trainer_name:
        highlights.append(HighlightDTO(
            id="plan-trainer",
            title="Asocia un entrenador",
            description="Todavía no hay un PT asignado. Pide al equipo que te asocie uno.",
            tone="warning",
            icon="🧑‍🏫",
        ))

    return plan, highlights


def _build_timeline(
    source: ClientDashboardSource,
    range_start: datetime,
    range_end: datetime
) -> Tuple[List[ClientTimelinePointDTO], int, int]:
    tz = source.tz
    buckets: Dict[str, ClientTimelinePointDTO] = {}
    cursor = range_start
    while cursor <= range_end:
        key = DateTimeUtils.iso_day(cursor, tz)
        buckets[key] = ClientTimelinePointDTO(day=key, label=DateTimeUtils.day_label(cursor, tz))
        cursor = cursor + timedelta(days=1)

    previous_start = range_start - timedelta(days=source.range_days)
    current_completed = 0
    previous_completed = 0

    for session in source.sessions:
        when = DateTimeUtils.parse(session.scheduled_at)
        if when is None:
            continue
        state = _attendance_state(session.attendance_status)
        bucket = buckets.get(DateTimeUtils.iso_day(when, tz))
        if bucket is not None:
            bucket.scheduled += 1
            if state is SessionState.COMPLETED:
                bucket.completed += 1
            elif state is SessionState.CANCELLED:
                bucket.cancelled += 1

        if state is not SessionState.COMPLETED:
            continue
        if range_start <= when <= range_end:
            current_completed += 1
        elif previous_start <= when < range_start:
            previous_completed += 1

    return list(buckets.values()), current_completed, previous_completed


def _build_sessions(source: ClientDashboardSource) -> Tuple[List[ClientSessionRowDTO], int, int]:
    """Filas de proximas sesiones, total futuras y futuras dentro del rango."""
    now = source.now
    horizon = now + timedelta(days=source.range_days)
    upcoming: List[Tuple[datetime, SessionRecord]] = []
    for session in source.sessions:
        when = DateTimeUtils.parse(session.scheduled_at)
        if when is not None and when >= now:
            upcoming.append((when, session))
    upcoming.sort(key=lambda item: item[0])

    rows = [
        ClientSessionRowDTO(
            id=session.id,
            scheduled_at=DateTimeUtils.to_iso_string(when),
            day_label=DateTimeUtils.weekday_label(when, source.tz),
            time_label=DateTimeUtils.time_label(when, source.tz),
            relative=DateTimeUtils.relative_label(when, now),
            location=session.location,
            trainer_name=source.trainer_names.get(session.trainer_id) if session.trainer_id else None,
            status=session.attendance_status,
        )
        for when, session in upcoming[:SESSIONS_LIMIT]
    ]
    in_range = sum(1 for when, _ in upcoming if when <= horizon)
    return rows, len(upcoming), in_range


def _measurement_point(record, tz) -> ClientMeasurementPointDTO:
    when = DateTimeUtils.parse(record.measured_at)
    return ClientMeasurementPointDTO(
        measured_at=DateTimeUtils.to_iso_string(when),
        label=DateTimeUtils.day_label(when, tz) if when else "—",
        weight_kg=record.weight_kg,
        body_fat_pct=record.body_fat_pct,
        bmi=record.bmi,
    )


def _delta(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if current is None or previous is None:
        return None
    return round(current - previous, 1)


def _build_measurements(source: ClientDashboardSource) -> ClientMeasurementSnapshotDTO:
    ordered = sorted(
        source.measurements,
        key=lambda record: _newest_first(DateTimeUtils.parse(record.measured_at)),
    )
    points = [_measurement_point(record, source.tz) for record in ordered]
    current = points[0] if points else None
    previous = points[1] if len(points) > 1 else None

    trend: Optional[ClientMeasurementTrendDTO] = None
    if current and previous:
        weight = _delta(current.weight_kg, previous.weight_kg)
        body_fat = _delta(current.body_fat_pct, previous.body_fat_pct)
        bmi = _delta(current.bmi, previous.bmi)
        tone = "down" if weight and weight < 0 else "up" if weight and weight > 0 else "neutral"
        trend = ClientMeasurementTrendDTO(
            tone=tone,
            weight=format_signed(weight, 1, "kg") if weight else None,
            body_fat=format_signed(body_fat, 1, "pp") if body_fat else None,
            bmi=format_signed(bmi, 1) if bmi else None,
        )
    elif current and current.measured_at:
        stale = DateTimeUtils.calendar_days_between(
            source.now, DateTimeUtils.parse(current.measured_at), source.tz
        )
        if stale > 30:
            trend = ClientMeasurementTrendDTO(tone="neutral")

    return ClientMeasurementSnapshotDTO(
        current=current,
        previous=previous,
        timeline=list(reversed(points[:MEASUREMENT_TIMELINE_LIMIT])),
        trend=trend,
    )


def _build_wallet(source: ClientDashboardSource) -> ClientWalletSnapshotDTO:
    wallet = source.wallet
    entries = sorted(
        source.wallet_entries,
        key=lambda entry: _newest_first(DateTimeUtils.parse(entry.created_at)),
    )[:WALLET_ENTRIES_LIMIT]
    return ClientWalletSnapshotDTO(
        balance=float(wallet.balance or 0) if wallet else 0.0,
        currency=((wallet.currency if wallet else None) or "EUR").upper(),
        updated_at=DateTimeUtils.to_iso_string(DateTimeUtils.parse(wallet.updated_at)) if wallet else None,
        entries=[
            ClientWalletEntryDTO(
                id=entry.id,
                amount=float(entry.amount or 0),
                description=entry.description,
                created_at=DateTimeUtils.to_iso_string(DateTimeUtils.parse(entry.created_at)),
                relative=DateTimeUtils.relative_label(entry.created_at, source.now),
            )
            for entry in entries
        ],
    )


def _build_notifications(source: ClientDashboardSource) -> ClientNotificationsDTO:
    unread = sum(1 for item in source.notifications if item.read is not True)
    ordered = sorted(
        source.notifications,
        key=lambda item: _newest_first(DateTimeUtils.parse(item.created_at)),
    )[:NOTIFICATIONS_LIMIT]
    return ClientNotificationsDTO(
        unread=unread,
        items=[
            ClientNotificationItemDTO(
                id=item.id,
                title=item.title or "Notificación",
                created_at=DateTimeUtils.to_iso_string(DateTimeUtils.parse(item.created_at)),
                relative=DateTimeUtils.relative_label(item.created_at, source.now),
                type=item.type,
                read=bool(item.read),
            )
            for item in ordered
        ],
    )


def _build_hero(
    range_label: str,
    upcoming_count: int,
    current_completed: int,
    previous_completed: int,
    plan: Optional[ClientPlanSummaryDTO],
    wallet: ClientWalletSnapshotDTO,
    measurements: ClientMeasurementSnapshotDTO,
    tz
) -> List[HeroMetricDTO]:
    delta = current_completed - previous_completed
    if current_completed == 0 and previous_completed == 0:
        sessions_trend = "Sin comparación"
    elif delta == 0:
        sessions_trend = "Sin variación"
    else:
        sessions_trend = f"{'+' if delta > 0 else '−'}{format_number(abs(delta))} respecto al periodo anterior"

    hero = [
        HeroMetricDTO(
            key="sessions-upcoming",
            label="Sesiones agendadas",
            value=format_number(upcoming_count),
            hint=f"Próximos {range_label}",
            trend=sessions_trend,
            tone="warning" if upcoming_count == 0 else "success" if upcoming_count >= 4 else "info",
        )
    ]

    plan_end = DateTimeUtils.parse(plan.end_date) if plan else None
    hero.append(HeroMetricDTO(
        key="plan-status",
        label="Plan activo",
        value=plan.title if plan else "Ningún plan activo",
        hint=f"Termina el {DateTimeUtils.day_label(plan_end)}" if plan_end else None,
        trend=f"PT responsable: {plan.trainer_name}" if plan and plan.trainer_name else None,
        tone="accent" if plan else "warning",
    ))

    last_amount = wallet.entries[0].amount if wallet.entries else None
    hero.append(HeroMetricDTO(
        key="wallet-balance",
        label="Saldo de la cartera",
        value=format_currency(wallet.balance, wallet.currency),
        hint=wallet.currency,
        trend=(
            f"{'+' if last_amount > 0 else '−'}{format_currency(abs(last_amount), wallet.currency)} en la última operación"
            if last_amount else None
        ),
        tone="danger" if wallet.balance < 0 else "warning" if wallet.balance == 0 else "success",
    ))

    current = measurements.current
    weight = current.weight_kg if current else None
    measured_at = DateTimeUtils.parse(current.measured_at) if current else None
    trend = measurements.trend
    hero.append(HeroMetricDTO(
        key="weight",
        label="Última medición",
        value=f"{format_number(weight, 1)} kg" if weight is not None else "Sin registros",
        hint=(
            f"Registrada el {DateTimeUtils.day_label(measured_at, tz)}"
            if measured_at else "Añade métricas para seguir tu evolución"
        ),
        trend=(trend.weight or trend.body_fat) if trend else None,
        tone="success" if trend and trend.tone == "down" else "warning" if trend and trend.tone == "up" else "info",
    ))
    return hero


def _build_highlights(
    plan_highlights: List[HighlightDTO],
    upcoming_count: int,
    measurements: ClientMeasurementSnapshotDTO,
    source: ClientDashboardSource
) -> List[HighlightDTO]:
    highlights = list(plan_highlights)

    if upcoming_count == 0:
        highlights.append(HighlightDTO(
            id="schedule-session",
            title="Agenda una nueva sesión",
            description="No hay sesiones agendadas. Mantén la constancia reservando una nueva.",
            tone="info",
            icon="📅",
        ))

    last = DateTimeUtils.parse(measurements.current.measured_at) if measurements.current else None
    if last is None:
        highlights.append(HighlightDTO(
            id="measurement-missing",
            title="Registra tus métricas",
            description="Todavía no hay mediciones recientes. Actualiza peso, composición y notas de progreso.",
            tone="warning",
            icon="📝",
        ))
    else:
        days = DateTimeUtils.calendar_days_between(source.now, last, source.tz)
        if days > 28:
            highlights.append(HighlightDTO(
                id="measurement-stale",
                title="Nueva medición recomendada",
                description=f"Han pasado {days} días desde la última medición.",
                tone="info",
                icon="📊",
            ))

    return highlights[:HIGHLIGHTS_LIMIT]


def _build_recommendations(
    plan: Optional[ClientPlanSummaryDTO],
    wallet: ClientWalletSnapshotDTO,
    upcoming_count: int,
    measurements: ClientMeasurementSnapshotDTO,
    source: ClientDashboardSource
) -> List[ClientRecommendationDTO]:
    recs: List[ClientRecommendationDTO] = []

    if plan is None:
        recs.append(ClientRecommendationDTO(
            id="ask-plan",
            message="Habla con tu PT para recibir un plan alineado con tus objetivos.",
            tone="info",
            icon="🧠",
        ))
    if upcoming_count == 0:
        recs.append(ClientRecommendationDTO(
            id="book-session",
            message="Agenda una sesión para mantener la constancia esta semana.",
            tone="accent",
            icon="🏋️",
        ))
    if wallet.balance < LOW_WALLET_BALANCE:
        recs.append(ClientRecommendationDTO(
            id="wallet-topup",
            message="El saldo de la cartera es bajo. Asegura saldo para tus próximas reservas.",
            tone="warning",
            icon="💳",
        ))

    last = DateTimeUtils.parse(measurements.current.measured_at) if measurements.current else None
    if last is None or DateTimeUtils.calendar_days_between(source.now, last, source.tz) > 45:
        recs.append(ClientRecommendationDTO(
            id="log-measurement",
            message="Registra una nueva medición corporal para seguir tu evolución con tu entrenador.",
            tone="info",
            icon="📏",
        ))

    if not recs:
        recs.append(ClientRecommendationDTO(
            id="keep-going",
            message="¡Excelente ritmo! Sigue registrando sesiones y métricas.",
            tone="success",
            icon="✨",
        ))
    return recs[:RECOMMENDATIONS_LIMIT]


def build_client_dashboard(source: ClientDashboardSource, client_id: Optional[str] = None) -> ClientDashboardDTO:
    """
    Construye el dashboard del cliente.

    Args:
        source: Filas del cliente y `now` de referencia
        client_id: Cliente al que pertenece el dashboard (solo informativo)

    Returns:
        ClientDashboardDTO: Dashboard con `source="db"`; el loader lo
        reetiqueta como `fallback` cuando corresponde.
    """
    now = DateTimeUtils.ensure_aware(source.now)
    range_days = max(1, int(source.range_days))
    source = replace(source, now=now, range_days=range_days)
    range_start = DateTimeUtils.start_of_day(now - timedelta(days=range_days - 1), source.tz)
    range_end = DateTimeUtils.end_of_day(now, source.tz)
    range_label = f"{range_days} días"

    plan, plan_highlights = _compute_plan(source)
    timeline, current_completed, previous_completed = _build_timeline(source, range_start, range_end)
    sessions, upcoming_count, upcoming_in_range = _build_sessions(source)
    measurements = _build_measurements(source)
    wallet = _build_wallet(source)
    notifications = _build_notifications(source)

    return ClientDashboardDTO(
        generated_at=now.isoformat(),
        client_id=client_id,
        range=RangeDTO(
            days=range_days,
            since=range_start.isoformat(),
            until=range_end.isoformat(),
            label=range_label,
        ),
        hero=_build_hero(
            range_label, upcoming_in_range, current_completed, previous_completed,
            plan, wallet, measurements, source.tz,
        ),
        timeline=timeline,
        highlights=_build_highlights(plan_highlights, upcoming_count, measurements, source),
        plan=plan,
        measurements=measurements,
        sessions=sessions,
        wallet=wallet,
        notifications=notifications,
        recommendations=_build_recommendations(plan, wallet, upcoming_count, measurements, source),
    )
