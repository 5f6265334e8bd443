"""
Constructor del dashboard de salud del sistema.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, List, Optional

from fitdash.application.dto.common_dto import HeroMetricDTO
from fitdash.application.dto.system_health_dto import (
    StatusTotalsDTO,
    SystemCheckDTO,
    SystemHealthDashboardDTO,
    SystemHealthSummaryDTO,
    SystemServiceDTO,
)
from fitdash.domain.entities.dashboard_sources import MonitorRecord, SystemHealthSource
from fitdash.shared.constants.status_constants import HealthStatus, to_health_status
from fitdash.shared.utils.datetime_utils import DateTimeUtils
from fitdash.shared.utils.formatting import format_fixed, format_number


def _finite(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def format_latency(value: Optional[float]) -> str:
    """850 -> '850 ms'; 1500 -> '1,5 s'."""
    if value is None:
        return "—"
    if value >= 1000:
        return f"{format_number(value / 1000, 1)} s"
    return f"{format_number(value, 1)} ms"


def format_uptime(value: Optional[float]) -> str:
    if value is None:
        return "—"
    return f"{format_fixed(value, 2)}%"


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _totals(states: Iterable[HealthStatus]) -> StatusTotalsDTO:
    totals = StatusTotalsDTO()
    for state in states:
        totals.total += 1
        if state is HealthStatus.DOWN:
            totals.down += 1
        elif state is HealthStatus.WARN:
            totals.warn += 1
        else:
            totals.ok += 1
    return totals


def _overall(*groups: StatusTotalsDTO) -> HealthStatus:
    if any(group.down for group in groups):
        return HealthStatus.DOWN
    if any(group.warn for group in groups):
        return HealthStatus.WARN
    return HealthStatus.OK


def _check(record: MonitorRecord, now: datetime) -> SystemCheckDTO:
    updated = DateTimeUtils.parse(record.updated_at)
    return SystemCheckDTO(
        id=record.id,
        title=record.title,
        detail=record.detail or "",
        status=to_health_status(record.status).value,
        updated_relative=DateTimeUtils.relative_label(updated, now),
        updated_at=DateTimeUtils.to_iso_string(updated),
    )


def _average(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def build_system_health_dashboard(source: SystemHealthSource) -> SystemHealthDashboardDTO:
    """
    Construye el dashboard de salud a partir de servicios, monitores y
    practicas de resiliencia. Sin lecturas muestra una unica tarjeta
    "Sin datos".
    """
    now = DateTimeUtils.ensure_aware(source.now)

    services: List[SystemServiceDTO] = []
    latencies: List[float] = []
    uptimes: List[float] = []
    service_states: List[HealthStatus] = []
    for record in source.services:
        latency = _finite(record.latency_ms)
        uptime = _finite(record.uptime_percent)
        incidents = max(int(_finite(record.incidents_30d) or 0), 0)
        if latency is not None:
            latencies.append(latency)
        if uptime is not None:
            uptimes.append(uptime)
        state = to_health_status(record.state)
        service_states.append(state)
        if record.trend_label and record.trend_label.strip():
            trend = record.trend_label.strip()
        elif incidents > 0:
            trend = f"{incidents} {_plural(incidents, 'incidente', 'incidentes')} en los últimos 30 días"
        else:
            trend = "Sin incidentes en las últimas 4 semanas"
        updated = DateTimeUtils.parse(record.updated_at)
        services.append(SystemServiceDTO(
            id=record.id,
            name=record.name,
            summary=record.summary or "",
            state=state.value,
            latency=format_latency(latency),
            uptime=format_uptime(uptime),
            trend=trend,
            updated_relative=DateTimeUtils.relative_label(updated, now),
            updated_at=DateTimeUtils.to_iso_string(updated),
        ))

    monitors = [_check(record, now) for record in source.monitors]
    resilience = [_check(record, now) for record in source.resilience]

    service_totals = _totals(service_states)
    monitor_totals = _totals(HealthStatus(item.status) for item in monitors)
    resilience_totals = _totals(HealthStatus(item.status) for item in resilience)

    timestamps = [
        parsed for parsed in (
            DateTimeUtils.parse(record.updated_at)
            for record in [*source.services, *source.monitors, *source.resilience]
        ) if parsed is not None
    ]
    latest = max(timestamps) if timestamps else None
    latest_relative = DateTimeUtils.relative_label(latest, now) if latest else None

    hero: List[HeroMetricDTO] = []
    avg_uptime = _average(uptimes)
    if avg_uptime is not None and service_totals.total:
        hero.append(HeroMetricDTO(
            key="availability",
            label="Disponibilidad media",
            value=format_uptime(avg_uptime),
            hint=f"{service_totals.ok}/{service_totals.total} servicios operativos",
            trend=(
                f"{service_totals.down} {_plural(service_totals.down, 'incidente abierto', 'incidentes abiertos')}"
                if service_totals.down else "Sin incidentes abiertos"
            ),
            tone="positive" if avg_uptime >= 99.5 else "warning" if avg_uptime >= 98 else "critical",
        ))

    avg_latency = _average(latencies)
    if avg_latency is not None and service_totals.total:
        hero.append(HeroMetricDTO(
            key="latency",
            label="Latencia media",
            value=format_latency(avg_latency),
            hint=f"Últimas {len(latencies)} lecturas",
            trend=(
                f"{service_totals.warn} {_plural(service_totals.warn, 'servicio', 'servicios')} en observación"
                if service_totals.warn else "Sin alertas de latencia"
            ),
            tone="positive" if avg_latency <= 400 else "warning" if avg_latency <= 900 else "critical",
        ))

    if monitor_totals.total:
        if monitor_totals.down:
            trend = f"{monitor_totals.down} {_plural(monitor_totals.down, 'apagado', 'apagados')}"
        elif monitor_totals.warn:
            trend = f"{monitor_totals.warn} en atención"
        else:
            trend = "Todos operativos"
        hero.append(HeroMetricDTO(
            key="monitors",
            label="Monitores activos",
            value=str(max(monitor_totals.total - monitor_totals.down, 0)),
            hint=f"{monitor_totals.total} {_plural(monitor_totals.total, 'configurado', 'configurados')}",
            trend=trend,
            tone="critical" if monitor_totals.down else "warning" if monitor_totals.warn else "positive",
        ))

    if resilience_totals.total:
        to_review = resilience_totals.down + resilience_totals.warn
        hero.append(HeroMetricDTO(
            key="resilience",
            label="Planes de resiliencia",
            value=f"{resilience_totals.total - resilience_totals.down}/{resilience_totals.total}",
            hint=f"{to_review} por revisar" if to_review else "Cobertura total activa",
            trend=f"Actualizado {latest_relative}" if latest_relative else "Sin lecturas recientes",
            tone="critical" if resilience_totals.down else "warning" if resilience_totals.warn else "positive",
        ))

    if not hero:
        hero.append(HeroMetricDTO(
            key="status",
            label="Monitorización",
            value="Sin datos",
            hint="Todavía no hay lecturas registradas.",
            tone="neutral",
        ))

    return SystemHealthDashboardDTO(
        generated_at=now.isoformat(),
        hero=hero,
        services=services,
        monitors=monitors,
        resilience=resilience,
        summary=SystemHealthSummaryDTO(
            overall_state=_overall(service_totals, monitor_totals, resilience_totals).value,
            last_updated_at=DateTimeUtils.to_iso_string(latest),
            last_updated_relative=latest_relative,
            service_totals=service_totals,
            monitor_totals=monitor_totals,
            resilience_totals=resilience_totals,
        ),
    )
