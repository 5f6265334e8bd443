"""
DTOs del dashboard de salud del sistema.
"""
from typing import List, Optional

from pydantic import BaseModel

from fitdash.application.dto.common_dto import DashboardEnvelope, HeroMetricDTO


class SystemServiceDTO(BaseModel):
    id: str
    name: str
    summary: str = ""
    state: str
    latency: str
    uptime: str
    trend: str
    updated_relative: str
    updated_at: Optional[str] = None


class SystemCheckDTO(BaseModel):
    """Monitor o practica de resiliencia."""
    id: str
    title: str
    detail: str = ""
    status: str
    updated_relative: str
    updated_at: Optional[str] = None


class StatusTotalsDTO(BaseModel):
    total: int = 0
    ok: int = 0
    warn: int = 0
    down: int = 0


class SystemHealthSummaryDTO(BaseModel):
    overall_state: str
    last_updated_at: Optional[str] = None
    last_updated_relative: Optional[str] = None
    service_totals: StatusTotalsDTO
    monitor_totals: StatusTotalsDTO
    resilience_totals: StatusTotalsDTO


class SystemHealthDashboardDTO(DashboardEnvelope):
    hero: List[HeroMetricDTO]
    services: List[SystemServiceDTO]
    monitors: List[SystemCheckDTO]
    resilience: List[SystemCheckDTO]
    summary: SystemHealthSummaryDTO
