"""
DTOs del dashboard del cliente.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from fitdash.application.dto.common_dto import (
    DashboardEnvelope,
    HeroMetricDTO,
    HighlightDTO,
    RangeDTO,
)


class ClientTimelinePointDTO(BaseModel):
    day: str
    label: str
    scheduled: int = 0
    completed: int = 0
    cancelled: int = 0


class ClientPlanSummaryDTO(BaseModel):
    id: str
    title: str
    status: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    trainer_name: Optional[str] = None
    progress_pct: Optional[int] = None
    days_remaining: Optional[int] = None
    sessions_completed: Optional[int] = None
    sessions_total: Optional[int] = None
    summary: Optional[str] = None


class ClientMeasurementPointDTO(BaseModel):
    measured_at: Optional[str] = None
    label: str
    weight_kg: Optional[float] = None
    body_fat_pct: Optional[float] = None
    bmi: Optional[float] = None


class ClientMeasurementTrendDTO(BaseModel):
    weight: Optional[str] = None
    body_fat: Optional[str] = None
    bmi: Optional[str] = None
    tone: str = Field("neutral", description="neutral, up o down")


class ClientMeasurementSnapshotDTO(BaseModel):
    current: Optional[ClientMeasurementPointDTO] = None
    previous: Optional[ClientMeasurementPointDTO] = None
    timeline: List[ClientMeasurementPointDTO] = Field(default_factory=list)
    trend: Optional[ClientMeasurementTrendDTO] = None


class ClientSessionRowDTO(BaseModel):
    id: str
    scheduled_at: Optional[str] = None
    day_label: str
    time_label: str
    relative: str
    location: Optional[str] = None
    trainer_name: Optional[str] = None
    status: Optional[str] = None


class ClientWalletEntryDTO(BaseModel):
    id: str
    amount: float
    description: Optional[str] = None
    created_at: Optional[str] = None
    relative: str


class ClientWalletSnapshotDTO(BaseModel):
    balance: float = 0.0
    currency: str = "EUR"
    updated_at: Optional[str] = None
    entries: List[ClientWalletEntryDTO] = Field(default_factory=list)


class ClientNotificationItemDTO(BaseModel):
    id: str
    title: str
    created_at: Optional[str] = None
    relative: str
    type: Optional[str] = None
    read: bool = False


class ClientNotificationsDTO(BaseModel):
    unread: int = 0
    items: List[ClientNotificationItemDTO] = Field(default_factory=list)


class ClientRecommendationDTO(BaseModel):
    id: str
    message: str
    tone: str = "info"
    icon: Optional[str] = None


class ClientDashboardDTO(DashboardEnvelope):
    """Dashboard completo del cliente."""
    
    client_id: Optional[str] = None
    range: RangeDTO
    hero: List[HeroMetricDTO]
    timeline: List[ClientTimelinePointDTO]
    highlights: List[HighlightDTO]
    plan: Optional[ClientPlanSummaryDTO] = None
    measurements: ClientMeasurementSnapshotDTO
    sessions: List[ClientSessionRowDTO]
    wallet: ClientWalletSnapshotDTO
    notifications: ClientNotificationsDTO
    recommendations: List[ClientRecommendationDTO]
