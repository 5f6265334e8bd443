"""
DTOs del dashboard del PT.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from fitdash.application.dto.common_dto import DashboardEnvelope, HeroMetricDTO, HighlightDTO


class TrainerHeroMetricDTO(HeroMetricDTO):
    href: Optional[str] = None


class TrainerTimelinePointDTO(BaseModel):
    date: str
    label: str
    scheduled: int = 0
    completed: int = 0
    cancelled: int = 0


class TrainerAgendaSessionDTO(BaseModel):
    id: str
    start_at: Optional[str] = None
    time_label: str
    client_name: str
    location: Optional[str] = None
    status: str
    tone: str


class TrainerAgendaDayDTO(BaseModel):
    date: str
    label: str
    total: int = 0
    sessions: List[TrainerAgendaSessionDTO] = Field(default_factory=list)


class TrainerUpcomingSessionDTO(BaseModel):
    id: str
    start_at: Optional[str] = None
    date_label: str
    time_label: str
    client_name: str
    location: Optional[str] = None
    status: str
    tone: str


class TrainerClientSnapshotDTO(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    upcoming: int = 0
    completed: int = 0
    last_session_label: str
    next_session_label: str
    last_session_at: Optional[str] = None
    next_session_at: Optional[str] = None
    tone: str = "neutral"


class TrainerApprovalItemDTO(BaseModel):
    id: str
    client_name: str
    type: Optional[str] = None
    requested_at: Optional[str] = None
    requested_label: str
    status: str
    tone: str


class TrainerApprovalSummaryDTO(BaseModel):
    pending: int = 0
    recent: List[TrainerApprovalItemDTO] = Field(default_factory=list)


class TrainerDashboardDTO(DashboardEnvelope):
    """Dashboard completo del PT."""
    
    trainer_id: Optional[str] = None
    trainer_name: Optional[str] = None
    hero: List[TrainerHeroMetricDTO]
    timeline: List[TrainerTimelinePointDTO]
    highlights: List[HighlightDTO]
    agenda: List[TrainerAgendaDayDTO]
    upcoming: List[TrainerUpcomingSessionDTO]
    clients: List[TrainerClientSnapshotDTO]
    approvals: TrainerApprovalSummaryDTO


class TrainerCountsDTO(BaseModel):
    """Contadores de la barra lateral del PT."""
    
    ok: bool = True
    source: str = "db"
    pending_approvals: int = 0
    unread_messages: int = 0
    unread_notifications: int = 0
    upcoming_sessions: int = 0
    clients: int = 0
