"""
DTOs del dashboard de administracion (aprobaciones de cuentas).
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from fitdash.application.dto.common_dto import DashboardEnvelope, HeroMetricDTO, HighlightDTO


class ApprovalStatusSegmentDTO(BaseModel):
    id: str
    label: str
    count: int
    tone: str


class ApprovalTimelinePointDTO(BaseModel):
    date: str
    label: str
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class ApprovalBacklogRowDTO(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    requested_at: Optional[str] = None
    waiting_hours: float = 0.0
    waiting_label: str = "—"
    status: str = "pending"


class ApprovalReviewerStatDTO(BaseModel):
    id: str
    name: str
    approvals: int = 0
    avg_sla_hours: Optional[float] = None


class ApprovalSlaOverviewDTO(BaseModel):
    average_hours: Optional[float] = None
    percentile90_hours: Optional[float] = None
    within_24h: int = 0
    breached: int = 0


class AdminDashboardDTO(DashboardEnvelope):
    """Backlog de aprobaciones y conteo de cuentas."""
    
    sample_size: int = 0
    hero: List[HeroMetricDTO]
    highlights: List[HighlightDTO]
    statuses: List[ApprovalStatusSegmentDTO]
    timeline: List[ApprovalTimelinePointDTO]
    backlog: List[ApprovalBacklogRowDTO]
    reviewers: List[ApprovalReviewerStatDTO]
    sla: ApprovalSlaOverviewDTO
    user_counts: Dict[str, Dict[str, int]] = Field(
        default_factory=dict,
        description="{ADMIN|PT|CLIENT: {PENDING|ACTIVE|SUSPENDED: n}}"
    )
