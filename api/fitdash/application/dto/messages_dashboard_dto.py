"""
DTOs del dashboard de mensajes.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from fitdash.application.dto.common_dto import (
    DashboardEnvelope,
    HeroMetricDTO,
    HighlightDTO,
    RangeDTO,
)


class MessageTotalsDTO(BaseModel):
    inbound: int = 0
    outbound: int = 0
    internal: int = 0
    replies: int = 0
    participants: int = 0
    pending_responses: int = 0


class MessageTimelinePointDTO(BaseModel):
    day: str
    label: str
    inbound: int = 0
    outbound: int = 0
    replies: int = 0


class MessageDistributionSegmentDTO(BaseModel):
    key: str
    label: str
    value: int
    percentage: float
    tone: str


class MessageConversationRowDTO(BaseModel):
    id: str
    counterpart_id: Optional[str] = None
    counterpart_name: str
    total_messages: int = 0
    inbound: int = 0
    outbound: int = 0
    internal: int = 0
    last_direction: str
    last_message_at: Optional[str] = None
    average_response_minutes: Optional[float] = None
    pending_responses: int = 0
    main_channel: str
    main_channel_label: str


class MessageListRowDTO(BaseModel):
    id: str
    body: Optional[str] = None
    sent_at: Optional[str] = None
    relative: Optional[str] = None
    from_id: Optional[str] = None
    to_id: Optional[str] = None
    from_name: Optional[str] = None
    to_name: Optional[str] = None
    direction: str
    channel: str
    channel_label: str
    response_minutes: Optional[float] = None


class MessagesDashboardDTO(DashboardEnvelope):
    """Analitica de la bandeja de un usuario."""
    
    viewer_id: str
    range: RangeDTO
    totals: MessageTotalsDTO
    hero: List[HeroMetricDTO]
    timeline: List[MessageTimelinePointDTO]
    distribution: List[MessageDistributionSegmentDTO]
    highlights: List[HighlightDTO]
    conversations: List[MessageConversationRowDTO]
    messages: List[MessageListRowDTO] = Field(default_factory=list)
