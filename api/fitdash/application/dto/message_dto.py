"""
DTOs de mensajeria y notificaciones.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageDTO(BaseModel):
    id: str
    from_id: Optional[str] = None
    to_id: Optional[str] = None
    body: Optional[str] = None
    channel: Optional[str] = None
    reply_to_id: Optional[str] = None
    read_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class MessageCreateDTO(BaseModel):
    to_id: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    channel: Optional[str] = Field("app", max_length=30)
    reply_to_id: Optional[str] = None


class MessageListDTO(BaseModel):
    ok: bool = True
    messages: List[MessageDTO]
    unread: int = 0


class MessageResponseDTO(BaseModel):
    ok: bool = True
    message: MessageDTO


class NotificationDTO(BaseModel):
    id: str
    user_id: str
    title: Optional[str] = None
    body: Optional[str] = None
    type: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class NotificationListDTO(BaseModel):
    ok: bool = True
    notifications: List[NotificationDTO]
    unread: int = 0
