"""
DTOs de agenda: sesiones de entreno y pedidos de sesion.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TrainingSessionDTO(BaseModel):
    id: str
    trainer_id: Optional[str] = None
    client_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration_min: Optional[int] = None
    location: Optional[str] = None
    status: Optional[str] = None
    client_attendance_status: Optional[str] = None
    notes: Optional[str] = None
    
    class Config:
        from_attributes = True


class SessionCreateDTO(BaseModel):
    client_id: str = Field(..., min_length=1)
    trainer_id: Optional[str] = Field(None, description="Solo admin; por defecto el PT de la sesion")
    scheduled_at: datetime
    duration_min: int = Field(60, ge=5, le=600)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class SessionUpdateDTO(BaseModel):
    scheduled_at: Optional[datetime] = None
    duration_min: Optional[int] = Field(None, ge=5, le=600)
    location: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = Field(None, max_length=30)
    client_attendance_status: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = None


class SessionListDTO(BaseModel):
    ok: bool = True
    sessions: List[TrainingSessionDTO]


class SessionResponseDTO(BaseModel):
    ok: bool = True
    session: TrainingSessionDTO


class SessionRequestDTO(BaseModel):
    id: str
    client_id: str
    trainer_id: Optional[str] = None
    session_id: Optional[str] = None
    kind: str
    requested_start: Optional[datetime] = None
    duration_min: Optional[int] = None
    status: str
    notes: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class SessionRequestCreateDTO(BaseModel):
    """Pedido de nueva sesion o de reagendamiento (con session_id)."""
    
    trainer_id: Optional[str] = None
    session_id: Optional[str] = None
    requested_start: datetime
    duration_min: int = Field(60, ge=5, le=600)
    notes: Optional[str] = None


class SessionRequestDecisionDTO(BaseModel):
    status: str = Field(..., description="approved o rejected")


class SessionRequestResponseDTO(BaseModel):
    ok: bool = True
    request: SessionRequestDTO
    session: Optional[TrainingSessionDTO] = None


class SessionRequestListDTO(BaseModel):
    ok: bool = True
    requests: List[SessionRequestDTO]
