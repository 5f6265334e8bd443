"""
DTOs de planes de entrenamiento.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PlanDTO(BaseModel):
    id: str
    title: str
    status: str
    client_id: Optional[str] = None
    trainer_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    content: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class PlanCreateDTO(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    client_id: Optional[str] = None
    trainer_id: Optional[str] = Field(None, description="Solo admin; por defecto el PT de la sesion")
    status: Optional[str] = Field("DRAFT", description="DRAFT, ACTIVE, ARCHIVED")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    content: Optional[Dict[str, Any]] = None


class PlanUpdateDTO(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    client_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    content: Optional[Dict[str, Any]] = None


class PlanListDTO(BaseModel):
    ok: bool = True
    plans: List[PlanDTO]


class PlanResponseDTO(BaseModel):
    ok: bool = True
    plan: PlanDTO
