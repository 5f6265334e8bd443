"""
Piezas comunes a todos los dashboards.
"""
from typing import Optional

from pydantic import BaseModel, Field


class HeroMetricDTO(BaseModel):
    """Tarjeta de metrica principal."""
    
    key: str = Field(..., description="Identificador estable de la metrica")
    label: str
    value: str
    hint: Optional[str] = None
    trend: Optional[str] = None
    tone: str = Field("neutral", description="info, success, warning, danger, accent, positive, critical, neutral")


class HighlightDTO(BaseModel):
    """Aviso destacado del dashboard."""
    
    id: str
    title: str
    description: str
    tone: str = "info"
    icon: Optional[str] = None
    meta: Optional[str] = None
    value: Optional[str] = None


class RangeDTO(BaseModel):
    """Ventana temporal que cubre el dashboard."""
    
    days: int
    since: str
    until: str
    label: str


class DashboardEnvelope(BaseModel):
    """Campos de sobre compartidos por las respuestas de dashboard."""
    
    ok: bool = True
    source: str = Field("db", description="db o fallback")
    generated_at: str


class OkDTO(BaseModel):
    """Respuesta minima de las acciones sin cuerpo."""
    
    ok: bool = True
    count: Optional[int] = None
