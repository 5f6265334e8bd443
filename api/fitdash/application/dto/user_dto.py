"""
DTOs de usuarios, perfil y acciones de administracion.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from fitdash.shared.constants.roles import normalize_role
from fitdash.shared.constants.status_constants import to_status


class UserDTO(BaseModel):
    """Usuario con rol y estado ya normalizados."""
    
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    status_changed_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    
    @classmethod
    def from_model(cls, row) -> "UserDTO":
        role = normalize_role(row.role)
        return cls(
            id=row.id,
            email=row.email,
            name=row.name,
            phone=row.phone,
            role=role.value if role else None,
            status=to_status(row.status).value,
            created_at=row.created_at,
            status_changed_at=row.status_changed_at,
            last_login_at=row.last_login_at,
        )


class UserListDTO(BaseModel):
    ok: bool = True
    users: List[UserDTO]


class UserResponseDTO(BaseModel):
    ok: bool = True
    user: UserDTO


class ProfileUpdateDTO(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class ApproveUserRequestDTO(BaseModel):
    """Se identifica la cuenta por id o por email."""
    
    id: Optional[str] = None
    email: Optional[str] = None


class UserStatusUpdateDTO(BaseModel):
    status: str = Field(..., description="PENDING, ACTIVE o SUSPENDED (acepta valores heredados)")


class BroadcastRequestDTO(BaseModel):
    """Notificacion a un usuario concreto, a un rol o a todos."""
    
    user_id: Optional[str] = None
    role: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    body: Optional[str] = None
    type: Optional[str] = Field("broadcast", max_length=50)


class MeasurementDTO(BaseModel):
    id: int
    user_id: str
    measured_at: Optional[datetime] = None
    weight_kg: Optional[float] = None
    body_fat_pct: Optional[float] = None
    bmi: Optional[float] = None
    notes: Optional[str] = None
    
    class Config:
        from_attributes = True


class MeasurementCreateDTO(BaseModel):
    measured_at: Optional[datetime] = None
    weight_kg: Optional[float] = Field(None, gt=0, lt=500)
    body_fat_pct: Optional[float] = Field(None, ge=0, le=100)
    height_cm: Optional[float] = Field(None, gt=0, lt=300, description="Si se indica se calcula el IMC")
    bmi: Optional[float] = Field(None, gt=0, lt=100)
    notes: Optional[str] = None


class MeasurementListDTO(BaseModel):
    ok: bool = True
    metrics: List[MeasurementDTO]


class NoteDTO(BaseModel):
    id: int
    user_id: str
    author_id: Optional[str] = None
    body: str
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class NoteCreateDTO(BaseModel):
    body: str = Field(..., min_length=1)


class NoteListDTO(BaseModel):
    ok: bool = True
    notes: List[NoteDTO]
